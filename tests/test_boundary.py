import numpy as np
import pytest

from wind import Field, ObstructionField
from wind.grid import (
    KIND_DENSITY, KIND_VEL_X, KIND_VEL_Y, KIND_VEL_Z, OBSTRUCTION_CLAMP, set_boundary,
)


@pytest.fixture
def field(rng):
    f = Field(5, 6, 7)
    f.interior[...] = rng.random(f.interior.shape)
    return f


@pytest.fixture
def free(field):
    return ObstructionField(*field.dim)


def test_density_faces_copy_interior(field, free):
    set_boundary(field, KIND_DENSITY, free)
    f = field.data

    assert f[0, 2, 3] == f[1, 2, 3]
    assert f[-1, 2, 3] == f[-2, 2, 3]
    assert f[2, 0, 3] == f[2, 1, 3]
    assert f[2, -1, 3] == f[2, -2, 3]
    assert f[2, 3, 0] == f[2, 3, 1]
    assert f[2, 3, -1] == f[2, 3, -2]


@pytest.mark.parametrize("kind,axis", [(KIND_VEL_X, 0), (KIND_VEL_Y, 1), (KIND_VEL_Z, 2)])
def test_velocity_normal_component_negated(field, free, kind, axis):
    set_boundary(field, kind, free)
    f = field.data
    pos = [2, 3, 3]

    for a in range(3):
        ghost = list(pos)
        inner = list(pos)
        ghost[a] = 0
        inner[a] = 1
        sign = -1.0 if a == axis else 1.0
        assert f[tuple(ghost)] == sign * f[tuple(inner)]


def test_edges_average_two_face_neighbours(field, free):
    set_boundary(field, KIND_DENSITY, free)
    f = field.data.astype(np.float64)

    assert f[2, 0, 0] == pytest.approx(0.5 * (f[2, 1, 0] + f[2, 0, 1]))
    assert f[0, 3, -1] == pytest.approx(0.5 * (f[0, 3, -2] + f[1, 3, -1]))
    assert f[-1, -1, 4] == pytest.approx(0.5 * (f[-1, -2, 4] + f[-2, -1, 4]))


def test_corners_average_three_neighbours(field, free):
    set_boundary(field, KIND_VEL_Y, free)
    f = field.data.astype(np.float64)

    assert f[0, 0, 0] == pytest.approx((f[1, 0, 0] + f[0, 1, 0] + f[0, 0, 1]) / 3.0)
    assert f[-1, -1, -1] == pytest.approx((f[-2, -1, -1] + f[-1, -2, -1] + f[-1, -1, -2]) / 3.0)
    assert f[0, -1, 0] == pytest.approx((f[1, -1, 0] + f[0, -2, 0] + f[0, -1, 1]) / 3.0)


def test_solid_cell_gets_negative_neighbour_sum(field, free):
    free.set(2, 3, 3, True)
    f = field.data
    expected = -(f[1, 3, 3] + f[3, 3, 3] + f[2, 2, 3] + f[2, 4, 3] + f[2, 3, 2] + f[2, 3, 4])

    set_boundary(field, KIND_DENSITY, free)

    assert field.get(2, 3, 3) == pytest.approx(float(expected), rel=1e-6)


def test_solid_neighbours_are_skipped():
    f = Field(7, 7, 7)
    f.fill(1.0)
    o = ObstructionField(7, 7, 7)
    o.set(3, 3, 3, True)
    o.set(4, 3, 3, True)

    set_boundary(f, KIND_DENSITY, o)

    assert f.get(3, 3, 3) == -5.0
    assert f.get(4, 3, 3) == -5.0


def test_solid_value_clamped():
    f = Field(5, 5, 5)
    f.fill(50.0)
    o = ObstructionField(5, 5, 5)
    o.set(2, 2, 2, True)

    set_boundary(f, KIND_DENSITY, o)

    assert f.get(2, 2, 2) == -OBSTRUCTION_CLAMP


def test_unknown_kind_rejected(field, free):
    with pytest.raises(ValueError):
        set_boundary(field, "PRESSURE", free)


@pytest.mark.parametrize("dims", [(1, 5, 5), (5, 2, 5), (5, 5, 2)])
def test_field_without_interior_rejected(dims):
    with pytest.raises(ValueError):
        set_boundary(Field(*dims), KIND_DENSITY, ObstructionField(*dims))

import math

import numpy as np
import pytest

from wind import DensityField, Field, ObstructionField, VectorField
from wind.vector_field import gaussian


def test_index_matches_flat_layout():
    f = Field(4, 3, 2)
    f.set(1, 2, 1, 7.0)

    assert f.index(1, 2, 1) == 1 + 4 * 2 + 4 * 3 * 1
    assert f.flat[f.index(1, 2, 1)] == 7.0
    assert f.position(f.index(1, 2, 1)) == (1, 2, 1)


def test_position_out_of_range_raises():
    f = Field(4, 3, 2)
    with pytest.raises(IndexError):
        f.position(f.cell_count)


def test_flat_is_a_writable_view():
    f = Field(3, 3, 3)
    f.flat[f.index(2, 1, 0)] = 4.0
    assert f.get(2, 1, 0) == 4.0


@pytest.mark.parametrize("dims", [(0, 1, 1), (1, 0, 1), (1, 1, 0)])
def test_zero_dimension_rejected(dims):
    with pytest.raises(ValueError):
        Field(*dims)


def test_non_positive_cell_size_rejected():
    with pytest.raises(ValueError):
        Field(2, 2, 2, cell_size=0.0)


def test_swap_exchanges_buffers_without_copy():
    f0 = Field(3, 3, 3)
    f1 = Field(3, 3, 3)
    f0.fill(1.0)
    f1.fill(2.0)
    data0 = f0.data

    Field.swap(f0, f1)

    assert f1.data is data0
    assert np.all(f0.data == 2.0)
    assert np.all(f1.data == 1.0)


def test_swap_dimension_mismatch_raises():
    with pytest.raises(ValueError):
        Field.swap(Field(3, 3, 3), Field(3, 3, 4))


def test_safe_and_clamped_reads():
    f = DensityField(3, 3, 3)
    f.set(2, 2, 2, 5.0)

    assert f.get_safe(-1, 0, 0) == 0
    assert f.get_safe(3, 0, 0, default=9.0) == 9.0
    assert f.get_clamped(10, 10, 10) == 5.0
    assert ObstructionField(3, 3, 3).get_safe(5, 5, 5) is False


def test_on_edge_marks_ghost_shell_only():
    f = Field(4, 4, 4)
    assert f.on_edge(0, 2, 2)
    assert f.on_edge(2, 3, 2)
    assert not f.on_edge(1, 2, 2)


def test_cell_to_meter_scales_by_cell_size():
    f = Field(4, 4, 4, cell_size=0.5)
    np.testing.assert_allclose(f.cell_to_meter(2, 4, 6), [1.0, 2.0, 3.0])
    np.testing.assert_allclose(f.dim_m, [2.0, 2.0, 2.0])


def test_density_total_ignores_ghost_shell():
    f = DensityField(4, 4, 4)
    f.fill(1.0)
    assert f.total() == pytest.approx(8.0)


def test_vector_field_get_set():
    v = VectorField(4, 4, 4)
    v.set(1, 2, 3, (1.0, -2.0, 3.0))

    np.testing.assert_array_equal(v.get(1, 2, 3), [1.0, -2.0, 3.0])
    assert v.y.get(1, 2, 3) == -2.0
    np.testing.assert_array_equal(v.get_offset(v.x.index(1, 2, 3)), [1.0, -2.0, 3.0])
    assert v.as_array().shape == (4, 4, 4, 3)


def test_vector_field_swap_swaps_every_axis():
    a = VectorField(3, 3, 3)
    b = VectorField(3, 3, 3)
    a.fill((1.0, 2.0, 3.0))

    VectorField.swap(a, b)

    np.testing.assert_array_equal(b.get(1, 1, 1), [1.0, 2.0, 3.0])
    np.testing.assert_array_equal(a.get(1, 1, 1), [0.0, 0.0, 0.0])


def test_gaussian_width_floor():
    assert gaussian(0.0, 2.0, 0.0, 0.5) == 2.0
    assert gaussian(1.0, 1.0, 0.0, 0.5) == pytest.approx(math.exp(-0.5))


def test_sample_near_uniform_wind_inside():
    v = VectorField(6, 6, 6)
    v.fill((1.0, 2.0, 3.0))
    np.testing.assert_allclose(v.sample_near((2.5, 2.5, 2.5)), [1.0, 2.0, 3.0], rtol=1e-5)


def test_sample_near_damped_at_border():
    v = VectorField(6, 6, 6)
    v.fill((1.0, 2.0, 3.0))
    sample = v.sample_near((5.5, 5.5, 5.5))
    assert np.linalg.norm(sample) < np.linalg.norm([1.0, 2.0, 3.0])

import numpy as np
import pytest

from wind import Field, ObstructionField, VectorField
from wind.grid import KIND_VEL_X, KIND_VEL_Y, KIND_VEL_Z, set_boundary
from wind.solver import compute_divergence, project


@pytest.fixture
def source_bump():
    """Outward-blowing Gaussian bump in the middle of a 16^3 field."""
    v = VectorField(16, 16, 16)
    idx = np.arange(1, 15, dtype=np.float64) - 7.5
    x, y, z = np.meshgrid(idx, idx, idx, indexing="ij")
    g = np.exp(-(x * x + y * y + z * z) / 8.0)
    v.x.interior[...] = x * g
    v.y.interior[...] = y * g
    v.z.interior[...] = z * g

    o = ObstructionField(16, 16, 16)
    for comp, kind in zip(v.components, (KIND_VEL_X, KIND_VEL_Y, KIND_VEL_Z)):
        set_boundary(comp, kind, o)
    return v, o


def test_zero_field_has_zero_divergence():
    f = Field(6, 6, 6)
    assert not compute_divergence(f, f, f).any()


def test_divergence_of_linear_field():
    # u = x  →  (u(i+1) - u(i-1)) / N = 2 / N
    u = Field(6, 6, 6)
    u.data[...] = np.arange(6, dtype=np.float32)[:, None, None]
    zero = Field(6, 6, 6)

    np.testing.assert_allclose(compute_divergence(u, zero, zero), 2.0 / 4.0)


def test_projection_reduces_divergence(source_bump):
    v, o = source_bump
    before = compute_divergence(v.x, v.y, v.z)

    project(v.x, v.y, v.z, Field(16, 16, 16), Field(16, 16, 16), o)

    after = compute_divergence(v.x, v.y, v.z)
    assert np.sum(after ** 2) < np.sum(before ** 2)


def test_projection_reports_divergence(source_bump):
    v, o = source_bump
    before = np.abs(compute_divergence(v.x, v.y, v.z)).max()

    metrics = project(v.x, v.y, v.z, Field(16, 16, 16), Field(16, 16, 16), o)

    assert metrics["divergence_before_max"] == pytest.approx(before)
    after = np.abs(compute_divergence(v.x, v.y, v.z)).max()
    assert metrics["divergence_after_max"] == pytest.approx(after)


def test_projection_overwrites_scratch_fields(source_bump):
    v, o = source_bump
    prj = Field(16, 16, 16)
    div = Field(16, 16, 16)
    prj.fill(123.0)

    project(v.x, v.y, v.z, prj, div, o)

    assert np.abs(prj.data).max() < 123.0
    assert div.interior.any()

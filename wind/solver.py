"""
solver.py — Pressure Projection
================================
Removes (most of) the divergence from the wind so it behaves like an
incompressible flow. Helmholtz-Hodge: any vector field = divergence-free
part + gradient of a scalar potential. We estimate the potential and
subtract its gradient.

Steps:
  1. div = -(1/3) * (central-difference divergence) / N,   p = 0
  2. Fix the ghost shell of div and p
  3. Poisson solve for p: same Gauss-Seidel relaxation as diffusion, with
     a = 1, c = 6, 10 sweeps (p is NOT fully converged afterwards)
  4. u -= 0.5 * N * (p(i+1) - p(i-1)), same for v and w
  5. Fix the ghost shell of u, v, w with their own axis kinds

The two scratch buffers (p, div) are borrowed from the caller. The
simulation lends it the previous-velocity X and Y components.
"""

import numpy as np

from .diffuse import gauss_seidel
from .field import Field
from .grid import KIND_DENSITY, KIND_VEL_X, KIND_VEL_Y, KIND_VEL_Z, set_boundary
from .obstruction_field import ObstructionField


def compute_divergence(u: Field, v: Field, w: Field) -> np.ndarray:
    """
    Central-difference divergence of (u, v, w) on the interior.

        ((u(i+1) - u(i-1)) + (v(j+1) - v(j-1)) + (w(k+1) - w(k-1))) / N

    Returns: array of shape (width-2, height-2, depth-2)
    """
    n = max(u.width, u.height, u.depth) - 2
    ud, vd, wd = u.data, v.data, w.data
    return ((ud[2:, 1:-1, 1:-1] - ud[:-2, 1:-1, 1:-1]) / n +
            (vd[1:-1, 2:, 1:-1] - vd[1:-1, :-2, 1:-1]) / n +
            (wd[1:-1, 1:-1, 2:] - wd[1:-1, 1:-1, :-2]) / n)


def project(u: Field, v: Field, w: Field, prj: Field, div: Field,
            obstruction: ObstructionField) -> dict:
    """
    Pressure projection: push (u, v, w) towards zero divergence.

    Args:
        u, v, w     : Velocity components, modified in place
        prj         : Scratch field for the potential (overwritten)
        div         : Scratch field for the divergence (overwritten)
        obstruction : Solid-cell mask

    Returns:
        dict with the max |divergence| before and after
    """
    n = max(u.width, u.height, u.depth) - 2

    before = compute_divergence(u, v, w)
    div.interior[...] = -1.0 / 3.0 * before
    prj.interior[...] = 0.0

    set_boundary(div, KIND_DENSITY, obstruction)
    set_boundary(prj, KIND_DENSITY, obstruction)

    gauss_seidel(prj, div, KIND_DENSITY, 1.0, 6.0, obstruction)

    p = prj.data
    u.interior[...] -= 0.5 * n * (p[2:, 1:-1, 1:-1] - p[:-2, 1:-1, 1:-1])
    v.interior[...] -= 0.5 * n * (p[1:-1, 2:, 1:-1] - p[1:-1, :-2, 1:-1])
    w.interior[...] -= 0.5 * n * (p[1:-1, 1:-1, 2:] - p[1:-1, 1:-1, :-2])

    set_boundary(u, KIND_VEL_X, obstruction)
    set_boundary(v, KIND_VEL_Y, obstruction)
    set_boundary(w, KIND_VEL_Z, obstruction)

    after = compute_divergence(u, v, w)
    return {
        "divergence_before_max": float(np.abs(before).max()),
        "divergence_after_max": float(np.abs(after).max()),
    }

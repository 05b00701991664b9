"""
advect.py — Semi-Lagrangian Advection
======================================
Moves a quantity along the wind.

The algorithm (per interior cell):
  1. Read the wind vector at the cell.
  2. Trace BACKWARD by one timestep: "where did the stuff in this cell
     come FROM?"
  3. Clamp the traced position to [0.5, interior + 0.5] so every sample
     stays inside the field (ghost shell included).
  4. Trilinearly interpolate the previous field at that position.

The backtrace scales every axis by dt * N, N = largest interior extent, so
non-cubic grids are not normalized per axis.

Each cell reads only the previous field and the advecting wind, never the
field being written, so the whole pass is a single vectorized numpy
expression.

Key reference: Jos Stam, "Real-Time Fluid Dynamics for Games" (GDC 2003)
"""

import numpy as np

from .field import Field
from .grid import set_boundary
from .obstruction_field import ObstructionField
from .vector_field import VectorField


def _trilinear_interpolate(field: np.ndarray, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
    """
    Trilinear interpolation of a 3D field at positions already clamped
    to the valid range.

    The lower corner of the surrounding cube is the truncated position; the
    upper corner is one cell further along every axis.

    Args:
        field   : 3D numpy array to sample from
        x, y, z : Query positions (same shape, fractional, ≥ 0)

    Returns:
        Interpolated values, same shape as x/y/z
    """
    i0 = x.astype(np.int64)
    j0 = y.astype(np.int64)
    k0 = z.astype(np.int64)
    i1 = i0 + 1
    j1 = j0 + 1
    k1 = k0 + 1

    s1 = x - i0
    s0 = 1.0 - s1
    t1 = y - j0
    t0 = 1.0 - t1
    u1 = z - k0
    u0 = 1.0 - u1

    # Blend in Y/Z on both X planes, then in X
    tu0 = (t0 * u0 * field[i0, j0, k0] + t1 * u0 * field[i0, j1, k0] +
           t0 * u1 * field[i0, j0, k1] + t1 * u1 * field[i0, j1, k1])
    tu1 = (t0 * u0 * field[i1, j0, k0] + t1 * u0 * field[i1, j1, k0] +
           t0 * u1 * field[i1, j0, k1] + t1 * u1 * field[i1, j1, k1])
    return s0 * tu0 + s1 * tu1


def backtrace(velocity: VectorField, delta: float) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Back-traced sample positions for every interior cell.

    Returns (x, y, z) arrays of shape (width-2, height-2, depth-2), clamped
    to [0.5, interior + 0.5] on each axis.
    """
    width, height, depth = (d - 2 for d in velocity.dim)
    dt0 = delta * max(width, height, depth)

    i, j, k = np.meshgrid(
        np.arange(1, width + 1, dtype=np.float64),
        np.arange(1, height + 1, dtype=np.float64),
        np.arange(1, depth + 1, dtype=np.float64),
        indexing="ij",
    )

    x = np.clip(i - dt0 * velocity.x.interior, 0.5, width + 0.5)
    y = np.clip(j - dt0 * velocity.y.interior, 0.5, height + 0.5)
    z = np.clip(k - dt0 * velocity.z.interior, 0.5, depth + 0.5)
    return x, y, z


def advect(f: Field, f0: Field, velocity: VectorField, kind: str, delta: float,
           obstruction: ObstructionField):
    """
    Advect f0 through `velocity` into f.

    Args:
        f           : Output field (interior overwritten)
        f0          : Field before advection
        velocity    : Wind that carries the quantity
        kind        : Boundary kind of f
        delta       : Timestep in seconds
        obstruction : Solid-cell mask

    Modifies: f (in place)
    """
    x, y, z = backtrace(velocity, delta)
    f.interior[...] = _trilinear_interpolate(f0.data, x, y, z)
    set_boundary(f, kind, obstruction)

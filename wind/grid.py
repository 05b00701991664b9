"""
grid.py — Boundary Conditions on the Ghost Shell
=================================================
Every field carries a 1-cell ghost shell around the simulated interior.
set_boundary() fills that shell (and overwrites solid interior cells) so the
interior loops of diffusion/advection/projection never need special cases.

It is called after every relaxation sweep and after every advection or
projection write.

Order of work (each tier reads what the previous one wrote):
  1. Obstructions : solid interior cells ← clamp(-Σ free neighbours, ±100)
  2. Faces        : ghost ← adjacent interior cell, negated for the velocity
                    component normal to that face (no flux through the walls)
  3. Edges        : mean of the two neighbouring face ghosts
  4. Corners      : mean of the three neighbouring edge ghosts
"""

from itertools import product

import numpy as np

from .field import Field
from .obstruction_field import ObstructionField

# ── Boundary kinds ────────────────────────────────────────────────────────────
# Density and other scalars copy at the walls. A velocity component is
# reflected on the two faces perpendicular to its own axis.
KIND_DENSITY = "DENSITY"
KIND_VEL_X = "VEL_X"
KIND_VEL_Y = "VEL_Y"
KIND_VEL_Z = "VEL_Z"

# axis whose faces negate the ghost value (None = copy on every face)
REFLECT_AXIS = {
    KIND_DENSITY: None,
    KIND_VEL_X: 0,
    KIND_VEL_Y: 1,
    KIND_VEL_Z: 2,
}

VELOCITY_KINDS = (KIND_VEL_X, KIND_VEL_Y, KIND_VEL_Z)

# Bound on the value written into a solid cell
OBSTRUCTION_CLAMP = 100.0

_INNER = slice(1, -1)

# Slices selecting the 6 axis-aligned neighbours of every interior cell
_NEIGHBOURS = (
    (slice(None, -2), _INNER, _INNER),
    (slice(2, None), _INNER, _INNER),
    (_INNER, slice(None, -2), _INNER),
    (_INNER, slice(2, None), _INNER),
    (_INNER, _INNER, slice(None, -2)),
    (_INNER, _INNER, slice(2, None)),
)


def _check_kind(kind: str):
    if kind not in REFLECT_AXIS:
        raise ValueError(f"Unknown boundary kind: {kind}. Use one of {list(REFLECT_AXIS)}.")


def apply_obstructions(f: np.ndarray, o: np.ndarray):
    """
    Overwrite every solid interior cell with the clamped negative sum of its
    non-solid axis neighbours.

    Only solid cells are written and only free cells are read, so the whole
    pass is order independent.

    Args:
        f : field data (width, height, depth), modified in place
        o : obstruction mask, same shape
    """
    solid = o[1:-1, 1:-1, 1:-1]
    if not solid.any():
        return

    total = np.zeros(solid.shape, dtype=np.float64)
    for nb in _NEIGHBOURS:
        total += np.where(o[nb], 0.0, f[nb])

    blocked = np.clip(-total, -OBSTRUCTION_CLAMP, OBSTRUCTION_CLAMP)
    inner = f[1:-1, 1:-1, 1:-1]
    inner[solid] = blocked[solid]


def apply_faces(f: np.ndarray, reflect_axis):
    """Copy (or negate) the interior layer into the 6 face ghost layers."""
    sx = -1.0 if reflect_axis == 0 else 1.0
    sy = -1.0 if reflect_axis == 1 else 1.0
    sz = -1.0 if reflect_axis == 2 else 1.0

    # ── X-Y faces (z = 0, z = depth-1) ─────────────────────────────────────
    f[1:-1, 1:-1, 0] = sz * f[1:-1, 1:-1, 1]
    f[1:-1, 1:-1, -1] = sz * f[1:-1, 1:-1, -2]

    # ── Y-Z faces (x = 0, x = width-1) ─────────────────────────────────────
    f[0, 1:-1, 1:-1] = sx * f[1, 1:-1, 1:-1]
    f[-1, 1:-1, 1:-1] = sx * f[-2, 1:-1, 1:-1]

    # ── X-Z faces (y = 0, y = height-1) ────────────────────────────────────
    f[1:-1, 0, 1:-1] = sy * f[1:-1, 1, 1:-1]
    f[1:-1, -1, 1:-1] = sy * f[1:-1, -2, 1:-1]


def apply_edges(f: np.ndarray):
    """Each of the 12 edge ghost lines ← mean of its two face neighbours."""
    # ── X edges ────────────────────────────────────────────────────────────
    f[1:-1, 0, 0] = 0.5 * (f[1:-1, 1, 0] + f[1:-1, 0, 1])
    f[1:-1, -1, 0] = 0.5 * (f[1:-1, -2, 0] + f[1:-1, -1, 1])
    f[1:-1, 0, -1] = 0.5 * (f[1:-1, 0, -2] + f[1:-1, 1, -1])
    f[1:-1, -1, -1] = 0.5 * (f[1:-1, -2, -1] + f[1:-1, -1, -2])

    # ── Y edges ────────────────────────────────────────────────────────────
    f[0, 1:-1, 0] = 0.5 * (f[1, 1:-1, 0] + f[0, 1:-1, 1])
    f[-1, 1:-1, 0] = 0.5 * (f[-2, 1:-1, 0] + f[-1, 1:-1, 1])
    f[0, 1:-1, -1] = 0.5 * (f[0, 1:-1, -2] + f[1, 1:-1, -1])
    f[-1, 1:-1, -1] = 0.5 * (f[-2, 1:-1, -1] + f[-1, 1:-1, -2])

    # ── Z edges ────────────────────────────────────────────────────────────
    f[0, 0, 1:-1] = 0.5 * (f[0, 1, 1:-1] + f[1, 0, 1:-1])
    f[0, -1, 1:-1] = 0.5 * (f[0, -2, 1:-1] + f[1, -1, 1:-1])
    f[-1, 0, 1:-1] = 0.5 * (f[-2, 0, 1:-1] + f[-1, 1, 1:-1])
    f[-1, -1, 1:-1] = 0.5 * (f[-1, -2, 1:-1] + f[-2, -1, 1:-1])


def apply_corners(f: np.ndarray):
    """Each of the 8 corners ← mean of its three neighbours one step inward."""
    for cx, cy, cz in product((0, -1), repeat=3):
        ix = 1 if cx == 0 else -2
        iy = 1 if cy == 0 else -2
        iz = 1 if cz == 0 else -2
        f[cx, cy, cz] = (f[ix, cy, cz] + f[cx, iy, cz] + f[cx, cy, iz]) / 3.0


def set_boundary(field: Field, kind: str, obstruction: ObstructionField):
    """
    Enforce boundary conditions on one scalar field (or one velocity axis).

    Args:
        field       : Field to fix up (in place)
        kind        : KIND_DENSITY, KIND_VEL_X, KIND_VEL_Y or KIND_VEL_Z
        obstruction : Solid-cell mask of the simulation

    The field needs at least 3 cells per axis (ghost, interior, ghost).
    """
    _check_kind(kind)
    if min(field.dim) < 3:
        raise ValueError(
            f"Boundary conditions need at least 3 cells per axis, got {field.dim}")
    f = field.data
    apply_obstructions(f, obstruction.data)
    apply_faces(f, REFLECT_AXIS[kind])
    apply_edges(f)
    apply_corners(f)

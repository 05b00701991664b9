"""
diffuse.py — Implicit Diffusion via Gauss-Seidel Relaxation
=============================================================
Diffusion spreads a quantity into its neighbours over time.
  - Density diffusion  → smoke bleeds outward (coefficient: `diffusion`)
  - Velocity diffusion → wind evens out (coefficient: `viscosity`)

We solve the implicit (backward Euler) heat equation

    (I - a·∇²) x_new = x_old,    a = dt * coeff * N³

which stays stable for any dt. The system is relaxed with a FIXED number of
Gauss-Seidel sweeps (10): per-tick cost is bounded, accuracy is whatever 10
sweeps buy.

Gauss-Seidel updates cells in place, so a cell sees the values its
predecessors in the same sweep have just written. That ordering (z outer,
y middle, x inner) is part of the numerical result and cannot be expressed
as a vectorized numpy expression, so the sweep is a numba kernel.
"""

from numba import njit

from .field import Field
from .grid import set_boundary
from .obstruction_field import ObstructionField

# Number of Gauss-Seidel sweeps per solve
GAUSS_SEIDEL_STEPS = 10


@njit
def _relax_sweep(f, f0, a, c):
    """One in-place Gauss-Seidel sweep over the interior of f."""
    width = f.shape[0] - 2
    height = f.shape[1] - 2
    depth = f.shape[2] - 2
    for k in range(1, depth + 1):
        for j in range(1, height + 1):
            for i in range(1, width + 1):
                comb = (f[i - 1, j, k] + f[i + 1, j, k] +
                        f[i, j - 1, k] + f[i, j + 1, k] +
                        f[i, j, k - 1] + f[i, j, k + 1])
                f[i, j, k] = (f0[i, j, k] + a * comb) / c


def gauss_seidel(f: Field, f0: Field, kind: str, a: float, c: float,
                 obstruction: ObstructionField, iterations: int = GAUSS_SEIDEL_STEPS):
    """
    Relax f towards the solution of  c·f - a·Σneighbours(f) = f0.

    Boundary conditions are re-applied after every sweep.

    Args:
        f           : Unknown (initial guess on entry, solution on exit)
        f0          : Right-hand side
        kind        : Boundary kind of f (see grid.py)
        a, c        : Neighbour weight and diagonal
        obstruction : Solid-cell mask
        iterations  : Sweeps to run
    """
    for _ in range(iterations):
        _relax_sweep(f.data, f0.data, float(a), float(c))
        set_boundary(f, kind, obstruction)


def diffuse(f: Field, f0: Field, kind: str, coeff: float, delta: float,
            obstruction: ObstructionField):
    """
    Diffuse f0 into f over one timestep.

    N is the largest interior extent; it scales every axis alike.

    Args:
        f           : Output field (also the relaxation's initial guess)
        f0          : Field before diffusion
        kind        : Boundary kind of the field
        coeff       : Diffusion rate (density) or viscosity (velocity)
        delta       : Timestep in seconds
        obstruction : Solid-cell mask
    """
    n = max(f.width, f.height, f.depth) - 2
    a = delta * coeff * float(n) ** 3
    c = 1.0 + 6.0 * a
    gauss_seidel(f, f0, kind, a, c, obstruction)


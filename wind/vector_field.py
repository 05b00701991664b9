"""
vector_field.py — Wind Velocity Per Cell
=========================================
Three scalar fields (X, Y, Z) that always share dimensions and cell size.

The solver works one axis at a time: diffusion, advection and projection
each touch a single component, and the double-buffering in WindSimulation
swaps one axis's current/previous buffer independently of the others. That
is why the components are separate Field objects and not one (…, 3) array.
"""

import math

import numpy as np

from .field import Field, FieldDim


def gaussian(x: float, scalar: float, offset: float, width: float) -> float:
    """Gaussian bell: scalar * exp(-(x - offset)² / (2 * width²)), width >= 1."""
    safe_width = max(1.0, width)
    return scalar * math.exp(-((x - offset) * (x - offset)) / (2.0 * safe_width * safe_width))


class VectorField:
    """
    Velocity field made of three synchronized component fields.

    Usage:
        v = VectorField(12, 12, 12)
        v.set(3, 4, 5, (1.0, 0.0, 0.0))
        v.get(3, 4, 5)          # → array([1., 0., 0.], dtype=float32)
        v.x.get(3, 4, 5)        # → 1.0
    """

    def __init__(self, width: int, height: int, depth: int, cell_size: float = 1.0):
        self.x = Field(width, height, depth, cell_size)
        self.y = Field(width, height, depth, cell_size)
        self.z = Field(width, height, depth, cell_size)

    @property
    def components(self) -> tuple[Field, Field, Field]:
        return self.x, self.y, self.z

    @property
    def dim(self) -> FieldDim:
        return self.x.dim

    @property
    def cell_size(self) -> float:
        return self.x.cell_size

    @property
    def cell_count(self) -> int:
        return self.x.cell_count

    @property
    def dim_m(self) -> np.ndarray:
        return self.x.dim_m

    def cell_to_meter(self, x: float, y: float, z: float) -> np.ndarray:
        return self.x.cell_to_meter(x, y, z)

    def in_bounds(self, x: int, y: int, z: int) -> bool:
        return self.x.in_bounds(x, y, z)

    # ── Access ───────────────────────────────────────────────────────────────

    def get(self, x: int, y: int, z: int) -> np.ndarray:
        """Vector at cell (x, y, z), assembled from the three components."""
        return np.array((self.x.data[x, y, z], self.y.data[x, y, z], self.z.data[x, y, z]),
                        dtype=np.float32)

    def set(self, x: int, y: int, z: int, vec):
        self.x.data[x, y, z] = vec[0]
        self.y.data[x, y, z] = vec[1]
        self.z.data[x, y, z] = vec[2]

    def get_offset(self, offset: int) -> np.ndarray:
        return np.array((self.x.flat[offset], self.y.flat[offset], self.z.flat[offset]),
                        dtype=np.float32)

    def set_offset(self, offset: int, vec):
        # flat is a view, so writes land in the component data
        self.x.flat[offset] = vec[0]
        self.y.flat[offset] = vec[1]
        self.z.flat[offset] = vec[2]

    def fill(self, vec):
        for comp, value in zip(self.components, vec):
            comp.fill(value)

    def as_array(self) -> np.ndarray:
        """Copy of the field as a (width, height, depth, 3) array."""
        return np.stack([self.x.data, self.y.data, self.z.data], axis=-1)

    def magnitude(self) -> np.ndarray:
        """Per-cell wind speed, shape (width, height, depth)."""
        return np.sqrt(self.x.data ** 2 + self.y.data ** 2 + self.z.data ** 2)

    def sample_near(self, point) -> np.ndarray:
        """
        Sample the wind at an arbitrary point (in meters).

        The 8 cells surrounding the point are blended with Gaussian weights
        on their distance to the point. Weights are normalized over all 8
        cells; cells outside the field contribute nothing, so samples near
        the border are damped.

        Args:
            point : (x, y, z) position in meters, field origin at (0, 0, 0)

        Returns:
            Blended wind vector (float32, shape (3,))
        """
        cs = self.cell_size
        cell = np.asarray(point, dtype=np.float64) / cs
        base = cell.astype(np.int64)

        corners = []
        dists = []
        weight_sum = 0.0
        for dx in (0, 1):
            for dy in (0, 1):
                for dz in (0, 1):
                    c = (int(base[0]) + dx, int(base[1]) + dy, int(base[2]) + dz)
                    dist = float(np.linalg.norm(cell - np.array(c, dtype=np.float64))) * cs
                    corners.append(c)
                    dists.append(dist)
                    weight_sum += gaussian(dist, 1.0, 0.0, cs / 2.0)

        force = np.zeros(3, dtype=np.float32)
        for c, dist in zip(corners, dists):
            if not self.in_bounds(*c):
                continue
            force += (gaussian(dist, 1.0, 0.0, cs / 2.0) / weight_sum) * self.get(*c)
        return force

    @staticmethod
    def swap(field0: "VectorField", field1: "VectorField"):
        """Swap all three components of two vector fields."""
        for c0, c1 in zip(field0.components, field1.components):
            Field.swap(c0, c1)

    def __repr__(self):
        d = self.dim
        return f"VectorField({d.width}x{d.height}x{d.depth}, cell_size={self.cell_size})"

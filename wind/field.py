"""
field.py — Dense 3D Cell Storage
=================================
The foundation every other field is built on.

A field is a box of `width × height × depth` cells. Each cell holds one value
of the field's dtype (float32 for density/velocity components, bool for
obstructions).

Layout:
  - Data is a numpy array of shape (width, height, depth), indexed [x, y, z]
  - Stored in Fortran order, so the flat buffer is addressed by
        index = x + width*y + width*height*z
  - The outer 1-cell shell on every face is the ghost layer. The solver only
    writes interior cells [1..width-2] × [1..height-2] × [1..depth-2] and
    fills the shell through set_boundary().
"""

from typing import NamedTuple

import numpy as np


class FieldDim(NamedTuple):
    """Dimensions of a field, in cells."""
    width: int
    height: int
    depth: int


class Field:
    """
    A 3D field of cells.

    Two ways to read a cell:
      get(x, y, z)           → unchecked, for hot loops that stay in range
      get_safe / get_clamped → for queries that may land outside the field
    """

    dtype = np.float32

    def __init__(self, width: int, height: int, depth: int, cell_size: float = 1.0):
        """
        Args:
            width, height, depth : Field size in cells (ghost shell included)
            cell_size            : Edge length of one cell in meters
        """
        if width < 1 or height < 1 or depth < 1:
            raise ValueError(
                f"Field dimensions must be at least 1 on every axis, got {width}x{height}x{depth}")
        if cell_size <= 0.0:
            raise ValueError(f"Cell size must be positive, got {cell_size}")

        self._dim = FieldDim(int(width), int(height), int(depth))
        self._cell_size = float(cell_size)
        self.data = np.zeros(self._dim, dtype=self.dtype, order="F")

    # ── Geometry ─────────────────────────────────────────────────────────────

    @property
    def dim(self) -> FieldDim:
        return self._dim

    @property
    def width(self) -> int:
        return self._dim.width

    @property
    def height(self) -> int:
        return self._dim.height

    @property
    def depth(self) -> int:
        return self._dim.depth

    @property
    def cell_size(self) -> float:
        return self._cell_size

    @property
    def cell_count(self) -> int:
        return self.width * self.height * self.depth

    @property
    def dim_m(self) -> np.ndarray:
        """Extent of the field in meters."""
        return np.array(self._dim, dtype=np.float32) * self._cell_size

    def cell_to_meter(self, x: float, y: float, z: float) -> np.ndarray:
        """Scale a cell coordinate to meters (inverse of point / cell_size)."""
        return np.array((x, y, z), dtype=np.float32) * self._cell_size

    def index(self, x: int, y: int, z: int) -> int:
        """Linear offset of cell (x, y, z) in the flat buffer."""
        return x + self.width * y + self.width * self.height * z

    def position(self, offset: int) -> tuple[int, int, int]:
        """Inverse of index(): cell coordinates of a flat offset."""
        if not 0 <= offset < self.cell_count:
            raise IndexError(f"Offset {offset} lies outside of field data")
        x = offset % self.width
        y = (offset % (self.width * self.height)) // self.width
        z = offset // (self.width * self.height)
        return x, y, z

    def in_bounds(self, x: int, y: int, z: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and 0 <= z < self.depth

    def on_edge(self, x: int, y: int, z: int) -> bool:
        """True for cells in the ghost shell."""
        return (x == 0 or y == 0 or z == 0 or x == self.width - 1
                or y == self.height - 1 or z == self.depth - 1)

    # ── Access ───────────────────────────────────────────────────────────────

    @property
    def flat(self) -> np.ndarray:
        """Flat view of the data, addressed by index()."""
        return self.data.reshape(-1, order="F")

    @property
    def interior(self) -> np.ndarray:
        """View of the simulated interior (ghost shell excluded)."""
        return self.data[1:-1, 1:-1, 1:-1]

    def get(self, x: int, y: int, z: int):
        return self.data[x, y, z]

    def set(self, x: int, y: int, z: int, value):
        self.data[x, y, z] = value

    def get_clamped(self, x: int, y: int, z: int):
        """Read the cell nearest to (x, y, z) that lies inside the field."""
        return self.data[min(max(x, 0), self.width - 1),
                         min(max(y, 0), self.height - 1),
                         min(max(z, 0), self.depth - 1)]

    def get_safe(self, x: int, y: int, z: int, default=0):
        """Read cell (x, y, z), or `default` if it lies outside the field."""
        if not self.in_bounds(x, y, z):
            return default
        return self.data[x, y, z]

    def fill(self, value):
        self.data[...] = value

    def same_dim(self, other: "Field") -> bool:
        return self._dim == other.dim

    @staticmethod
    def swap(field0: "Field", field1: "Field"):
        """
        Exchange the data of two fields without copying.

        Both fields must have the same dimensions.
        """
        if not field0.same_dim(field1):
            raise ValueError(
                f"Swapping field data requires the fields to be of the same size "
                f"({field0.dim} != {field1.dim})")
        field0.data, field1.data = field1.data, field0.data

    def __repr__(self):
        d = self._dim
        return (f"{type(self).__name__}({d.width}x{d.height}x{d.depth}, "
                f"cell_size={self._cell_size})")

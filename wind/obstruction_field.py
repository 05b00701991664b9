"""
obstruction_field.py — Static Solid-Cell Mask
==============================================
Marks the cells that scene geometry overlaps. The solver reads this mask in
set_boundary() and never writes it; it only changes when the host calls
build_for_scene() again.
"""

import logging

import numpy as np

from .field import Field
from .scene import CollisionOracle

logger = logging.getLogger(__name__)

# Fractions of a cell the query box spans on every axis. Shrinking the box
# keeps geometry that merely touches a neighbouring cell from marking this one.
OBSTRUCTION_MARGIN_MIN = 0.05
OBSTRUCTION_MARGIN_MAX = 0.95


class ObstructionField(Field):
    dtype = np.bool_

    def get_safe(self, x: int, y: int, z: int, default=False) -> bool:
        """Solid flag of cell (x, y, z); space outside the field is free."""
        return bool(super().get_safe(x, y, z, default))

    def count(self) -> int:
        """Number of solid cells."""
        return int(np.count_nonzero(self.data))

    def build_for_scene(self, oracle: CollisionOracle, position=(0.0, 0.0, 0.0)) -> int:
        """
        Rasterize scene geometry into the field.

        Every interior cell is tested with a box covering [0.05, 0.95] of
        the cell on each axis. The field is cleared first, so rebuilding with
        unchanged geometry yields the same mask.

        Args:
            oracle   : callable(min_corner, max_corner) -> bool
            position : world position of the field's origin cell (0, 0, 0)

        Returns:
            Number of solid cells
        """
        self.fill(False)
        origin = np.asarray(position, dtype=np.float64)
        cs = self.cell_size
        off_min = OBSTRUCTION_MARGIN_MIN * cs
        off_max = OBSTRUCTION_MARGIN_MAX * cs

        for z in range(1, self.depth - 1):
            z_pos = origin[2] + z * cs
            for y in range(1, self.height - 1):
                y_pos = origin[1] + y * cs
                for x in range(1, self.width - 1):
                    x_pos = origin[0] + x * cs
                    lo = np.array((x_pos + off_min, y_pos + off_min, z_pos + off_min))
                    hi = np.array((x_pos + off_max, y_pos + off_max, z_pos + off_max))
                    if oracle(lo, hi):
                        self.data[x, y, z] = True

        solid = self.count()
        logger.info("Obstruction field built: %d/%d interior cells solid",
                    solid, (self.width - 2) * (self.height - 2) * (self.depth - 2))
        return solid

"""
density_field.py — Scalar "smoke" concentration per cell.

Values are expected to stay near [0, 1] for rendering, but nothing clamps
them: advection can over/undershoot and that is tolerated.
"""

import numpy as np

from .field import Field


class DensityField(Field):
    dtype = np.float32

    def total(self) -> float:
        """Sum of density over the interior cells."""
        return float(self.interior.sum(dtype=np.float64))

"""
delta.py — Simulated vs. Baked Wind
====================================
Measures how far a baked (approximate) wind function strays from the
simulation it was baked from.
"""

from typing import Callable

import numpy as np

from .vector_field import VectorField

# point in meters → wind vector
WindFunction = Callable[[np.ndarray], np.ndarray]


class DeltaField:
    """
    Per-cell comparison of a simulation's wind with a wind function.

    After build():
      sim    : copy of the simulated wind
      baked  : the wind function evaluated at every cell center
      delta  : baked - sim, zero inside obstructions
    """

    def __init__(self):
        self.delta = None
        self.sim = None
        self.baked = None

    def build(self, sim, wind_at_point: WindFunction):
        """
        Args:
            sim           : WindSimulation to compare against
            wind_at_point : callable(point_in_meters) -> (3,) wind vector
        """
        width, height, depth = sim.field_dim
        cs = sim.cell_size
        self.delta = VectorField(width, height, depth, cs)
        self.sim = VectorField(width, height, depth, cs)
        self.baked = VectorField(width, height, depth, cs)

        velocity = sim.velocity
        obstruction = sim.obstruction
        for k in range(depth):
            for j in range(height):
                for i in range(width):
                    v_sim = velocity.get(i, j, k)
                    center = np.array((i + 0.5, j + 0.5, k + 0.5)) * cs
                    v_bake = np.asarray(wind_at_point(center), dtype=np.float32)
                    self.sim.set(i, j, k, v_sim)
                    self.baked.set(i, j, k, v_bake)
                    if not obstruction.get(i, j, k):
                        self.delta.set(i, j, k, v_bake - v_sim)
        return self

    def error(self) -> float:
        """Mean length of the per-cell delta."""
        if self.delta is None:
            raise ValueError("DeltaField.error() called before build()")
        return float(self.delta.magnitude().mean())

"""
scene.py — Collision Oracle
============================
The wind simulation never looks at scene geometry directly. Building the
obstruction field only needs one question answered per cell:

    "does this axis-aligned box overlap any collider?"

Any callable `oracle(min_corner, max_corner) -> bool` works. A game engine
wraps its physics scene's box-overlap query; tests and the demo CLI use
BoxScene below.
"""

from typing import Callable, Sequence

import numpy as np

# (min_corner, max_corner) → overlap?
CollisionOracle = Callable[[np.ndarray, np.ndarray], bool]


class BoxScene:
    """
    A scene made of solid axis-aligned boxes.

    Usage:
        scene = BoxScene()
        scene.add_box((4, 0, 4), (6, 8, 6))      # a pillar
        sim.build_for_scene(scene)
    """

    def __init__(self, boxes: Sequence[tuple] = ()):
        self.boxes: list[tuple[np.ndarray, np.ndarray]] = []
        for lo, hi in boxes:
            self.add_box(lo, hi)

    def add_box(self, min_corner, max_corner):
        lo = np.asarray(min_corner, dtype=np.float64)
        hi = np.asarray(max_corner, dtype=np.float64)
        if np.any(hi < lo):
            raise ValueError(f"Box max corner {hi} lies below min corner {lo}")
        self.boxes.append((lo, hi))

    def add_centered_box(self, center, size):
        """Add a box given its center and full edge lengths."""
        c = np.asarray(center, dtype=np.float64)
        half = np.asarray(size, dtype=np.float64) / 2.0
        self.add_box(c - half, c + half)

    def box_overlaps_any(self, min_corner, max_corner) -> bool:
        lo = np.asarray(min_corner, dtype=np.float64)
        hi = np.asarray(max_corner, dtype=np.float64)
        for box_lo, box_hi in self.boxes:
            if np.all(lo <= box_hi) and np.all(box_lo <= hi):
                return True
        return False

    __call__ = box_overlaps_any

    def __len__(self):
        return len(self.boxes)

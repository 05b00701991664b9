"""
wind/ — 3D Wind Simulation Package
===================================
Exports the interfaces a host (game loop, renderer, tools) uses.

Host loop     : WindSimulation → build_for_scene(), step()
Scene         : BoxScene, or any callable(min_corner, max_corner) -> bool
Renderer      : WindSimulation.density / .velocity / .obstruction (read-only)
Baking tools  : bake(), trace_streamline(), DeltaField
"""

from .bake import Streamline, bake, trace_streamline
from .delta import DeltaField
from .density_field import DensityField
from .field import Field, FieldDim
from .obstruction_field import ObstructionField
from .scene import BoxScene
from .simulation import WindSimulation
from .vector_field import VectorField

__all__ = [
    "BoxScene",
    "DeltaField",
    "DensityField",
    "Field",
    "FieldDim",
    "ObstructionField",
    "Streamline",
    "VectorField",
    "WindSimulation",
    "bake",
    "trace_streamline",
]

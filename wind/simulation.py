"""
simulation.py — Wind Simulation Loop
=====================================
Ties the fields and the solver passes together. One call to `step()`
advances the wind by `delta` seconds.

Buffers:
  D, D0  density (current / previous)
  V, V0  velocity (current / previous, swapped per axis)
  O      obstructions (static, rebuilt only by build_for_scene)

Per step:
  density   1. D += dt * D0                  (D0 = source rate here)
            2. one-shot source / sink stimuli
            3. swap, diffuse                 (D0 = previous density now)
            4. swap, advect through V
  velocity  1. V += dt * V0
            2. one-shot source / sink stimuli
            3. per axis swap + diffuse, project
            4. swap all axes, advect through V0, project

Density is stepped first, so it always moves with the wind as it stood at
the start of the tick.

Algorithms follow Jos Stam, "Real-Time Fluid Dynamics for Games", extended
to three dimensions.
"""

import logging
import time
from collections import deque

import numpy as np

from .advect import advect
from .density_field import DensityField
from .diffuse import GAUSS_SEIDEL_STEPS, diffuse
from .field import Field, FieldDim
from .grid import KIND_DENSITY, KIND_VEL_X, KIND_VEL_Y, KIND_VEL_Z, VELOCITY_KINDS, set_boundary
from .obstruction_field import ObstructionField
from .scene import CollisionOracle
from .solver import compute_divergence, project
from .vector_field import VectorField

logger = logging.getLogger(__name__)


# ── Tunable defaults ──────────────────────────────────────────────────────────
DEFAULT_DIFFUSION = 0.001   # how fast density spreads
DEFAULT_VISCOSITY = 0.0     # how fast wind evens out

# ── Scripted stimuli ──────────────────────────────────────────────────────────
DENSITY_SOURCE_VALUE = 0.5
DENSITY_SINK_VALUE = 0.0
DENSITY_STIMULUS_HEIGHTS = range(1, 6)               # y of the 5 stimulus cells
VELOCITY_SOURCE_VALUE = (0.0, 0.0, 50.0)
VELOCITY_STIMULUS_BLOCK = (range(11, 16), range(3, 7), range(4, 6))

# Frames of metrics kept in perf_log
PERF_LOG_SIZE = 1000


class WindSimulation:
    """
    3D grid wind simulation.

    Usage:
        sim = WindSimulation(16, 8, 16, cell_size=1.0)
        sim.build_for_scene(scene, position=(0, 0, 0))
        for frame in range(100):
            sim.step(1 / 60)
            density = sim.density     # hand to a renderer (read-only)
    """

    def __init__(self, width: float, height: float, depth: float, cell_size: float = 1.0,
                 diffusion: float = DEFAULT_DIFFUSION, viscosity: float = DEFAULT_VISCOSITY):
        """
        Args:
            width, height, depth : Extent of the simulated volume in meters
            cell_size            : Edge length of a cell in meters
            diffusion            : Density diffusion rate
            viscosity            : Velocity diffusion rate
        """
        if cell_size <= 0.0:
            raise ValueError(f"Cell size must be positive, got {cell_size}")
        if width <= 0 or height <= 0 or depth <= 0:
            raise ValueError(
                "Extent of wind simulation must not be zero in any dimension, "
                f"got {width}x{height}x{depth}")

        self._width = int(round(width / cell_size))
        self._height = int(round(height / cell_size))
        self._depth = int(round(depth / cell_size))
        if self._width < 1 or self._height < 1 or self._depth < 1:
            raise ValueError(
                f"Extent {width}x{height}x{depth} holds no whole cell of size {cell_size}")
        self._cell_size = float(cell_size)

        # Fields carry one ghost cell on each side
        shape = (self._width + 2, self._height + 2, self._depth + 2)
        self._d = DensityField(*shape, cell_size)
        self._d0 = DensityField(*shape, cell_size)
        self._v = VectorField(*shape, cell_size)
        self._v0 = VectorField(*shape, cell_size)
        self._o = ObstructionField(*shape, cell_size)

        dims = {self._d.dim, self._d0.dim, self._v.dim, self._v0.dim, self._o.dim}
        if len(dims) != 1:
            raise ValueError(f"Simulation fields must share dimensions, got {dims}")

        self.diffusion = diffusion
        self.viscosity = viscosity
        self.iterations = GAUSS_SEIDEL_STEPS

        self.density_diffusion_active = True
        self.density_advection_active = True
        self.velocity_diffusion_active = True
        self.velocity_advection_active = True

        self._add_density_source = False
        self._add_density_sink = False
        self._add_velocity_source = False
        self._add_velocity_sink = False

        self.running = True
        self.run_speed = 1.0

        self.built = False
        self.frame = 0
        self.perf_log = deque(maxlen=PERF_LOG_SIZE)

    # ── Field access (renderers: read-only, between ticks) ───────────────────

    @property
    def density(self) -> DensityField:
        return self._d

    @property
    def density_prev(self) -> DensityField:
        return self._d0

    @property
    def velocity(self) -> VectorField:
        return self._v

    @property
    def velocity_prev(self) -> VectorField:
        return self._v0

    @property
    def obstruction(self) -> ObstructionField:
        return self._o

    @property
    def dim(self) -> FieldDim:
        """Interior size of the simulation in cells."""
        return FieldDim(self._width, self._height, self._depth)

    @property
    def field_dim(self) -> FieldDim:
        """Size of every field in cells, ghost shell included."""
        return self._d.dim

    @property
    def dim_m(self) -> np.ndarray:
        return self._v.dim_m

    @property
    def cell_size(self) -> float:
        return self._cell_size

    # ── Configuration ────────────────────────────────────────────────────────

    def set_diffusion(self, diffusion: float):
        self.diffusion = diffusion

    def set_viscosity(self, viscosity: float):
        self.viscosity = viscosity

    def set_density_diffusion_active(self, active: bool):
        self.density_diffusion_active = active

    def set_density_advection_active(self, active: bool):
        self.density_advection_active = active

    def set_velocity_diffusion_active(self, active: bool):
        self.velocity_diffusion_active = active

    def set_velocity_advection_active(self, active: bool):
        self.velocity_advection_active = active

    def set_running(self, running: bool):
        self.running = running

    def set_run_speed(self, speed: float):
        self.run_speed = speed

    def add_density_source(self):
        """Inject density near the low corner on the next density step."""
        self._add_density_source = True
        logger.debug("Density source queued")

    def add_density_sink(self):
        """Clear density near the opposite corner on the next density step."""
        self._add_density_sink = True
        logger.debug("Density sink queued")

    def add_velocity_source(self):
        """Inject a block of strong +Z wind on the next velocity step."""
        self._add_velocity_source = True
        logger.debug("Velocity source queued")

    def add_velocity_sink(self):
        """Still the stimulus block on the next velocity step."""
        self._add_velocity_sink = True
        logger.debug("Velocity sink queued")

    # ── Scene ────────────────────────────────────────────────────────────────

    def build_for_scene(self, oracle: CollisionOracle, position=(0.0, 0.0, 0.0)) -> int:
        """
        Rasterize the scene into the obstruction field.

        `position` is where the simulated volume (the first interior cell)
        starts in the world; the ghost shell sits one cell before it.
        Velocity boundaries are applied right away so blocked cells show up
        before the first step.

        Returns:
            Number of solid cells
        """
        origin = np.asarray(position, dtype=np.float64) - self._cell_size
        solid = self._o.build_for_scene(oracle, origin)

        for vf in (self._v, self._v0):
            set_boundary(vf.x, KIND_VEL_X, self._o)
            set_boundary(vf.y, KIND_VEL_Y, self._o)
            set_boundary(vf.z, KIND_VEL_Z, self._o)

        self.built = True
        return solid

    # ── Stepping ─────────────────────────────────────────────────────────────

    def step(self, delta: float) -> dict:
        """
        Advance the simulation by `delta` seconds (scaled by run_speed).

        Returns a metrics dict, or an empty dict while paused.
        """
        if not self.running:
            return {}
        delta *= self.run_speed

        t_total_start = time.perf_counter()

        t0 = time.perf_counter()
        self.step_density(delta)
        t_density = (time.perf_counter() - t0) * 1000

        t0 = time.perf_counter()
        self.step_velocity(delta)
        t_velocity = (time.perf_counter() - t0) * 1000

        self.frame += 1
        t_total = (time.perf_counter() - t_total_start) * 1000

        metrics = {
            "frame"          : self.frame,
            "delta"          : delta,
            "total_ms"       : t_total,
            "density_ms"     : t_density,
            "velocity_ms"    : t_velocity,
            "divergence_max" : self.divergence_max(),
            "density_total"  : self._d.total(),
        }
        self.perf_log.append(metrics)
        return metrics

    def step_n(self, delta: float, steps: int):
        """Run `steps` full steps of `delta`, ignoring the run controls."""
        for _ in range(steps):
            self.step_density(delta)
            self.step_velocity(delta)
        self.frame += steps

    def step_density(self, delta: float):
        # Source/sink rate (D0 doubles as the rate field before the swap)
        self._d.data += delta * self._d0.data

        if self._add_density_source:
            self._add_density_source = False
            for y in DENSITY_STIMULUS_HEIGHTS:
                self._set_if_inside(self._d, 1, y, 1, DENSITY_SOURCE_VALUE)
        if self._add_density_sink:
            self._add_density_sink = False
            for y in DENSITY_STIMULUS_HEIGHTS:
                self._set_if_inside(self._d, self._width - 3, y, self._depth - 3,
                                    DENSITY_SINK_VALUE)

        if self.density_diffusion_active:
            DensityField.swap(self._d, self._d0)
            diffuse(self._d, self._d0, KIND_DENSITY, self.diffusion, delta, self._o)

        if self.density_advection_active:
            DensityField.swap(self._d, self._d0)
            advect(self._d, self._d0, self._v, KIND_DENSITY, delta, self._o)

    def step_velocity(self, delta: float):
        v, v0 = self._v, self._v0

        for comp, comp0 in zip(v.components, v0.components):
            comp.data += delta * comp0.data

        if self._add_velocity_source:
            self._add_velocity_source = False
            self._fill_stimulus_block(VELOCITY_SOURCE_VALUE)
        if self._add_velocity_sink:
            self._add_velocity_sink = False
            self._fill_stimulus_block((0.0, 0.0, 0.0))

        if self.velocity_diffusion_active:
            for comp, comp0, kind in zip(v.components, v0.components, VELOCITY_KINDS):
                Field.swap(comp0, comp)
                diffuse(comp, comp0, kind, self.viscosity, delta, self._o)
            project(v.x, v.y, v.z, v0.x, v0.y, self._o)

        if self.velocity_advection_active:
            VectorField.swap(v0, v)
            for comp, comp0, kind in zip(v.components, v0.components, VELOCITY_KINDS):
                advect(comp, comp0, v0, kind, delta, self._o)
            project(v.x, v.y, v.z, v0.x, v0.y, self._o)

    # ── Presets ──────────────────────────────────────────────────────────────

    def fill_velocity(self, vec):
        """Set every interior cell of V and V0 to `vec`."""
        for vf in (self._v, self._v0):
            for comp, value in zip(vf.components, vec):
                comp.interior[...] = value
        logger.info("Velocity field filled with %s", tuple(vec))

    def set_as_tornado(self):
        """
        Turn the wind into a tornado: rotation around the vertical center
        axis, a slight updraft, and strength growing with height.
        """
        w, h, d = self._width, self._height, self._depth
        i, j, k = np.meshgrid(np.arange(1, w + 1, dtype=np.float64),
                              np.arange(1, h + 1, dtype=np.float64),
                              np.arange(1, d + 1, dtype=np.float64),
                              indexing="ij")
        dx = i - w / 2.0
        dz = k - d / 2.0
        dist = np.sqrt(dx * dx + dz * dz)
        safe = np.where(dist > 0.0, dist, 1.0)
        nx = np.where(dist > 0.0, dx / safe, 0.0)
        nz = np.where(dist > 0.0, dz / safe, 0.0)

        scale = j / np.clip(dist, 1.0, 10.0)
        vx = np.clip(nz * scale, -5.0, 5.0)
        vy = np.clip(0.1 * scale, -5.0, 5.0)
        vz = np.clip(-nx * scale, -5.0, 5.0)

        for vf in (self._v, self._v0):
            vf.x.interior[...] = vx
            vf.y.interior[...] = vy
            vf.z.interior[...] = vz
        logger.info("Velocity field set to tornado preset")

    def reset(self):
        """Zero density and velocity. Obstructions are kept."""
        for fld in (self._d, self._d0, *self._v.components, *self._v0.components):
            fld.fill(0.0)
        self.frame = 0
        self.perf_log.clear()

    # ── Diagnostics ──────────────────────────────────────────────────────────

    def divergence(self) -> np.ndarray:
        """Interior divergence of the current velocity."""
        return compute_divergence(self._v.x, self._v.y, self._v.z)

    def divergence_max(self) -> float:
        return float(np.abs(self.divergence()).max())

    # ── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _set_if_inside(field: Field, x: int, y: int, z: int, value):
        if field.in_bounds(x, y, z):
            field.set(x, y, z, value)

    def _fill_stimulus_block(self, vec):
        xs, ys, zs = VELOCITY_STIMULUS_BLOCK
        for x in xs:
            for y in ys:
                for z in zs:
                    if self._v.in_bounds(x, y, z):
                        self._v.set(x, y, z, vec)
                        self._v0.set(x, y, z, vec)

    def __repr__(self):
        d = self.dim
        return (
            f"WindSimulation({d.width}x{d.height}x{d.depth}, cell_size={self._cell_size})\n"
            f"  density    : max={self._d.interior.max():.4f}, total={self._d.total():.3f}\n"
            f"  velocity   : max_magnitude={self._v.magnitude().max():.4f}\n"
            f"  divergence : max={self.divergence_max():.6f}\n"
            f"  obstructed : {self._o.count()} cells"
        )

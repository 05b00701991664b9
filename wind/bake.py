"""
bake.py — Streamline Baking
============================
Freezes a simulated wind field into a set of streamlines that a game can
replay cheaply (for example as splines driving a wind source).

Each streamline starts at a seed point and repeatedly moves by the wind
sampled there:

    point += velocity.sample_near(point)

until the wind is too weak to move it, it leaves the volume, or the step
budget runs out. A step that would pass through a solid cell is cut short
just before the obstruction, and the following step uses the wind sampled
at the hit point.

All positions are in meters in field space: (0, 0, 0) is the corner of the
ghost cell (0, 0, 0).
"""

import logging
from typing import NamedTuple

import numpy as np

from .obstruction_field import ObstructionField
from .vector_field import VectorField

logger = logging.getLogger(__name__)

MAX_STEPS = 100
MOVE_THRESHOLD = 0.05     # meters per axis; smaller moves end the trace
HIT_PULLBACK = 0.01       # meters kept between a hit and the obstruction
SEED_STRIDE = 4

# Resolution of the segment-vs-obstruction test, in fractions of a cell
_MARCH_FRACTION = 0.25
_REFINE_STEPS = 8


class Streamline(NamedTuple):
    start: np.ndarray
    points: list
    forces: list


def _is_inside(p: np.ndarray, lo, hi) -> bool:
    return bool(np.all(p >= lo) and np.all(p <= hi))


def _solid_at(obstruction: ObstructionField, p: np.ndarray) -> bool:
    cell = np.floor(p / obstruction.cell_size).astype(np.int64)
    return obstruction.get_safe(int(cell[0]), int(cell[1]), int(cell[2]))


def _first_hit(obstruction: ObstructionField, start: np.ndarray, end: np.ndarray):
    """
    First point on the segment start → end that lies in a solid cell, or
    None. The segment is marched in quarter-cell steps and the crossing is
    refined by bisection.
    """
    length = float(np.linalg.norm(end - start))
    if length == 0.0:
        return None
    step = obstruction.cell_size * _MARCH_FRACTION
    samples = max(1, int(np.ceil(length / step)))

    free_t = 0.0
    for n in range(1, samples + 1):
        t = n / samples
        if _solid_at(obstruction, start + t * (end - start)):
            solid_t = t
            for _ in range(_REFINE_STEPS):
                mid = 0.5 * (free_t + solid_t)
                if _solid_at(obstruction, start + mid * (end - start)):
                    solid_t = mid
                else:
                    free_t = mid
            return start + solid_t * (end - start)
        free_t = t
    return None


def trace_streamline(velocity: VectorField, obstruction: ObstructionField, start,
                     max_steps: int = MAX_STEPS, threshold: float = MOVE_THRESHOLD):
    """
    Follow the wind from `start`.

    Args:
        velocity    : Wind to follow
        obstruction : Solid cells the trace may not cross
        start       : Seed point in meters
        max_steps   : Upper bound on the number of moves
        threshold   : A move below this on every axis ends the trace

    Returns:
        (points, forces): the visited points and the wind strength at each.
        Both lists have the same length. Traces of two points or fewer are
        dropped and returned as two empty lists.
    """
    dim_m = velocity.dim_m.astype(np.float64)
    point = np.asarray(start, dtype=np.float64).copy()
    if not _is_inside(point, 0.0, dim_m):
        logger.error("Cannot bake at point %s, not inside wind simulation %s", point, dim_m)
        return [], []

    limit = dim_m - 1.0
    points = [point.copy()]
    forces = []
    collision_sample = None

    for _ in range(max_steps):
        old_point = point
        if collision_sample is None:
            force = velocity.sample_near(point).astype(np.float64)
        else:
            force = collision_sample
            collision_sample = None
        point = old_point + force
        forces.append(float(np.linalg.norm(force)))

        if not np.any(np.abs(point - points[-1]) > threshold):
            logger.debug("Early exit, too low wind [%s -> %s]", points[-1], point)
            break

        hit = _first_hit(obstruction, old_point, point)
        if hit is not None:
            direction = (point - old_point) / np.linalg.norm(point - old_point)
            collision_sample = velocity.sample_near(hit).astype(np.float64)
            point = hit - direction * HIT_PULLBACK

        points.append(point.copy())
        if not _is_inside(point, 0.0, limit):
            logger.debug("Point left wind simulation volume %s at %s, stopping", dim_m, point)
            break

    if len(points) <= 2:
        return [], []

    # One force per point: the last point has not been sampled yet
    if len(points) == len(forces) + 1:
        if _is_inside(point, 0.0, limit):
            forces.append(float(np.linalg.norm(velocity.sample_near(points[-1]))))
        else:
            forces.append(forces[-1])
    return points, forces


def bake(sim, stride: int = SEED_STRIDE) -> list:
    """
    Trace streamlines from a lattice of seed cells covering the simulation.

    Seeds run over x in [2, W-3], y in [1, H-2], z in [2, D-3] (field cell
    coordinates, W/H/D = field size including the ghost shell), `stride`
    cells apart.

    Returns:
        List of Streamline, empty traces excluded
    """
    if stride < 1:
        raise ValueError(f"Seed stride must be at least 1, got {stride}")

    vel = sim.velocity
    width, height, depth = vel.dim
    lines = []
    for x in range(2, width - 2, stride):
        for y in range(1, height - 1, stride):
            for z in range(2, depth - 2, stride):
                start = vel.cell_to_meter(x, y, z).astype(np.float64)
                points, forces = trace_streamline(vel, sim.obstruction, start)
                if points:
                    lines.append(Streamline(start, points, forces))

    point_count = sum(len(line.points) for line in lines)
    logger.info("Baked %d streamlines (%d points)", len(lines), point_count)
    return lines

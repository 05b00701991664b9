import numpy as np
import pytest

from wind import Streamline, WindSimulation, bake, trace_streamline


@pytest.fixture
def breeze():
    """16 x 8 x 8 volume with a uniform 1 m/s wind along +x."""
    sim = WindSimulation(16, 8, 8)
    sim.fill_velocity((1.0, 0.0, 0.0))
    return sim


def test_start_outside_volume_yields_nothing(breeze):
    points, forces = trace_streamline(breeze.velocity, breeze.obstruction, (-1.0, 4.0, 4.0))
    assert points == [] and forces == []


def test_still_air_trace_discarded(sim):
    points, forces = trace_streamline(sim.velocity, sim.obstruction, (4.0, 4.0, 4.0))
    assert points == [] and forces == []


def test_trace_follows_wind(breeze):
    points, forces = trace_streamline(breeze.velocity, breeze.obstruction, (2.0, 4.0, 4.0))

    assert len(points) > 2
    assert len(points) == len(forces)
    assert points[1][0] == pytest.approx(3.0, rel=1e-5)
    assert forces[0] == pytest.approx(1.0, rel=1e-5)

    xs = [p[0] for p in points]
    assert all(b > a for a, b in zip(xs, xs[1:]))
    for p in points:
        assert p[1] == 4.0 and p[2] == 4.0


def test_max_steps_respected(breeze):
    points, _ = trace_streamline(breeze.velocity, breeze.obstruction, (2.0, 4.0, 4.0),
                                 max_steps=3)
    assert len(points) == 4


def test_trace_stops_short_of_obstruction(breeze, wall_scene):
    breeze.build_for_scene(wall_scene)
    breeze.fill_velocity((1.0, 0.0, 0.0))

    points, forces = trace_streamline(breeze.velocity, breeze.obstruction, (2.0, 4.0, 4.0),
                                      max_steps=20)

    # the wall occupies field cell x = 7, i.e. field meters [7, 8)
    assert len(points) == 21
    assert len(forces) == len(points)
    assert all(p[0] < 7.0 for p in points)
    assert max(p[0] for p in points) > 6.9


def test_bake_seeds_every_lattice_cell(breeze):
    lines = bake(breeze)

    # x in {2, 6, 10, 14}, y in {1, 5}, z in {2, 6}
    assert len(lines) == 16
    assert all(isinstance(line, Streamline) for line in lines)
    np.testing.assert_allclose(lines[0].start, [2.0, 1.0, 2.0])
    for line in lines:
        assert len(line.points) == len(line.forces) > 2


def test_bake_still_air_is_empty(sim):
    assert bake(sim) == []


def test_bake_rejects_bad_stride(sim):
    with pytest.raises(ValueError):
        bake(sim, stride=0)

import numpy as np
import pytest

from wind import BoxScene, WindSimulation


def test_build_marks_overlapped_interior_cells(sim, pillar_scene):
    solid = sim.build_for_scene(pillar_scene)

    o = sim.obstruction.data
    # world x in [2, 3) is field cell 3 (one ghost cell before the volume)
    assert solid == 8
    assert o[3, 1:9, 3].all()
    assert sim.built


def test_ghost_shell_never_solid():
    sim = WindSimulation(4, 4, 4)
    everything = BoxScene([((-10.0, -10.0, -10.0), (10.0, 10.0, 10.0))])

    assert sim.build_for_scene(everything) == 4 * 4 * 4
    o = sim.obstruction.data
    assert not o[0].any() and not o[-1].any()
    assert not o[:, 0].any() and not o[:, -1].any()
    assert not o[:, :, 0].any() and not o[:, :, -1].any()


def test_rebuild_is_idempotent(sim, pillar_scene):
    sim.build_for_scene(pillar_scene)
    first = sim.obstruction.data.copy()

    sim.build_for_scene(pillar_scene)

    np.testing.assert_array_equal(sim.obstruction.data, first)


def test_rebuild_with_empty_scene_clears(sim, pillar_scene):
    sim.build_for_scene(pillar_scene)
    assert sim.build_for_scene(BoxScene()) == 0


def test_position_offsets_the_volume(sim, pillar_scene):
    assert sim.build_for_scene(pillar_scene, position=(10.0, 0.0, 0.0)) == 0


def test_touching_geometry_does_not_mark_neighbour(sim):
    # Spans exactly world x in [2, 3]: shrunken query boxes keep cells 2 and 4 free
    scene = BoxScene([((2.0, 0.0, 2.0), (3.0, 8.0, 3.0))])
    sim.build_for_scene(scene)

    o = sim.obstruction.data
    assert o[3, 1, 3]
    assert not o[2, 1, 3] and not o[4, 1, 3]


def test_oracle_receives_shrunken_cell_boxes():
    calls = []

    def oracle(lo, hi):
        calls.append((lo.copy(), hi.copy()))
        return False

    sim = WindSimulation(2, 2, 2, cell_size=2.0)
    sim.build_for_scene(oracle, position=(1.0, 1.0, 1.0))

    assert len(calls) == 1
    lo, hi = calls[0]
    np.testing.assert_allclose(lo, [1.1, 1.1, 1.1])
    np.testing.assert_allclose(hi, [2.9, 2.9, 2.9])


def test_box_scene_rejects_inverted_box():
    with pytest.raises(ValueError):
        BoxScene().add_box((1, 1, 1), (0, 2, 2))

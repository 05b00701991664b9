import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from wind import BoxScene, WindSimulation


@pytest.fixture
def sim():
    """8 x 8 x 8 cell simulation, no obstructions, 1 m cells."""
    return WindSimulation(8, 8, 8)


@pytest.fixture
def wall_scene():
    """A thin wall across the volume at world x in [6.2, 6.8]."""
    scene = BoxScene()
    scene.add_box((6.2, 0.0, 0.0), (6.8, 8.0, 8.0))
    return scene


@pytest.fixture
def pillar_scene():
    """A one-cell pillar through interior cell (2, *, 2)."""
    return BoxScene([((2.2, 0.0, 2.2), (2.8, 8.0, 2.8))])


@pytest.fixture
def rng():
    return np.random.default_rng(1234)

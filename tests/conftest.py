import matplotlib

matplotlib.use("Agg")

import pytest

from puttlab.physics.ball_roll import ShotParameters
from puttlab.terrain.green import GreenShape, ShapeSeeds
from puttlab.terrain.heightmap import TerrainContext


@pytest.fixture
def flat_terrain():
    return TerrainContext.flat()


@pytest.fixture(scope="session")
def seeded_terrain():
    return TerrainContext.build(seed=1234)


@pytest.fixture
def green():
    # Mid-range seeds: a comfortably large green around the hole.
    return GreenShape(ShapeSeeds(seed_a=(0.5, 0.5, 0.5, 0.5), seed_b=(0.5, 0.5, 0.5, 0.5)))


@pytest.fixture
def flat_shot():
    return ShotParameters(slope_deg=0.0, stimp=3.0, true_roll=0.0, launch_angle_deg=0.0)

import numpy as np
import pytest

from puttlab.terrain.green import GreenShape, ShapeSeeds, value_noise


def test_seeds_are_reproducible_and_in_unit_interval():
    a = ShapeSeeds.generate(5)
    b = ShapeSeeds.generate(5)
    assert a == b
    for v in a.seed_a + a.seed_b:
        assert 0.0 <= v < 1.0


def test_unseeded_shapes_vary():
    shapes = {ShapeSeeds.generate() for _ in range(4)}
    assert len(shapes) > 1


def test_signed_distance_is_pure(green):
    other = GreenShape(green.seeds)
    for x, z in [(0.0, 0.0), (1.3, -0.7), (5.0, 5.0), (-2.2, 1.9)]:
        assert green.signed_distance(x, z) == other.signed_distance(x, z)
        assert green.signed_distance(x, z) == green.signed_distance(x, z)


@pytest.mark.parametrize("seed", range(10))
def test_hole_and_spawn_are_inside(seed):
    shape = GreenShape.random(seed)
    assert shape.signed_distance(0.0, 0.0) < 0
    assert shape.contains(3.0, 0.0)


def test_far_points_are_outside(green):
    r = green.bounding_radius()
    for ang in np.linspace(0, 2 * np.pi, 12, endpoint=False):
        x, z = 2 * r * np.cos(ang), 2 * r * np.sin(ang)
        assert green.signed_distance(float(x), float(z)) > 0


def test_value_noise_range():
    rng = np.random.default_rng(1)
    for x, y in rng.uniform(-50, 50, size=(200, 2)):
        v = value_noise(float(x), float(y))
        assert 0.0 <= v < 1.0


def test_outline_polygon_is_boundary(green):
    poly = green.outline()
    assert poly.is_valid
    assert poly.area > 10.0
    for x, z in list(poly.exterior.coords)[:-1:15]:
        assert abs(green.signed_distance(x, z)) < 1e-3


def test_negative_seed_is_accepted():
    a = ShapeSeeds.generate(-7)
    assert a == ShapeSeeds.generate(-7)
    assert a == ShapeSeeds.generate(2**32 - 7)
    assert GreenShape.random(-7).seeds == a

"""
Terrain: seeded noise grids, height-field sampling, and the green outline.
"""
from .noise import build_terrain_grids, noise_grid_from_seed, normalize_grid, smooth_grid
from .heightmap import TerrainContext, bilinear_sample
from .green import GreenShape, ShapeSeeds

__all__ = [
    "build_terrain_grids",
    "noise_grid_from_seed",
    "normalize_grid",
    "smooth_grid",
    "TerrainContext",
    "bilinear_sample",
    "GreenShape",
    "ShapeSeeds",
]

import numpy as np
from scipy.ndimage import convolve

TR_GRID_SIZE = 50
TR_BASE_AMP = 0.5
TR_TARGET_AMP = 0.1
TR_SMOOTH_PASSES = 8

_BOX_KERNEL = np.ones((3, 3), dtype=float)


def fold_seed(seed: int) -> int:
    """
    Any integer seed as an unsigned 32-bit value (negative seeds wrap).
    """
    return int(seed) & 0xFFFFFFFF


def make_rng(seed: int | None = None) -> np.random.Generator:
    """
    Seeded generator when seed is given (reproducible), OS entropy otherwise.
    """
    return np.random.default_rng(None if seed is None else fold_seed(seed))


def make_noise_grid(size: int, amplitude: float, rng: np.random.Generator) -> np.ndarray:
    """
    size x size grid of independent uniform samples in [-amplitude, amplitude].
    """
    return rng.uniform(-amplitude, amplitude, size=(size, size))


def smooth_grid(grid: np.ndarray, passes: int) -> np.ndarray:
    """
    Repeated 3x3 box average. Edge cells average only their in-bounds
    neighbours (4 at corners, 6 along edges, 9 inside).
    """
    cur = np.asarray(grid, dtype=float)
    counts = convolve(np.ones_like(cur), _BOX_KERNEL, mode="constant", cval=0.0)
    for _ in range(int(passes)):
        total = convolve(cur, _BOX_KERNEL, mode="constant", cval=0.0)
        cur = total / counts
    return cur


def normalize_grid(grid: np.ndarray, target_amp: float) -> np.ndarray:
    """
    Rescale so max |cell| == target_amp. Near-zero grids come back unscaled.
    """
    max_abs = float(np.max(np.abs(grid))) if grid.size else 0.0
    if max_abs < 1e-9:
        return grid
    return grid * (target_amp / max_abs)


def build_noise_grid(
    rng: np.random.Generator,
    passes: int = TR_SMOOTH_PASSES,
    size: int = TR_GRID_SIZE,
    base_amp: float = TR_BASE_AMP,
    target_amp: float = TR_TARGET_AMP,
) -> np.ndarray:
    grid = make_noise_grid(size, base_amp, rng)
    grid = normalize_grid(smooth_grid(grid, passes), target_amp)
    grid.setflags(write=False)
    return grid


def build_terrain_grids(seed: int | None = None, size: int = TR_GRID_SIZE):
    """
    Build the three terrain grids from one RNG stream.

    Draw order is fixed (lateral X, lateral Z, then height) so a seed
    reproduces all three grids exactly.

    Returns:
      (accel_x, accel_z, height) as read-only N x N arrays
    """
    rng = make_rng(seed)
    accel_x = build_noise_grid(rng, passes=TR_SMOOTH_PASSES, size=size)
    accel_z = build_noise_grid(rng, passes=TR_SMOOTH_PASSES, size=size)
    height = build_noise_grid(rng, passes=TR_SMOOTH_PASSES + 2, size=size)
    return accel_x, accel_z, height


def noise_grid_from_seed(seed: int | None = None, passes: int = TR_SMOOTH_PASSES) -> np.ndarray:
    """Single grid from its own RNG stream; same seed -> identical grid."""
    return build_noise_grid(make_rng(seed), passes=passes)

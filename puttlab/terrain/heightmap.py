import math

import numpy as np

from puttlab.terrain.noise import TR_GRID_SIZE, build_terrain_grids

TR_WORLD_SIZE = 12.0
HEIGHT_SCALE = 0.01
NORMAL_EPS = 0.05
TR_MIN_SPEED = 0.8


def bilinear_sample(rows, x: float, z: float, world_size: float) -> float:
    """
    Bilinear lookup of a square grid laid over [-world/2, world/2]^2.
    Coordinates beyond the footprint clamp to the edge.

    rows: grid as nested lists (rows indexed by z, columns by x)
    """
    size = len(rows)
    half = world_size / 2.0
    u = min(max((x + half) / world_size, 0.0), 1.0)
    v = min(max((z + half) / world_size, 0.0), 1.0)
    fx = u * (size - 1)
    fy = v * (size - 1)
    x0 = int(math.floor(fx))
    y0 = int(math.floor(fy))
    x1 = min(x0 + 1, size - 1)
    y1 = min(y0 + 1, size - 1)
    tx = fx - x0
    ty = fy - y0
    v00 = rows[y0][x0]
    v10 = rows[y0][x1]
    v01 = rows[y1][x0]
    v11 = rows[y1][x1]
    return (v00 * (1 - tx) + v10 * tx) * (1 - ty) + (v01 * (1 - tx) + v11 * tx) * ty


def true_roll_speed_scale(speed: float) -> float:
    """
    Speed factor on the true-roll field: 2.0 at or below TR_MIN_SPEED,
    a linear falloff up to 1 m/s, 0.1 from 1 m/s on.
    """
    if speed >= 1.0:
        return 0.1
    if speed <= TR_MIN_SPEED:
        return 2.0
    return 2.0 - (speed - TR_MIN_SPEED) / (2.0 - TR_MIN_SPEED)


class TerrainContext:
    """
    Immutable terrain for one "new terrain" event, in METERS.

    Coordinate system:
      - X: left/right
      - Z: forward/back (the global slope tilts along +Z)
      - Y: elevation (up)

    Grids are indexed [iz, ix] and cover [-world/2, world/2] on both axes.
    A context without grids is flat ground with no true roll.
    """

    def __init__(
        self,
        height: np.ndarray | None = None,
        accel_x: np.ndarray | None = None,
        accel_z: np.ndarray | None = None,
        world_size: float = TR_WORLD_SIZE,
        height_scale: float = HEIGHT_SCALE,
        seed: int | None = None,
    ):
        for name, grid in (("height", height), ("accel_x", accel_x), ("accel_z", accel_z)):
            if grid is None:
                continue
            if grid.ndim != 2 or grid.shape[0] != grid.shape[1] or grid.shape[0] < 2:
                raise ValueError(f"{name} grid must be square and at least 2x2, got {grid.shape}")
        if (accel_x is None) != (accel_z is None):
            raise ValueError("accel_x and accel_z must be given together")
        if world_size <= 0:
            raise ValueError("world_size must be positive")

        self.height = self._frozen(height)
        self.accel_x = self._frozen(accel_x)
        self.accel_z = self._frozen(accel_z)
        self.world_size = float(world_size)
        self.height_scale = float(height_scale)
        self.seed = seed

        # Scalar lookups in the integrators go through plain lists.
        self._height_rows = None if height is None else self.height.tolist()
        self._ax_rows = None if accel_x is None else self.accel_x.tolist()
        self._az_rows = None if accel_z is None else self.accel_z.tolist()

    @staticmethod
    def _frozen(grid):
        if grid is None:
            return None
        out = np.array(grid, dtype=float)
        out.setflags(write=False)
        return out

    @classmethod
    def build(cls, seed: int | None = None, size: int = TR_GRID_SIZE,
              world_size: float = TR_WORLD_SIZE) -> "TerrainContext":
        """
        Generate seeded terrain (height + two true-roll grids).
        """
        accel_x, accel_z, height = build_terrain_grids(seed, size=size)
        return cls(height=height, accel_x=accel_x, accel_z=accel_z,
                   world_size=world_size, seed=seed)

    @classmethod
    def flat(cls, world_size: float = TR_WORLD_SIZE) -> "TerrainContext":
        return cls(world_size=world_size)

    @property
    def is_built(self) -> bool:
        return self.height is not None

    @property
    def grid_size(self) -> int:
        return 0 if self.height is None else int(self.height.shape[0])

    def node_position(self, ix: int, iz: int) -> tuple[float, float]:
        """
        World (x, z) of grid node [iz, ix].
        """
        n = self.grid_size
        if n < 2:
            raise ValueError("terrain has no height grid")
        half = self.world_size / 2.0
        x = ix / (n - 1) * self.world_size - half
        z = iz / (n - 1) * self.world_size - half
        return x, z

    def get_height_at(self, x: float, z: float) -> float:
        if self._height_rows is None:
            return 0.0
        return bilinear_sample(self._height_rows, x, z, self.world_size) * self.height_scale

    def get_normal_at(self, x: float, z: float) -> tuple[float, float, float]:
        """
        Unit surface normal from central differences at +/- NORMAL_EPS.
        """
        eps = NORMAL_EPS
        dx = (self.get_height_at(x + eps, z) - self.get_height_at(x - eps, z)) / (2 * eps)
        dz = (self.get_height_at(x, z + eps) - self.get_height_at(x, z - eps)) / (2 * eps)
        nx, ny, nz = -dx, 1.0, -dz
        length = math.sqrt(nx * nx + ny * ny + nz * nz)
        return nx / length, ny / length, nz / length

    def get_true_roll_accel(self, x: float, z: float, vx: float, vz: float,
                            strength: float = 1.0) -> tuple[float, float]:
        """
        Lateral micro-break acceleration (ax, az); stronger on slow balls.
        """
        if strength <= 0 or self._ax_rows is None:
            return 0.0, 0.0
        scale = true_roll_speed_scale(math.hypot(vx, vz)) * strength
        ax = bilinear_sample(self._ax_rows, x, z, self.world_size) * scale
        az = bilinear_sample(self._az_rows, x, z, self.world_size) * scale
        return ax, az

    def height_grid_m(self) -> np.ndarray:
        """
        Height grid in meters (zeros for flat terrain).
        """
        if self.height is None:
            return np.zeros((TR_GRID_SIZE, TR_GRID_SIZE), dtype=float)
        return self.height * self.height_scale

    def axes(self) -> tuple[np.ndarray, np.ndarray]:
        """
        1D node coordinates along X and Z.
        """
        n = self.grid_size or TR_GRID_SIZE
        half = self.world_size / 2.0
        axis = np.linspace(-half, half, n)
        return axis, axis.copy()

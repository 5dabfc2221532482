import math
from dataclasses import dataclass

import numpy as np
from shapely.geometry import Polygon

from puttlab.terrain.noise import fold_seed

# Shape parameters were authored for a 60 m world; the green lives in 12 m.
SHAPE_SCALE = 0.4
_SHAPE_STREAM = 0x5EED


def _mix(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _hash01(x: float, y: float) -> float:
    return (math.sin(x * 12.9898 + y * 78.233) * 43758.5453123) % 1.0


def value_noise(x: float, y: float) -> float:
    """
    Smoothstep-interpolated lattice value noise in [0, 1).
    """
    ix = math.floor(x)
    iy = math.floor(y)
    fx = x - ix
    fy = y - iy
    fx = fx * fx * (3 - 2 * fx)
    fy = fy * fy * (3 - 2 * fy)

    a = _hash01(ix, iy)
    b = _hash01(ix + 1, iy)
    c = _hash01(ix, iy + 1)
    d = _hash01(ix + 1, iy + 1)
    return (a * (1 - fx) + b * fx) * (1 - fy) + (c * (1 - fx) + d * fx) * fy


def sd_ellipse(px: float, pz: float, rx: float, rz: float) -> float:
    qx = px / rx
    qz = pz / rz
    return math.sqrt(qx * qx + qz * qz) - 1.0


def _rotate(x: float, z: float, angle: float) -> tuple[float, float]:
    c = math.cos(angle)
    s = math.sin(angle)
    return c * x - s * z, s * x + c * z


@dataclass(frozen=True)
class ShapeSeeds:
    """
    Two 4-tuples in [0, 1) driving the green outline.
    """
    seed_a: tuple[float, float, float, float]
    seed_b: tuple[float, float, float, float]

    @classmethod
    def generate(cls, seed: int | None = None) -> "ShapeSeeds":
        rng = np.random.default_rng(None if seed is None else [_SHAPE_STREAM, fold_seed(seed)])
        a = rng.random(4)
        b = rng.random(4)
        return cls(seed_a=tuple(float(v) for v in a), seed_b=tuple(float(v) for v in b))


class GreenShape:
    """
    Organic green outline as a signed distance field (negative = inside).

    A main ellipse and two lobes, unioned, with two octaves of edge
    noise. Everything is derived from the ShapeSeeds, so evaluating the
    same seeds anywhere gives the same boundary.
    """

    def __init__(self, seeds: ShapeSeeds):
        self.seeds = seeds
        sA, sB = seeds.seed_a, seeds.seed_b
        S = SHAPE_SCALE

        self.angles = (
            _mix(-0.18, 0.22, sA[0]),
            _mix(-0.45, -0.05, sA[1]),
            _mix(0.08, 0.55, sA[2]),
        )
        self.lobe1_offset = (_mix(2.8, 6.2, sA[3]) * S, _mix(-3.2, -0.6, sB[0]) * S)
        self.lobe2_offset = (_mix(-6.0, -2.6, sB[1]) * S, _mix(0.8, 3.8, sB[2]) * S)

        self.main_radii = (_mix(10.5, 15.5, sB[3]) * S, _mix(8.2, 11.8, sA[0]) * S)
        self.lobe1_radii = (_mix(4.2, 7.0, sA[1]) * S, _mix(3.4, 5.6, sA[2]) * S)
        self.lobe2_radii = (_mix(4.0, 6.8, sB[0]) * S, _mix(3.0, 5.0, sB[1]) * S)

        self.edge_f1 = _mix(0.16, 0.32, sA[3]) / S
        self.edge_f2 = _mix(0.36, 0.62, sB[2]) / S
        self.edge_amp = _mix(0.22, 0.62, sB[3]) * S

    @classmethod
    def random(cls, seed: int | None = None) -> "GreenShape":
        return cls(ShapeSeeds.generate(seed))

    def signed_distance(self, x: float, z: float) -> float:
        sA, sB = self.seeds.seed_a, self.seeds.seed_b

        p0x, p0z = _rotate(x, z, self.angles[0])
        p1x, p1z = _rotate(x - self.lobe1_offset[0], z - self.lobe1_offset[1], self.angles[1])
        p2x, p2z = _rotate(x - self.lobe2_offset[0], z - self.lobe2_offset[1], self.angles[2])

        d = min(
            sd_ellipse(p0x, p0z, *self.main_radii),
            sd_ellipse(p1x, p1z, *self.lobe1_radii),
            sd_ellipse(p2x, p2z, *self.lobe2_radii),
        )

        f1, f2 = self.edge_f1, self.edge_f2
        edge_noise = (
            value_noise(x * f1 + sA[0] * 3.0, z * f1 + sA[1] * 3.0) * 0.6
            + value_noise(x * f2 + sB[0] * 5.0, z * f2 + sB[1] * 5.0) * 0.35
        )
        return d + (edge_noise - 0.45) * self.edge_amp

    def contains(self, x: float, z: float) -> bool:
        return self.signed_distance(x, z) <= 0.0

    def bounding_radius(self) -> float:
        """
        Rough radius enclosing the main ellipse, plus 1 m.
        """
        return max(self.main_radii) + 1.0

    def outline(self, n_rays: int = 180, iters: int = 30) -> Polygon:
        """
        Approximate outline polygon by bisecting the zero crossing of the
        SDF along rays from the hole. Lobes that fold back behind the main
        body are flattened to their outermost crossing.
        """
        r_max = self.bounding_radius() * 2.0
        pts = []
        for k in range(n_rays):
            ang = 2.0 * math.pi * k / n_rays
            dx, dz = math.cos(ang), math.sin(ang)

            # Outermost inside sample along the ray.
            samples = np.linspace(0.0, r_max, 96)
            inside = [r for r in samples if self.signed_distance(r * dx, r * dz) <= 0.0]
            if not inside:
                continue
            lo = float(inside[-1])
            hi = min(lo + r_max / 95.0, r_max)
            for _ in range(iters):
                mid = 0.5 * (lo + hi)
                if self.signed_distance(mid * dx, mid * dz) <= 0.0:
                    lo = mid
                else:
                    hi = mid
            pts.append((lo * dx, lo * dz))

        if len(pts) < 3:
            return Polygon()
        return Polygon(pts)

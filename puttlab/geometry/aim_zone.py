import logging
import math
from dataclasses import dataclass

import numpy as np
from shapely.geometry import Polygon

from puttlab.physics.ball_roll import BALL_RADIUS_M

logger = logging.getLogger(__name__)

MIN_ZONE_POINTS = 4
ELLIPSE_PADDING = 1.05
MIN_AXIS_M = 0.005
MIN_AIM_LINE_M = 0.001


def _cross(o, a, b) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def convex_hull(points):
    """
    Andrew's monotone chain on (x, z) points.

    Returns the hull counter-clockwise with collinear points dropped, or
    the (sorted) input itself when there are 2 points or fewer.
    """
    pts = sorted((float(p[0]), float(p[1])) for p in points)
    if len(pts) <= 2:
        return pts

    lower = []
    for p in pts:
        while len(lower) >= 2 and _cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper = []
    for p in reversed(pts):
        while len(upper) >= 2 and _cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    return lower[:-1] + upper[:-1]


@dataclass(frozen=True)
class BoundingEllipse:
    """
    PCA ellipse: centre, semi-axes a (principal) and b, unit axes e and f.
    """
    cx: float
    cz: float
    a: float
    b: float
    ex: float
    ez: float
    fx: float
    fz: float

    @property
    def is_degenerate(self) -> bool:
        return self.a <= MIN_AXIS_M or self.b <= MIN_AXIS_M

    def local(self, x: float, z: float) -> tuple[float, float]:
        dx, dz = x - self.cx, z - self.cz
        return dx * self.ex + dz * self.ez, dx * self.fx + dz * self.fz

    def contains(self, x: float, z: float) -> bool:
        if self.a <= 0 or self.b <= 0:
            return False
        u, v = self.local(x, z)
        return (u / self.a) ** 2 + (v / self.b) ** 2 <= 1.0

    def outline(self, segments: int = 64):
        ang = np.linspace(0.0, 2.0 * np.pi, segments + 1)
        ca, sa = np.cos(ang), np.sin(ang)
        xs = self.cx + ca * self.a * self.ex + sa * self.b * self.fx
        zs = self.cz + ca * self.a * self.ez + sa * self.b * self.fz
        return list(zip(xs.tolist(), zs.tolist()))


def bounding_ellipse(hull) -> BoundingEllipse | None:
    """
    Fast approximate bounding ellipse via PCA of the hull points.

    Axes follow the eigenvectors of the 2x2 covariance (closed form);
    semi-axes are the largest projection on each, padded 5%.
    """
    if len(hull) == 0:
        return None
    pts = np.asarray(hull, dtype=float)
    cx, cz = pts.mean(axis=0)
    d = pts - (cx, cz)
    cxx = float(np.mean(d[:, 0] * d[:, 0]))
    cxz = float(np.mean(d[:, 0] * d[:, 1]))
    czz = float(np.mean(d[:, 1] * d[:, 1]))

    avg = (cxx + czz) / 2.0
    diff = (cxx - czz) / 2.0
    lam1 = avg + math.sqrt(diff * diff + cxz * cxz)

    if abs(cxz) > 1e-12:
        ex, ez = lam1 - czz, cxz
    elif cxx >= czz:
        ex, ez = 1.0, 0.0
    else:
        ex, ez = 0.0, 1.0
    elen = math.hypot(ex, ez)
    ex, ez = ex / elen, ez / elen
    fx, fz = -ez, ex

    a = float(np.max(np.abs(d @ (ex, ez)))) * ELLIPSE_PADDING
    b = float(np.max(np.abs(d @ (fx, fz)))) * ELLIPSE_PADDING
    return BoundingEllipse(float(cx), float(cz), a, b, ex, ez, fx, fz)


@dataclass(frozen=True)
class AimLineMetrics:
    start: tuple[float, float]
    foot: tuple[float, float]         # foot of the perpendicular from the hole
    dist_aim_hole_m: float
    number_of_balls: float
    aim_offset_m: float
    break_direction: str
    slope_direction: str

    @property
    def putt_type(self) -> str:
        if self.slope_direction:
            return f"{self.break_direction}, {self.slope_direction}"
        return self.break_direction

    def label(self) -> str:
        return (
            f"{self.putt_type} putt\n"
            f"{self.number_of_balls:.1f} balls  ({self.dist_aim_hole_m * 100:.1f} cm)\n"
            f"aim offset: {self.aim_offset_m * 100:.1f} cm"
        )


def aim_line_metrics(ellipse: BoundingEllipse | None, shot_start, terrain,
                     slope_deg: float = 0.0) -> AimLineMetrics | None:
    """
    Aim line from the shot start through the zone centre, and how far
    it passes from the hole. None when the zone or line is degenerate.
    """
    if ellipse is None or ellipse.is_degenerate or shot_start is None:
        return None
    sx, sz = float(shot_start[0]), float(shot_start[1])
    dx, dz = ellipse.cx - sx, ellipse.cz - sz
    line_len = math.hypot(dx, dz)
    if line_len <= MIN_AIM_LINE_M:
        return None

    dist_aim_hole = abs(sx * ellipse.cz - sz * ellipse.cx) / line_len
    ux, uz = dx / line_len, dz / line_len
    proj = -sx * ux - sz * uz
    foot_x, foot_z = sx + proj * ux, sz + proj * uz
    aim_offset = math.hypot(ellipse.cx - foot_x, ellipse.cz - foot_z)

    if abs(ellipse.cx) < 0.001:
        lr = "Straight"
    elif ellipse.cx < 0:
        lr = "Left to Right"
    else:
        lr = "Right to Left"

    height_ball = terrain.get_height_at(sx, sz) - sz * math.sin(math.radians(slope_deg))
    height_diff = terrain.get_height_at(0.0, 0.0) - height_ball
    if abs(height_diff) < 0.0001:
        ud = ""
    else:
        ud = "Uphill" if height_diff > 0 else "Downhill"

    return AimLineMetrics(
        start=(sx, sz),
        foot=(foot_x, foot_z),
        dist_aim_hole_m=dist_aim_hole,
        number_of_balls=dist_aim_hole / (2 * BALL_RADIUS_M),
        aim_offset_m=aim_offset,
        break_direction=lr,
        slope_direction=ud,
    )


@dataclass(frozen=True)
class AimZone:
    points: tuple
    hull: tuple
    ellipse: BoundingEllipse | None
    metrics: AimLineMetrics | None = None

    @property
    def is_empty(self) -> bool:
        return len(self.hull) == 0

    @property
    def polygon(self) -> Polygon:
        if len(self.hull) < 3:
            return Polygon()
        return Polygon(self.hull)

    @property
    def area(self) -> float:
        return float(self.polygon.area)


def analyze_aim_points(points, shot_start=None, terrain=None, slope_deg: float = 0.0) -> AimZone:
    """
    Full recompute of hull, ellipse and aim-line metrics. Fewer than
    MIN_ZONE_POINTS points, a hull under 3 vertices, or a degenerate
    ellipse suppress the dependent pieces.
    """
    pts = tuple((float(p[0]), float(p[1])) for p in points)
    if len(pts) < MIN_ZONE_POINTS:
        return AimZone(points=pts, hull=(), ellipse=None)

    hull = tuple(convex_hull(pts))
    if len(hull) < 3:
        return AimZone(points=pts, hull=(), ellipse=None)

    ellipse = bounding_ellipse(hull)
    if ellipse is not None and ellipse.is_degenerate:
        ellipse = None

    metrics = None
    if terrain is not None:
        metrics = aim_line_metrics(ellipse, shot_start, terrain, slope_deg)
    return AimZone(points=pts, hull=hull, ellipse=ellipse, metrics=metrics)


class AimPointSet:
    """
    Append-only validated aim points; the zone is rebuilt on every append.
    Not thread-safe: mutate from the session tick only.
    """

    def __init__(self):
        self._points = []
        self.zone = AimZone(points=(), hull=(), ellipse=None)

    def __len__(self):
        return len(self._points)

    def __iter__(self):
        return iter(self._points)

    @property
    def points(self) -> tuple:
        return tuple(self._points)

    def append(self, x: float, z: float, shot_start=None, terrain=None,
               slope_deg: float = 0.0) -> AimZone:
        self._points.append((float(x), float(z)))
        self.zone = analyze_aim_points(self._points, shot_start, terrain, slope_deg)
        logger.info("Aim zone rebuilt: points=%d hull=%d ellipse=%s",
                    len(self._points), len(self.zone.hull), self.zone.ellipse is not None)
        return self.zone

    def clear(self) -> None:
        self._points = []
        self.zone = AimZone(points=(), hull=(), ellipse=None)

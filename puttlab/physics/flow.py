"""
Fall-line flow: where a slowly rolling ball wants to go.

Used for streamline and grid-flow overlays; friction is ignored, only
gravity along the terrain and global slope plus the true-roll field.
"""
import math

from puttlab.physics.ball_roll import GRAVITY, HOLE_RADIUS_M, ROLLING_FACTOR, ShotParameters

FLOW_PROBE_SPEED = 0.3
STREAM_STEP_M = 0.04
STREAM_MAX_STEPS = 2000
STREAM_MIN_GRAD = 0.003
STREAM_MIN_SPACING_M = 0.03
BOUNDARY_MARGIN_M = 0.1
GRID_MIN_GRAD = 0.01


def gradient_at(terrain, shot: ShotParameters, x: float, z: float) -> tuple[float, float]:
    global_slope_z = GRAVITY * math.sin(shot.slope_rad) * ROLLING_FACTOR
    nx, _, nz = terrain.get_normal_at(x, z)
    gx = -nx * GRAVITY * ROLLING_FACTOR
    gz = -nz * GRAVITY * ROLLING_FACTOR + global_slope_z
    tr_ax, tr_az = terrain.get_true_roll_accel(x, z, FLOW_PROBE_SPEED, 0.0, shot.true_roll)
    return gx + tr_ax, gz + tr_az


def trace_streamline(terrain, green, shot: ShotParameters, start_x: float, start_z: float):
    """
    Follow the normalized gradient from (start_x, start_z).

    Stops on a flat spot, near the green edge, or at the hole (that last
    point is kept). Returns a list of (x, z).
    """
    x, z = float(start_x), float(start_z)
    points = [(x, z)]
    min_sp_sq = STREAM_MIN_SPACING_M ** 2

    for _ in range(STREAM_MAX_STEPS):
        gx, gz = gradient_at(terrain, shot, x, z)
        mag = math.hypot(gx, gz)
        if mag < STREAM_MIN_GRAD:
            break
        x += gx / mag * STREAM_STEP_M
        z += gz / mag * STREAM_STEP_M
        if green is not None and green.signed_distance(x, z) > -BOUNDARY_MARGIN_M:
            break
        if math.hypot(x, z) < HOLE_RADIUS_M * 1.5:
            points.append((x, z))
            break
        lx, lz = points[-1]
        if (x - lx) ** 2 + (z - lz) ** 2 >= min_sp_sq:
            points.append((x, z))
    return points


def pick_grid_target(terrain, green, shot: ShotParameters, x: float, z: float, spacing: float):
    """
    4-neighbour grid node most aligned with the gradient, or None.
    """
    gx, gz = gradient_at(terrain, shot, x, z)
    if math.hypot(gx, gz) < GRID_MIN_GRAD:
        return None

    best_dot = -math.inf
    best = None
    for dx, dz in ((spacing, 0.0), (-spacing, 0.0), (0.0, spacing), (0.0, -spacing)):
        nx, nz = x + dx, z + dz
        if green is not None and green.signed_distance(nx, nz) > -BOUNDARY_MARGIN_M:
            continue
        dot = gx * dx + gz * dz
        if dot > best_dot:
            best_dot = dot
            best = (nx, nz)
    if best_dot <= 0:
        return None
    return best

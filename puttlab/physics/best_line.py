import logging
import math

import numpy as np

from puttlab.physics.ball_roll import (
    BALL_RADIUS_M,
    HINT,
    HOLE_RADIUS_M,
    MAX_SIM_STEPS,
    SIM_DT,
    STOP_SPEED,
    BallPhase,
    BallState,
    ShotParameters,
    distance_to_hole,
    launch_speed,
    step,
)
from puttlab.physics.best_line_result import HintResult

logger = logging.getLogger(__name__)

HOLE_HIT_DIST = HOLE_RADIUS_M + BALL_RADIUS_M * 0.5
OVERSHOOT_DIST = HOLE_RADIUS_M * 4.0


class TrajectorySimulator:
    """
    Rolling putt with lip force and proximity holing, recording the path.

    No bounce and no cup floor: a ball is "holed" as soon as it comes
    within HOLE_HIT_DIST of the hole, at whatever speed. Leaving the
    green ends the run.
    """

    def __init__(
        self,
        terrain,
        green,
        shot: ShotParameters,
        dt: float = SIM_DT,
        max_steps: int = MAX_SIM_STEPS,
        record_every: int = 4,
    ):
        self.terrain = terrain
        self.green = green  # None disables the boundary stop
        self.shot = shot
        self.dt = float(dt)
        self.max_steps = int(max_steps)
        self.record_every = max(1, int(record_every))

    def simulate(self, start_x, start_y, start_z, v0_x, v0_z):
        """
        Returns dict with:
          path (list of (x, y, z))
          holed (bool), hole_speed (float, inf if not holed)
          min_dist_to_hole (float), steps (int)
        """
        ball = BallState(x=float(start_x), y=float(start_y), z=float(start_z),
                         vx=float(v0_x), vz=float(v0_z), phase=BallPhase.ROLLING)
        path = [ball.position]
        holed = False
        hole_speed = math.inf
        min_dist = math.inf
        airborne = False
        steps = 0

        for i in range(self.max_steps):
            if ball.speed_xz < STOP_SPEED and not airborne:
                break

            info = step(ball, self.terrain, self.shot, self.dt, HINT)
            airborne = ball.airborne
            steps += 1

            if i % self.record_every == 0:
                path.append(ball.position)

            dist = distance_to_hole(ball.x, ball.z)
            min_dist = min(min_dist, dist)
            if dist <= HOLE_HIT_DIST:
                holed = True
                hole_speed = info.start_speed
                path.append(ball.position)
                break

            if self.green is not None and self.green.signed_distance(ball.x, ball.z) > 0:
                break

        return {
            "path": path,
            "holed": holed,
            "hole_speed": hole_speed,
            "min_dist_to_hole": min_dist,
            "steps": steps,
        }


class HintSolver:
    """
    Lowest-entry-speed holing putt over a fan of launch directions.

    For each direction, binary-search the flat-green aim distance in
    distance_bounds: a holed putt (or a near miss within OVERSHOOT_DIST)
    shrinks the distance, anything else grows it. The holed candidate
    with the smallest entry speed across all directions wins.
    """

    def __init__(
        self,
        terrain,
        green,
        shot: ShotParameters,
        directions_deg=range(360),
        search_iters: int = 18,
        distance_bounds=(0.3, 6.0),
        simulator: TrajectorySimulator | None = None,
    ):
        self.shot = shot
        self.directions_deg = [float(d) for d in directions_deg]
        self.search_iters = int(search_iters)
        self.distance_bounds = (float(distance_bounds[0]), float(distance_bounds[1]))
        self.sim = simulator or TrajectorySimulator(terrain, green, shot)

    def search_direction(self, ball_pos, deg: float):
        """
        Binary search one direction. Returns the last holed candidate
        (dict with distance, speed, v0_x, v0_z, result) or None.
        """
        bx, by, bz = ball_pos
        rad = np.deg2rad(deg)
        dx, dz = float(np.cos(rad)), float(np.sin(rad))

        lo, hi = self.distance_bounds
        found = None
        for _ in range(self.search_iters):
            mid = (lo + hi) / 2.0
            speed = launch_speed(mid, self.shot.stimp)
            res = self.sim.simulate(bx, by, bz, speed * dx, speed * dz)
            if res["holed"]:
                hi = mid  # try slower
                found = {
                    "distance": mid,
                    "speed": speed,
                    "v0_x": speed * dx,
                    "v0_z": speed * dz,
                    "result": res,
                }
            elif res["min_dist_to_hole"] < OVERSHOOT_DIST:
                hi = mid  # went past the hole
            else:
                lo = mid  # came up short
        return found

    def solve(self, ball_pos, cancel=None) -> HintResult | None:
        """
        ball_pos: (x, y, z) of the resting ball
        cancel: optional threading.Event, checked between directions

        Returns the best HintResult, or None when nothing holes out (or
        the search was cancelled).
        """
        bx, by, bz = (float(v) for v in ball_pos)
        logger.info("Solving hint: ball=(%.3f, %.3f) directions=%d stimp=%.2f slope=%.2f",
                    bx, bz, len(self.directions_deg), self.shot.stimp, self.shot.slope_deg)

        best = None
        holed_dirs = 0
        for deg in self.directions_deg:
            if cancel is not None and cancel.is_set():
                logger.info("Hint search cancelled at direction %.1f", deg)
                return None

            cand = self.search_direction((bx, by, bz), deg)
            if cand is None:
                continue
            holed_dirs += 1
            logger.debug("Direction %.1f holes at distance=%.3f entry=%.4f",
                         deg, cand["distance"], cand["result"]["hole_speed"])
            if best is None or cand["result"]["hole_speed"] < best["result"]["hole_speed"]:
                best = cand

        if best is None:
            logger.info("No holing direction found")
            return None

        result = HintResult.from_best_and_context(
            stimp=self.shot.stimp,
            slope_deg=self.shot.slope_deg,
            ball_x=bx,
            ball_z=bz,
            best=best,
            directions_holed=holed_dirs,
        )
        logger.info("Hint solved: aim=%.1f deg distance=%.3f entry=%.4f (%d directions hole)",
                    result.aim_angle_deg, result.aim_distance_m, result.hole_speed, holed_dirs)
        return result

    def solve_path(self, ball_pos, cancel=None):
        """Path only (list of (x, y, z)), or None when no hint is available."""
        result = self.solve(ball_pos, cancel=cancel)
        return None if result is None else result.path

import math

from puttlab.config import BALL_CIRCLE_MAX, BALL_CIRCLE_MIN, BALL_CIRCLE_RADIUS_DEFAULT
from puttlab.geometry.aim_zone import AimPointSet
from puttlab.log import get_logger
from puttlab.physics.ball_roll import (
    BallPhase,
    ShotParameters,
    StepEvent,
    distance_to_hole,
    launch,
    place_on_circle,
    update_physics,
)
from puttlab.physics.best_line import HintSolver
from puttlab.physics.ghost_rest import GhostRestPredictor
from puttlab.physics.hint_job import HintJob
from puttlab.terrain.green import GreenShape, ShapeSeeds
from puttlab.terrain.heightmap import TerrainContext

logger = get_logger(__name__)

MAX_GHOST_DIST = 0.40  # ghost rest this close to the hole = a real make


class PuttingSession:
    """
    One player's green: terrain, outline, ball and the accumulated aim
    points. Single-threaded; tick() is the only place state changes
    during a shot.
    """

    def __init__(
        self,
        seed: int | None = None,
        shot: ShotParameters | None = None,
        circle_radius: float = BALL_CIRCLE_RADIUS_DEFAULT,
        circle_angle_rad: float = 0.0,
    ):
        self.shot = shot or ShotParameters()
        self.circle_radius = min(max(float(circle_radius), BALL_CIRCLE_MIN), BALL_CIRCLE_MAX)
        self.circle_angle = float(circle_angle_rad)

        self.terrain: TerrainContext | None = None
        self.green: GreenShape | None = None
        self.ball = None

        self.shot_aim_points = []
        self.valid_aim_points = AimPointSet()
        self.last_shot_start = None
        self.ghost_rest = None
        self.last_shot_valid = None
        self.hint_job: HintJob | None = None

        self.new_terrain(seed)

    # -- terrain -----------------------------------------------------

    def new_terrain(self, seed: int | None = None) -> None:
        """
        Replace terrain and outline wholesale, forget all aim points.
        """
        self.cancel_hint()
        self.terrain = TerrainContext.build(seed)
        self.green = GreenShape(ShapeSeeds.generate(seed))
        self.shot_aim_points = []
        self.valid_aim_points.clear()
        self.last_shot_start = None
        logger.info("New terrain built (seed=%s)", seed, extra={"seed": seed})
        self.reset_ball()

    def use_terrain(self, terrain: TerrainContext, green: GreenShape | None) -> None:
        """
        Install prebuilt terrain (flat test greens, loaded fields).
        """
        self.cancel_hint()
        self.terrain = terrain
        self.green = green
        self.shot_aim_points = []
        self.valid_aim_points.clear()
        self.last_shot_start = None
        self.reset_ball()

    # -- ball placement ----------------------------------------------

    def reset_ball(self) -> None:
        self.ball = place_on_circle(self.terrain, self.circle_radius, self.circle_angle)
        self.ghost_rest = None
        self.last_shot_valid = None

    def move_on_circle(self, delta_rad: float) -> bool:
        if not self.ball.on_circle:
            return False
        self.cancel_hint()
        self.circle_angle += delta_rad
        self.ball = place_on_circle(self.terrain, self.circle_radius, self.circle_angle)
        return True

    def set_circle_radius(self, radius: float) -> bool:
        if not self.ball.on_circle:
            return False
        self.cancel_hint()
        self.circle_radius = min(max(float(radius), BALL_CIRCLE_MIN), BALL_CIRCLE_MAX)
        self.ball = place_on_circle(self.terrain, self.circle_radius, self.circle_angle)
        return True

    # -- parameters --------------------------------------------------

    @property
    def true_roll_strength(self) -> float:
        return self.shot.true_roll

    def set_true_roll_strength(self, strength: float) -> None:
        self.shot = self.shot.with_true_roll(strength)

    def set_shot_parameters(self, shot: ShotParameters) -> None:
        self.shot = shot

    # -- shot lifecycle ----------------------------------------------

    def shoot(self, aim_x: float, aim_z: float) -> bool:
        if self.ball.moving or self.ball.captured:
            return False
        start = (self.ball.x, self.ball.z)
        if not launch(self.ball, aim_x, aim_z, self.shot):
            return False

        self.cancel_hint()
        self.last_shot_start = start
        self.shot_aim_points.append((float(aim_x), float(aim_z)))
        self.ghost_rest = None
        self.last_shot_valid = None
        logger.info("Shot %d: from=(%.3f, %.3f) aim=(%.3f, %.3f)",
                    len(self.shot_aim_points), start[0], start[1], aim_x, aim_z,
                    extra={"shot": len(self.shot_aim_points)})
        return True

    def tick(self, dt: float) -> StepEvent | None:
        event = update_physics(self.ball, self.terrain, self.shot, dt)
        if event is StepEvent.CAPTURED:
            self._on_capture()
        elif event is StepEvent.STOPPED:
            self.last_shot_valid = False
            logger.info("Ball stopped at (%.3f, %.3f), %.3f m from hole",
                        self.ball.x, self.ball.z, distance_to_hole(self.ball.x, self.ball.z))
        return event

    def _on_capture(self) -> None:
        snap = self.ball.pre_capture
        predictor = GhostRestPredictor(self.terrain, self.green, self.shot)
        self.ghost_rest = predictor.predict_rest(snap.position, snap.velocity, snap.spin)
        ghost_dist = distance_to_hole(*self.ghost_rest)
        self.last_shot_valid = ghost_dist <= MAX_GHOST_DIST
        logger.info("Captured: ghost rest=(%.3f, %.3f) dist=%.3f valid=%s",
                    self.ghost_rest[0], self.ghost_rest[1], ghost_dist, self.last_shot_valid)

        if self.last_shot_valid and self.shot_aim_points:
            ax, az = self.shot_aim_points[-1]
            self.valid_aim_points.append(ax, az, self.last_shot_start, self.terrain,
                                         self.shot.slope_deg)

    def run_until_settled(self, dt: float, max_ticks: int | None = None) -> StepEvent | None:
        """
        Tick until the ball stops or drops; returns the final event.
        """
        limit = max_ticks if max_ticks is not None else int(math.ceil(200.0 / dt))
        event = None
        for _ in range(limit):
            if not self.ball.moving:
                break
            event = self.tick(dt)
        return event

    @property
    def aim_zone(self):
        return self.valid_aim_points.zone

    @property
    def phase(self) -> BallPhase:
        return self.ball.phase

    # -- hints -------------------------------------------------------

    def _hint_solver(self, directions_deg=range(360)) -> HintSolver:
        return HintSolver(self.terrain, self.green, self.shot, directions_deg=directions_deg)

    @property
    def can_hint(self) -> bool:
        # Hints start from a resting ball only.
        return self.ball.phase in (BallPhase.ON_CIRCLE, BallPhase.AT_REST)

    def request_hint(self, directions_deg=range(360)):
        """
        Blocking hint search from the ball's current spot (None = no hint,
        or the ball is moving or holed).
        """
        if not self.can_hint:
            return None
        return self._hint_solver(directions_deg).solve(self.ball.position)

    def request_hint_async(self, directions_deg=range(360), executor=None) -> HintJob | None:
        if not self.can_hint:
            return None
        self.cancel_hint()
        self.hint_job = HintJob(self._hint_solver(directions_deg), self.ball.position)
        return self.hint_job.start(executor)

    def cancel_hint(self) -> None:
        if self.hint_job is not None and not self.hint_job.done():
            self.hint_job.cancel()

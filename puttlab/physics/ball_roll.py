import enum
import logging
import math
from dataclasses import dataclass, field, replace

logger = logging.getLogger(__name__)

GRAVITY = 9.81  # m/s^2
BALL_RADIUS_M = 0.0215
HOLE_RADIUS_M = 2.0 * BALL_RADIUS_M
CUP_DEPTH_M = 0.40
STIMP_V0 = 1.83  # stimpmeter ramp exit speed (m/s)
ROLLING_FACTOR = 5.0 / 7.0  # solid sphere rolling without slipping

BOUNCE_DAMPING = 0.3
BOUNCE_FRICTION = 0.8
MIN_BOUNCE_VEL = 0.05
LANDING_THRESHOLD = 0.001

SPIN_EFFECT_STRENGTH = 0.15
SPIN_DECAY_RATE = 2.0
SPIN_EPS = 0.01

LIP_OUTER_M = HOLE_RADIUS_M * 2.3
LIP_PEAK_ACCEL = GRAVITY * 2.5

CAPTURE_SPEED = 1.45  # faster than this over the cup lips out
LIP_OUT_DAMPING = 0.92
STOP_SPEED = 0.02
BREAK_VZ_EPS = 0.01

SIM_DT = 1.0 / 120.0
MAX_SIM_STEPS = 20000
MAX_FRAME_DT = 1.0 / 30.0


def stimp_to_mu(stimp: float) -> float:
    """
    Rolling-friction coefficient for a stimp rating (meters): a ball
    leaving the stimpmeter at STIMP_V0 stops after `stimp` meters on flat.
    """
    return STIMP_V0 * STIMP_V0 / (2.0 * GRAVITY * stimp)


def launch_speed(distance: float, stimp: float) -> float:
    """
    Horizontal launch speed that rolls `distance` meters on a flat green.
    """
    return STIMP_V0 * math.sqrt(distance / stimp)


@dataclass(frozen=True)
class ShotParameters:
    slope_deg: float = 0.0        # global tilt, downhill toward +Z when positive
    stimp: float = 3.0            # green speed (m)
    true_roll: float = 1.0        # true-roll strength multiplier
    launch_angle_deg: float = 5.0

    def __post_init__(self):
        if self.stimp <= 0:
            raise ValueError("stimp must be positive")
        if not -90.0 < self.launch_angle_deg < 90.0:
            raise ValueError("launch_angle_deg must be within (-90, 90)")

    @property
    def slope_rad(self) -> float:
        return math.radians(self.slope_deg)

    @property
    def mu_roll(self) -> float:
        return stimp_to_mu(self.stimp)

    def with_true_roll(self, strength: float) -> "ShotParameters":
        return replace(self, true_roll=float(strength))


class BallPhase(enum.Enum):
    ON_CIRCLE = "on_circle"
    ROLLING = "rolling"
    AIRBORNE = "airborne"
    AT_REST = "at_rest"
    CAPTURED = "captured"


class StepEvent(enum.Enum):
    CAPTURED = "captured"
    LIP_OUT = "lip_out"
    STOPPED = "stopped"


@dataclass(frozen=True)
class StepMode:
    """
    Physics switches distinguishing the three integrator users.

    lip_force: radial pull toward the hole near the rim
    bounce:    airborne landings bounce instead of clamping
    cup_floor: ground drops to the cup floor over the hole
    """
    lip_force: bool = True
    bounce: bool = True
    cup_floor: bool = True


PRODUCTION = StepMode(lip_force=True, bounce=True, cup_floor=True)
GHOST = StepMode(lip_force=False, bounce=True, cup_floor=False)
HINT = StepMode(lip_force=True, bounce=False, cup_floor=False)


@dataclass(frozen=True)
class BreakPoint:
    x: float
    z: float
    dir_x: float
    dir_z: float


@dataclass(frozen=True)
class Snapshot:
    position: tuple[float, float, float]
    velocity: tuple[float, float, float]
    spin: float


@dataclass
class BallState:
    x: float = 0.0
    y: float = BALL_RADIUS_M
    z: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    vz: float = 0.0
    spin: float = 0.0
    phase: BallPhase = BallPhase.ON_CIRCLE
    bounce_count: int = 0
    travel_dist: float = 0.0
    max_height: float = 0.0

    pre_capture: Snapshot | None = None
    break_points: list = field(default_factory=list)
    break_locked: bool = False
    prev_vz: float | None = None
    prev_pos_xz: tuple[float, float] | None = None

    @property
    def moving(self) -> bool:
        return self.phase in (BallPhase.ROLLING, BallPhase.AIRBORNE)

    @property
    def airborne(self) -> bool:
        return self.phase is BallPhase.AIRBORNE

    @property
    def captured(self) -> bool:
        return self.phase is BallPhase.CAPTURED

    @property
    def on_circle(self) -> bool:
        return self.phase is BallPhase.ON_CIRCLE

    @property
    def position(self) -> tuple[float, float, float]:
        return self.x, self.y, self.z

    @property
    def velocity(self) -> tuple[float, float, float]:
        return self.vx, self.vy, self.vz

    @property
    def speed_xz(self) -> float:
        return math.hypot(self.vx, self.vz)

    def snapshot(self) -> Snapshot:
        return Snapshot(self.position, self.velocity, self.spin)

    @classmethod
    def from_snapshot(cls, snap: Snapshot, phase: BallPhase = BallPhase.ROLLING) -> "BallState":
        (x, y, z), (vx, vy, vz) = snap.position, snap.velocity
        return cls(x=x, y=y, z=z, vx=vx, vy=vy, vz=vz, spin=snap.spin, phase=phase)


@dataclass
class StepInfo:
    start_speed: float
    closest_dist: float
    dist_moved: float


def distance_to_hole(x: float, z: float) -> float:
    return math.hypot(x, z)


def _over_hole(x: float, z: float) -> bool:
    return distance_to_hole(x, z) <= HOLE_RADIUS_M + BALL_RADIUS_M * 0.5


def _cup_open(ball: BallState) -> bool:
    # The cup floor only applies to a slow ball or one already below the rim.
    return ball.speed_xz < CAPTURE_SPEED or ball.y < BALL_RADIUS_M * 0.5


def _segment_closest_to_hole(ox: float, oz: float, nx: float, nz: float) -> float:
    dx = nx - ox
    dz = nz - oz
    seg_len_sq = dx * dx + dz * dz
    if seg_len_sq <= 1e-12:
        return distance_to_hole(nx, nz)
    t = max(0.0, min(1.0, -(ox * dx + oz * dz) / seg_len_sq))
    return distance_to_hole(ox + t * dx, oz + t * dz)


def step(ball: BallState, terrain, shot: ShotParameters, dt: float,
         mode: StepMode = PRODUCTION) -> StepInfo:
    """
    Advance one explicit Euler step in place.

    Decides grounded/airborne, composes the acceleration, integrates
    velocity then position and resolves the floor (bounce or clamp).
    Hole capture is left to the caller.
    """
    g = GRAVITY
    slope = shot.slope_rad
    speed = ball.speed_xz

    if mode.cup_floor and _over_hole(ball.x, ball.z) and _cup_open(ball):
        ground = -CUP_DEPTH_M
    else:
        ground = terrain.get_height_at(ball.x, ball.z)
    airborne = ball.y - BALL_RADIUS_M - ground > LANDING_THRESHOLD

    ax, ay, az = 0.0, -g, 0.0
    if not airborne:
        az += g * math.sin(slope) * ROLLING_FACTOR

        if speed > 1e-4:
            nx, ny, nz = terrain.get_normal_at(ball.x, ball.z)
            friction = shot.mu_roll * g * abs(ny)
            spin_mod = 1.0 + ball.spin * SPIN_EFFECT_STRENGTH
            spin_mod = max(0.5, min(1.5, spin_mod))
            ax -= friction * spin_mod * (ball.vx / speed)
            az -= friction * spin_mod * (ball.vz / speed)
            ax += -nx * g * ROLLING_FACTOR
            az += -nz * g * ROLLING_FACTOR

        ball.spin *= math.exp(-SPIN_DECAY_RATE * dt)
        if abs(ball.spin) < SPIN_EPS:
            ball.spin = 0.0

        tr_ax, tr_az = terrain.get_true_roll_accel(ball.x, ball.z, ball.vx, ball.vz, shot.true_roll)
        ax += tr_ax
        az += tr_az

        if mode.lip_force:
            dh = distance_to_hole(ball.x, ball.z)
            if 0.001 < dh < LIP_OUTER_M:
                t = 1.0 - dh / LIP_OUTER_M
                lip = LIP_PEAK_ACCEL * t * t
                ax += -ball.x / dh * lip
                az += -ball.z / dh * lip

        ay = 0.0
        ball.vy = 0.0
    else:
        az += g * math.sin(slope)

    ball.vx += ax * dt
    ball.vy += ay * dt
    ball.vz += az * dt
    new_x = ball.x + ball.vx * dt
    new_y = ball.y + ball.vy * dt
    new_z = ball.z + ball.vz * dt

    if new_y > ball.max_height:
        ball.max_height = new_y

    if mode.cup_floor and _over_hole(new_x, new_z) and _cup_open(ball):
        min_y = -CUP_DEPTH_M + BALL_RADIUS_M
    else:
        min_y = terrain.get_height_at(new_x, new_z) + BALL_RADIUS_M

    if new_y < min_y:
        if mode.bounce and airborne and abs(ball.vy) > MIN_BOUNCE_VEL:
            ball.bounce_count += 1
            ball.vy = -ball.vy * BOUNCE_DAMPING
            ball.vx *= BOUNCE_FRICTION
            ball.vz *= BOUNCE_FRICTION
        else:
            ball.vy = 0.0
            airborne = False
        new_y = min_y

    moved = math.hypot(new_x - ball.x, new_z - ball.z)
    closest = _segment_closest_to_hole(ball.x, ball.z, new_x, new_z)

    ball.travel_dist += moved
    ball.x, ball.y, ball.z = new_x, new_y, new_z
    ball.phase = BallPhase.AIRBORNE if airborne else BallPhase.ROLLING
    return StepInfo(start_speed=speed, closest_dist=closest, dist_moved=moved)


def place_on_circle(terrain, radius: float, angle_rad: float) -> BallState:
    """
    Resting ball on the spawn circle, sitting on the terrain.
    """
    x = radius * math.cos(angle_rad)
    z = radius * math.sin(angle_rad)
    y = terrain.get_height_at(x, z) + BALL_RADIUS_M
    return BallState(x=x, y=y, z=z, phase=BallPhase.ON_CIRCLE)


def launch(ball: BallState, aim_x: float, aim_z: float, shot: ShotParameters) -> bool:
    """
    Start a putt toward (aim_x, aim_z). Launch speed rolls exactly the
    aim distance on a flat green of the configured stimp.

    Returns False (ball untouched) for a zero-length aim.
    """
    dir_x = aim_x - ball.x
    dir_z = aim_z - ball.z
    length = math.hypot(dir_x, dir_z)
    if length < 1e-6:
        return False

    speed_h = launch_speed(length, shot.stimp)
    launch_rad = math.radians(shot.launch_angle_deg)
    total_speed = speed_h / math.cos(launch_rad)

    ball.vx = speed_h * (dir_x / length)
    ball.vy = total_speed * math.sin(launch_rad)
    ball.vz = speed_h * (dir_z / length)
    ball.phase = BallPhase.AIRBORNE if shot.launch_angle_deg != 0 else BallPhase.ROLLING
    ball.bounce_count = 0
    ball.max_height = ball.y
    ball.spin = shot.launch_angle_deg / 15.0
    ball.travel_dist = 0.0
    ball.pre_capture = None

    ball.break_points = []
    ball.break_locked = False
    ball.prev_vz = None
    ball.prev_pos_xz = (ball.x, ball.z)

    logger.debug("Launch: from=(%.3f, %.3f) aim=(%.3f, %.3f) v0=%.4f",
                 ball.x, ball.z, aim_x, aim_z, speed_h)
    return True


def _track_break(ball: BallState) -> None:
    # First sign change (or near-zero) of the cross-slope velocity is the
    # apex of the break; one per shot.
    vz = ball.vz
    if ball.prev_vz is not None:
        prev = ball.prev_vz
        if (prev < 0 <= vz) or (prev > 0 >= vz):
            denom = prev - vz
            t = prev / denom if abs(denom) > 1e-6 else 0.0
            px, pz = ball.prev_pos_xz
            bx = px + (ball.x - px) * t
            bz = pz + (ball.z - pz) * t
            ball.break_points.append(BreakPoint(bx, bz, -vz, ball.vx))
            ball.break_locked = True
        elif abs(vz) <= BREAK_VZ_EPS:
            ball.break_points.append(BreakPoint(ball.x, ball.z, -vz, ball.vx))
            ball.break_locked = True
    ball.prev_vz = vz
    ball.prev_pos_xz = (ball.x, ball.z)


def update_physics(ball: BallState, terrain, shot: ShotParameters, dt: float) -> StepEvent | None:
    """
    Production tick: one step with the frame's dt (clamped to
    MAX_FRAME_DT), then hole capture / lip-out / stop and break tracking.
    """
    if not ball.moving or dt <= 0:
        return None
    dt = min(dt, MAX_FRAME_DT)

    info = step(ball, terrain, shot, dt, PRODUCTION)

    event = None
    dist = distance_to_hole(ball.x, ball.z)
    speed_xz = ball.speed_xz
    crossed = info.closest_dist <= HOLE_RADIUS_M and not ball.airborne
    dropped_in = dist <= HOLE_RADIUS_M + BALL_RADIUS_M and ball.y < BALL_RADIUS_M * 0.5

    if dropped_in or dist <= HOLE_RADIUS_M or crossed:
        if dropped_in or (not ball.airborne and speed_xz < CAPTURE_SPEED):
            ball.pre_capture = ball.snapshot()
            ball.vx = ball.vy = ball.vz = 0.0
            if crossed and dist > HOLE_RADIUS_M:
                ball.x, ball.z = 0.0, 0.0
            ball.y = -CUP_DEPTH_M + BALL_RADIUS_M
            ball.phase = BallPhase.CAPTURED
            event = StepEvent.CAPTURED
        elif dist <= HOLE_RADIUS_M:
            ball.vx *= LIP_OUT_DAMPING
            ball.vz *= LIP_OUT_DAMPING
            event = StepEvent.LIP_OUT
    elif speed_xz < STOP_SPEED and not ball.airborne:
        ball.vx = ball.vy = ball.vz = 0.0
        ball.phase = BallPhase.AT_REST
        event = StepEvent.STOPPED

    if ball.moving and not ball.break_locked and not ball.airborne:
        _track_break(ball)

    if event is not None:
        logger.debug("Step event %s at (%.3f, %.3f)", event.value, ball.x, ball.z)
    return event

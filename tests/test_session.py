from concurrent.futures import ThreadPoolExecutor

import pytest

from puttlab.config import BALL_CIRCLE_MAX, BALL_CIRCLE_MIN
from puttlab.physics.ball_roll import SIM_DT, BallPhase, ShotParameters, StepEvent
from puttlab.session import MAX_GHOST_DIST, PuttingSession
from puttlab.terrain.heightmap import TerrainContext


@pytest.fixture
def session(flat_shot, green):
    s = PuttingSession(seed=7, shot=flat_shot)
    s.use_terrain(TerrainContext.flat(), green)
    return s


def test_new_session_builds_terrain():
    s = PuttingSession(seed=3)
    assert s.terrain.is_built
    assert s.terrain.seed == 3
    assert s.ball.phase is BallPhase.ON_CIRCLE
    assert s.green.contains(s.ball.x, s.ball.z)


def test_holed_putt_is_valid(session):
    assert session.shoot(0.0, 0.0)
    assert session.last_shot_start == (3.0, 0.0)
    event = session.run_until_settled(SIM_DT)
    assert event is StepEvent.CAPTURED
    assert session.phase is BallPhase.CAPTURED
    gx, gz = session.ghost_rest
    assert (gx * gx + gz * gz) ** 0.5 <= MAX_GHOST_DIST
    assert session.last_shot_valid is True
    assert session.valid_aim_points.points == ((0.0, 0.0),)


def test_short_putt_is_not_valid(session):
    assert session.shoot(1.5, 0.0)
    assert session.run_until_settled(SIM_DT) is StepEvent.STOPPED
    assert session.last_shot_valid is False
    assert session.ghost_rest is None
    assert len(session.valid_aim_points) == 0
    assert session.shot_aim_points == [(1.5, 0.0)]


def test_cannot_shoot_while_moving_or_after_capture(session):
    assert session.shoot(0.0, 0.0)
    assert not session.shoot(0.0, 0.0)
    session.run_until_settled(SIM_DT)
    assert not session.shoot(0.0, 0.0)
    session.reset_ball()
    assert session.ball.on_circle
    assert session.shoot(0.0, 0.0)


def test_zero_length_shot_is_refused(session):
    assert not session.shoot(session.ball.x, session.ball.z)
    assert session.shot_aim_points == []


def test_circle_moves_only_before_the_shot(session):
    assert session.move_on_circle(0.5)
    assert session.circle_angle == pytest.approx(0.5)
    assert session.set_circle_radius(100.0)
    assert session.circle_radius == BALL_CIRCLE_MAX
    assert session.set_circle_radius(0.0)
    assert session.circle_radius == BALL_CIRCLE_MIN

    session.shoot(0.0, 0.0)
    assert not session.move_on_circle(0.1)
    assert not session.set_circle_radius(2.0)


def test_true_roll_strength(session):
    session.set_true_roll_strength(2.5)
    assert session.true_roll_strength == 2.5
    assert session.shot.stimp == 3.0


def test_new_terrain_forgets_aim_points(session):
    session.shoot(0.0, 0.0)
    session.run_until_settled(SIM_DT)
    assert len(session.valid_aim_points) == 1
    session.new_terrain(seed=11)
    assert len(session.valid_aim_points) == 0
    assert session.shot_aim_points == []
    assert session.ball.on_circle


def test_blocking_hint(session):
    session.set_circle_radius(1.0)
    result = session.request_hint(directions_deg=[180])
    assert result is not None
    assert result.ball_x == pytest.approx(1.0)


def test_async_hint_and_cancel_on_shot(session):
    session.set_circle_radius(1.0)
    pool = ThreadPoolExecutor(max_workers=1)
    try:
        job = session.request_hint_async(directions_deg=[180], executor=pool)
        assert job.result(timeout=60) is not None
        assert job.status == "completed"

        job = session.request_hint_async(directions_deg=range(360), executor=pool)
        session.shoot(0.0, 0.0)
        assert job.cancelled
        job.result(timeout=60)
        assert job.status == "cancelled"
    finally:
        pool.shutdown(wait=True)


def test_set_shot_parameters(session):
    session.set_shot_parameters(ShotParameters(stimp=4.0))
    assert session.shot.stimp == 4.0


def test_no_hint_while_rolling_or_holed(session):
    assert session.can_hint
    assert session.shoot(0.0, 0.0)
    session.tick(SIM_DT)
    assert session.ball.moving
    assert session.request_hint(directions_deg=[180]) is None
    assert session.request_hint_async(directions_deg=[180]) is None
    assert session.hint_job is None

    assert session.run_until_settled(SIM_DT) is StepEvent.CAPTURED
    assert not session.can_hint
    assert session.request_hint(directions_deg=[180]) is None
    assert session.request_hint_async(directions_deg=[180]) is None


def test_hint_from_resting_ball_after_short_putt(session):
    assert session.shoot(1.5, 0.0)
    assert session.run_until_settled(SIM_DT) is StepEvent.STOPPED
    assert session.phase is BallPhase.AT_REST
    result = session.request_hint(directions_deg=[180])
    assert result is not None
    assert result.ball_x == pytest.approx(session.ball.x)

import math
import threading

import pytest

from puttlab.physics.ball_roll import BALL_RADIUS_M, MAX_SIM_STEPS, ShotParameters
from puttlab.physics.best_line import HOLE_HIT_DIST, HintSolver, TrajectorySimulator
from puttlab.physics.best_line_result import HintResult

BALL = (1.0, BALL_RADIUS_M, 0.0)


def test_trajectory_straight_at_hole_is_holed(flat_terrain, flat_shot):
    sim = TrajectorySimulator(flat_terrain, None, flat_shot)
    res = sim.simulate(*BALL, -2.0, 0.0)
    assert res["holed"]
    assert res["path"][0] == BALL
    x, _, z = res["path"][-1]
    assert math.hypot(x, z) <= HOLE_HIT_DIST
    assert res["hole_speed"] > 0


def test_trajectory_away_from_hole_is_not_holed(flat_terrain, flat_shot):
    sim = TrajectorySimulator(flat_terrain, None, flat_shot)
    res = sim.simulate(*BALL, 1.0, 0.0)
    assert not res["holed"]
    assert res["hole_speed"] == math.inf
    assert res["min_dist_to_hole"] > 1.0


def test_trajectory_path_is_thinned(flat_terrain, flat_shot):
    sim = TrajectorySimulator(flat_terrain, None, flat_shot, record_every=4)
    res = sim.simulate(*BALL, 1.0, 0.0)
    assert len(res["path"]) == 1 + math.ceil(res["steps"] / 4)


def test_hint_finds_straight_putt(flat_terrain, flat_shot):
    solver = HintSolver(flat_terrain, None, flat_shot, directions_deg=[175, 180, 185])
    result = solver.solve(BALL)
    assert isinstance(result, HintResult)
    assert result.directions_holed >= 1
    assert result.aim_angle_deg == pytest.approx(180.0, abs=5.5)
    assert 0.8 < result.aim_distance_m < 1.1
    assert result.hole_speed < 1.0
    x, _, z = result.path[-1]
    assert math.hypot(x, z) <= HOLE_HIT_DIST
    assert result.v0_speed == pytest.approx(math.hypot(result.v0_x, result.v0_z))


def test_hint_picks_lowest_entry_speed(flat_terrain, flat_shot):
    solver = HintSolver(flat_terrain, None, flat_shot, directions_deg=[175, 180, 185])
    result = solver.solve(BALL)
    for deg in (175, 180, 185):
        cand = solver.search_direction(BALL, deg)
        if cand is not None:
            assert result.hole_speed <= cand["result"]["hole_speed"]


def test_no_holing_direction_gives_none(flat_terrain, flat_shot):
    solver = HintSolver(flat_terrain, None, flat_shot, directions_deg=[0])
    assert solver.solve(BALL) is None
    assert solver.solve_path(BALL) is None


def test_cancelled_search_returns_none(flat_terrain, flat_shot):
    cancel = threading.Event()
    cancel.set()
    solver = HintSolver(flat_terrain, None, flat_shot, directions_deg=[180])
    assert solver.solve(BALL, cancel=cancel) is None


def test_solve_path_and_result_dict(flat_terrain, flat_shot):
    solver = HintSolver(flat_terrain, None, flat_shot, directions_deg=[180])
    path = solver.solve_path(BALL)
    assert path[0] == BALL

    d = solver.solve(BALL).to_dict()
    assert d["directions_holed"] == 1
    assert d["ball_x"] == 1.0
    assert isinstance(d["path"][0], list)
    assert set(d) >= {"aim_angle_deg", "aim_distance_m", "v0_speed", "hole_speed", "path"}


def test_abs_angle():
    assert HintResult.compute_abs_angle_deg(0.0, 1.0) == pytest.approx(90.0)
    assert HintResult.compute_abs_angle_deg(-1.0, 0.0) == pytest.approx(180.0)


@pytest.mark.parametrize("max_steps", [50, MAX_SIM_STEPS])
def test_runaway_ball_stops_at_step_cap(flat_terrain, max_steps):
    # 5 degrees of tilt out-pulls stimp-3 friction, so the ball never stops
    downhill = ShotParameters(slope_deg=5.0, stimp=3.0, true_roll=0.0, launch_angle_deg=0.0)
    sim = TrajectorySimulator(flat_terrain, None, downhill, max_steps=max_steps)
    res = sim.simulate(0.0, BALL_RADIUS_M, 1.0, 0.0, 0.5)
    assert res["steps"] == max_steps
    assert not res["holed"]
    _, _, z = res["path"][-1]
    assert z > 1.0

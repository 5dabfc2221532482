import pytest

from puttlab.physics.ball_roll import BALL_RADIUS_M, MAX_SIM_STEPS, SIM_DT, ShotParameters
from puttlab.physics.ghost_rest import GhostRestPredictor


def test_ball_at_rest_takes_no_steps(flat_terrain, flat_shot):
    ghost = GhostRestPredictor(flat_terrain, None, flat_shot)
    res = ghost.simulate((0.02, BALL_RADIUS_M, -0.01), (0.0, 0.0, 0.0))
    assert res["steps"] == 0
    assert res["t_end"] == 0.0
    assert (res["final_x"], res["final_z"]) == (0.02, -0.01)
    assert not res["left_green"]


def test_ghost_rolls_over_the_hole(flat_terrain, flat_shot):
    ghost = GhostRestPredictor(flat_terrain, None, flat_shot)
    x, z = ghost.predict_rest((1.0, BALL_RADIUS_M, 0.0), (-1.5, 0.0, 0.0))
    # 1.5^2 / (2 * mu * g) = 2.014 m of roll, minus the Euler shortfall
    assert x == pytest.approx(-1.008, abs=0.01)
    assert z == 0.0


def test_custom_step_cap(flat_terrain):
    shot = ShotParameters(slope_deg=5.0, stimp=3.0, true_roll=0.0, launch_angle_deg=0.0)
    ghost = GhostRestPredictor(flat_terrain, None, shot, max_steps=50)
    res = ghost.simulate((0.0, BALL_RADIUS_M, 1.0), (0.0, 0.0, 0.5))
    assert res["steps"] == 50
    assert res["t_end"] == pytest.approx(50 * SIM_DT)


def test_runaway_ball_hits_default_cap(flat_terrain):
    # On a 5 degree slope gravity beats stimp-3 friction: it never settles.
    shot = ShotParameters(slope_deg=5.0, stimp=3.0, true_roll=0.0, launch_angle_deg=0.0)
    ghost = GhostRestPredictor(flat_terrain, None, shot)
    res = ghost.simulate((0.0, BALL_RADIUS_M, 1.0), (0.0, 0.0, 0.5))
    assert res["steps"] == MAX_SIM_STEPS
    assert not res["left_green"]


def test_leaving_the_green_is_a_hard_stop(flat_terrain, flat_shot, green):
    ghost = GhostRestPredictor(flat_terrain, green, flat_shot)
    res = ghost.simulate((3.0, BALL_RADIUS_M, 0.0), (4.0, 0.0, 0.0))
    assert res["left_green"]
    assert green.signed_distance(res["final_x"], res["final_z"]) > 0
    assert res["final_x"] < 2 * green.bounding_radius()

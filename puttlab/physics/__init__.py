"""
Ball physics: the step integrator and the simulators built on it.
"""
from .ball_roll import (
    BallPhase,
    BallState,
    ShotParameters,
    StepEvent,
    launch,
    place_on_circle,
    stimp_to_mu,
    update_physics,
)
from .ghost_rest import GhostRestPredictor
from .best_line import HintSolver, TrajectorySimulator
from .best_line_result import HintResult
from .hint_job import HintJob

__all__ = [
    "BallPhase",
    "BallState",
    "ShotParameters",
    "StepEvent",
    "launch",
    "place_on_circle",
    "stimp_to_mu",
    "update_physics",
    "GhostRestPredictor",
    "HintSolver",
    "TrajectorySimulator",
    "HintResult",
    "HintJob",
]

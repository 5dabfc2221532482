import logging

from puttlab.physics.ball_roll import (
    GHOST,
    MAX_SIM_STEPS,
    SIM_DT,
    STOP_SPEED,
    BallPhase,
    BallState,
    ShotParameters,
    Snapshot,
    step,
)

logger = logging.getLogger(__name__)


class GhostRestPredictor:
    """
    Where would a ball have stopped if there were no hole?

    Re-runs the rolling/airborne/bounce physics from a (pre-capture)
    state with no capture and no lip force. Leaving the green is a hard
    stop. Bounded by max_steps, so a ball that never settles still ends.
    """

    def __init__(
        self,
        terrain,
        green,
        shot: ShotParameters,
        dt: float = SIM_DT,
        max_steps: int = MAX_SIM_STEPS,
    ):
        self.terrain = terrain
        self.green = green  # None disables the boundary stop
        self.shot = shot
        self.dt = float(dt)
        self.max_steps = int(max_steps)

    def simulate(self, position, velocity, spin: float = 0.0):
        """
        Returns dict with:
          final_x, final_z (floats)
          steps (int), t_end (float)
          left_green (bool)
        """
        ball = BallState.from_snapshot(
            Snapshot(tuple(position), tuple(velocity), float(spin)),
            phase=BallPhase.ROLLING,
        )
        airborne = False
        left_green = False
        steps = 0

        for _ in range(self.max_steps):
            if ball.speed_xz < STOP_SPEED and not airborne:
                break

            step(ball, self.terrain, self.shot, self.dt, GHOST)
            airborne = ball.airborne
            steps += 1

            if self.green is not None and self.green.signed_distance(ball.x, ball.z) > 0:
                left_green = True
                break

        return {
            "final_x": ball.x,
            "final_z": ball.z,
            "steps": steps,
            "t_end": steps * self.dt,
            "left_green": left_green,
        }

    def predict_rest(self, position, velocity, spin: float = 0.0) -> tuple[float, float]:
        res = self.simulate(position, velocity, spin)
        return res["final_x"], res["final_z"]

import json
from dataclasses import dataclass, field

from puttlab.physics.ball_roll import ShotParameters

BALL_CIRCLE_RADIUS_DEFAULT = 3.0
BALL_CIRCLE_MIN = 1.0
BALL_CIRCLE_MAX = 5.5


@dataclass(frozen=True)
class Scenario:
    seed: int | None = None
    shot: ShotParameters = field(default_factory=ShotParameters)
    circle_radius: float = BALL_CIRCLE_RADIUS_DEFAULT
    circle_angle_deg: float = 0.0
    aim: tuple[float, float] = (0.0, 0.0)

    def __post_init__(self):
        if not BALL_CIRCLE_MIN <= self.circle_radius <= BALL_CIRCLE_MAX:
            raise ValueError(
                f"circle_radius must be within [{BALL_CIRCLE_MIN}, {BALL_CIRCLE_MAX}], got {self.circle_radius}"
            )

    @classmethod
    def from_dict(cls, cfg: dict) -> "Scenario":
        """
        Build from a JSON-style dict; missing keys keep their defaults.
        Raises ValueError on bad values.
        """
        s = cfg.get("shot", {})
        defaults = ShotParameters()
        shot = ShotParameters(
            slope_deg=float(s.get("slope_deg", defaults.slope_deg)),
            stimp=float(s.get("stimp", defaults.stimp)),
            true_roll=float(s.get("true_roll", defaults.true_roll)),
            launch_angle_deg=float(s.get("launch_angle_deg", defaults.launch_angle_deg)),
        )

        b = cfg.get("ball", {})
        radius = float(b.get("circle_radius", BALL_CIRCLE_RADIUS_DEFAULT))

        a = cfg.get("aim", {})
        seed = cfg.get("seed")
        return cls(
            seed=None if seed is None else int(seed),
            shot=shot,
            circle_radius=radius,
            circle_angle_deg=float(b.get("circle_angle_deg", 0.0)),
            aim=(float(a.get("x", 0.0)), float(a.get("z", 0.0))),
        )


def load_scenario(path: str) -> Scenario:
    with open(path, "r") as f:
        return Scenario.from_dict(json.load(f))

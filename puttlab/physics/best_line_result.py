from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Tuple
import math


@dataclass(frozen=True)
class HintResult:
    stimp: float
    slope_deg: float
    ball_x: float
    ball_z: float

    # Recommended launch
    aim_angle_deg: float          # absolute direction in degrees (x-axis=0°, CCW toward +z)
    aim_distance_m: float         # flat-green roll distance the launch speed corresponds to
    v0_speed: float
    v0_x: float
    v0_z: float

    # Outcome
    hole_speed: float             # speed when the ball reached the cup (lower = safer)
    directions_holed: int

    # Path (sub-sampled)
    path: List[Tuple[float, float, float]]

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["path"] = [list(p) for p in self.path]
        return d

    @staticmethod
    def compute_abs_angle_deg(vx: float, vz: float) -> float:
        return math.degrees(math.atan2(vz, vx))

    @staticmethod
    def from_best_and_context(
        *,
        stimp: float,
        slope_deg: float,
        ball_x: float,
        ball_z: float,
        best: Dict[str, Any],
        directions_holed: int,
    ) -> "HintResult":
        vx = float(best["v0_x"])
        vz = float(best["v0_z"])
        res = best["result"]
        return HintResult(
            stimp=float(stimp),
            slope_deg=float(slope_deg),
            ball_x=float(ball_x),
            ball_z=float(ball_z),

            aim_angle_deg=float(HintResult.compute_abs_angle_deg(vx, vz)),
            aim_distance_m=float(best["distance"]),
            v0_speed=float(best["speed"]),
            v0_x=vx,
            v0_z=vz,

            hole_speed=float(res["hole_speed"]),
            directions_holed=int(directions_holed),

            path=[(float(x), float(y), float(z)) for (x, y, z) in res["path"]],
        )

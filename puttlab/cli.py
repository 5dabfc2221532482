"""
puttlab CLI.

Usage:
    python -m puttlab.cli simulate [--seed N] [--aim X Z] ...   Run one putt
    python -m puttlab.cli hint [--seed N] [--directions-step K]  Solve the hint line
    python -m puttlab.cli export <out_dir> [--seed N]           Write heightfield.bin/.json
    python -m puttlab.cli plot <out_png> [--seed N] [--hint]    Render the green
"""

import argparse
import json
import math
import sys
from dataclasses import replace

from puttlab.config import Scenario, load_scenario
from puttlab.log import configure_logging, get_logger
from puttlab.physics.ball_roll import SIM_DT, MAX_SIM_STEPS, distance_to_hole
from puttlab.physics.flow import trace_streamline
from puttlab.session import PuttingSession
from puttlab.tools.export_heightfield import export_heightfield
from puttlab.tools.plot_green import plot_green

logger = get_logger("puttlab.cli")


def scenario_from_args(args) -> Scenario:
    scn = load_scenario(args.scenario) if args.scenario else Scenario()

    shot_updates = {}
    for attr, key in (("stimp", "stimp"), ("slope", "slope_deg"),
                      ("true_roll", "true_roll"), ("launch_angle", "launch_angle_deg")):
        value = getattr(args, attr)
        if value is not None:
            shot_updates[key] = value
    updates = {}
    if shot_updates:
        updates["shot"] = replace(scn.shot, **shot_updates)
    if args.seed is not None:
        updates["seed"] = args.seed
    if args.circle_radius is not None:
        updates["circle_radius"] = args.circle_radius
    if args.circle_angle is not None:
        updates["circle_angle_deg"] = args.circle_angle
    if getattr(args, "aim", None) is not None:
        updates["aim"] = (args.aim[0], args.aim[1])
    return replace(scn, **updates) if updates else scn


def session_from_scenario(scn: Scenario) -> PuttingSession:
    return PuttingSession(
        seed=scn.seed,
        shot=scn.shot,
        circle_radius=scn.circle_radius,
        circle_angle_rad=math.radians(scn.circle_angle_deg),
    )


def _ball_report(ball) -> dict:
    return {
        "phase": ball.phase.value,
        "position": list(ball.position),
        "distanceToHole": distance_to_hole(ball.x, ball.z),
        "bounceCount": ball.bounce_count,
        "travelDist": ball.travel_dist,
        "maxHeight": ball.max_height,
        "breakPoints": [[bp.x, bp.z] for bp in ball.break_points],
    }


def cmd_simulate(args) -> int:
    scn = scenario_from_args(args)
    session = session_from_scenario(scn)

    aim_x, aim_z = scn.aim
    if not session.shoot(aim_x, aim_z):
        print("Error: aim point coincides with the ball")
        return 1

    event = session.run_until_settled(SIM_DT, max_ticks=MAX_SIM_STEPS)
    report = {
        "seed": scn.seed,
        "aim": [aim_x, aim_z],
        "event": event.value if event else None,
        "ball": _ball_report(session.ball),
        "ghostRest": list(session.ghost_rest) if session.ghost_rest else None,
        "validHoleIn": session.last_shot_valid,
    }
    print(json.dumps(report, indent=2))
    return 0


def cmd_hint(args) -> int:
    scn = scenario_from_args(args)
    session = session_from_scenario(scn)

    step = max(1, int(args.directions_step))
    result = session.request_hint(directions_deg=range(0, 360, step))
    if result is None:
        print(json.dumps({"seed": scn.seed, "hint": None}, indent=2))
        return 0

    summary = result.to_dict()
    if not args.full_path:
        summary["pathPoints"] = len(summary.pop("path"))
    print(json.dumps({"seed": scn.seed, "hint": summary}, indent=2))
    return 0


def cmd_export(args) -> int:
    scn = scenario_from_args(args)
    session = session_from_scenario(scn)
    bin_path, meta_path = export_heightfield(session.terrain, args.out_dir)
    print(f"  Wrote: {bin_path}")
    print(f"  Wrote: {meta_path}")
    return 0


def cmd_plot(args) -> int:
    scn = scenario_from_args(args)
    session = session_from_scenario(scn)

    hint_path = None
    if args.hint:
        result = session.request_hint(directions_deg=range(0, 360, max(1, int(args.directions_step))))
        hint_path = result.path if result else None

    streamlines = None
    if args.streamlines:
        r = session.green.bounding_radius() * 0.8
        seeds = [(x, z) for x in (-r, -r / 2, 0.0, r / 2, r) for z in (-r, -r / 2, 0.0, r / 2, r)]
        streamlines = [trace_streamline(session.terrain, session.green, session.shot, x, z)
                       for (x, z) in seeds if session.green.signed_distance(x, z) < -0.1]

    plot_green(session.terrain, session.green, ball=session.ball, hint_path=hint_path,
               aim_zone=session.aim_zone, streamlines=streamlines, out_path=args.out_png)
    print(f"  Wrote: {args.out_png}")
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--scenario", default=None, help="Scenario JSON file")
    p.add_argument("--seed", type=int, default=None, help="Terrain seed (random if omitted)")
    p.add_argument("--stimp", type=float, default=None, help="Green speed in meters")
    p.add_argument("--slope", type=float, default=None, help="Global slope in degrees")
    p.add_argument("--true-roll", dest="true_roll", type=float, default=None,
                   help="True-roll strength multiplier")
    p.add_argument("--launch-angle", dest="launch_angle", type=float, default=None,
                   help="Launch angle in degrees")
    p.add_argument("--circle-radius", dest="circle_radius", type=float, default=None,
                   help="Spawn circle radius in meters")
    p.add_argument("--circle-angle", dest="circle_angle", type=float, default=None,
                   help="Spawn angle on the circle in degrees")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="puttlab",
        description="Putting green simulator",
    )
    parser.add_argument("--log-level", default=None, help="Log level (or set PUTTLAB_LOG_LEVEL)")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    sub = parser.add_subparsers(dest="command")

    sim_p = sub.add_parser("simulate", help="Run one putt to rest")
    _add_common(sim_p)
    sim_p.add_argument("--aim", type=float, nargs=2, metavar=("X", "Z"), default=None,
                       help="Aim point (default: the hole)")
    sim_p.set_defaults(func=cmd_simulate)

    hint_p = sub.add_parser("hint", help="Solve the lowest-speed holing line")
    _add_common(hint_p)
    hint_p.add_argument("--directions-step", dest="directions_step", type=int, default=1,
                        help="Degrees between searched directions")
    hint_p.add_argument("--full-path", dest="full_path", action="store_true",
                        help="Include the full path in the output")
    hint_p.set_defaults(func=cmd_hint)

    export_p = sub.add_parser("export", help="Export the height field")
    _add_common(export_p)
    export_p.add_argument("out_dir", help="Output directory")
    export_p.set_defaults(func=cmd_export)

    plot_p = sub.add_parser("plot", help="Render the green to an image")
    _add_common(plot_p)
    plot_p.add_argument("out_png", help="Output image path")
    plot_p.add_argument("--hint", action="store_true", help="Solve and draw the hint line")
    plot_p.add_argument("--directions-step", dest="directions_step", type=int, default=5,
                        help="Degrees between hint directions")
    plot_p.add_argument("--streamlines", action="store_true", help="Draw fall-line streamlines")
    plot_p.set_defaults(func=cmd_plot)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level, json_format=args.json_logs)
    try:
        code = args.func(args)
    except (ValueError, OSError) as e:
        logger.error("%s", e)
        print(f"Error: {e}")
        code = 1
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()

"""Entry point: ``python -m lanedefense``.

Supports two modes:
  - ``python -m lanedefense``        launch the FastAPI server
  - ``python -m lanedefense cli``    headless run with scripted placements
"""

from __future__ import annotations

import argparse
import logging

logger = logging.getLogger(__name__)


def _defender_arg(value: str) -> tuple[str, int, int]:
    """Parse ``kind:col:row`` (e.g. ``rocket:5:3``)."""
    try:
        kind, col, row = value.split(":")
        return kind, int(col), int(row)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected kind:col:row, got {value!r}") from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lane Defense Simulation")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--seed", type=int, default=42)
    srv.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Run a headless simulation")
    cli.add_argument("--seed", type=int, default=42)
    cli.add_argument("--seconds", type=float, default=60.0)
    cli.add_argument("--dt", type=float, default=0.05)
    cli.add_argument(
        "--defender", type=_defender_arg, action="append", default=[],
        metavar="KIND:COL:ROW", help="Place a defender before the run (repeatable), e.g. rocket:5:3",
    )
    cli.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])
    cli.add_argument(
        "--verbose", type=lambda s: [n.strip() for n in s.split(",") if n.strip()], default=[],
        metavar="SUBSYSTEMS", help="Comma-separated subsystems logged at DEBUG, e.g. waves,combat",
    )

    return parser


_KIND_ALIASES = {
    "rocket": "ROCKET_TOWER",
    "laser": "LASER_TOWER",
}


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from lanedefense.api.app import create_app
    from lanedefense.config import SimulationConfig

    config = SimulationConfig(world_seed=args.seed, log_level=args.log_level)
    app = create_app(config)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _run_cli(args: argparse.Namespace) -> None:
    from collections import Counter

    from lanedefense.config import SimulationConfig
    from lanedefense.core.enums import Archetype
    from lanedefense.engine.simulation import Simulation
    from lanedefense.utils.logging import setup_logging

    config = SimulationConfig(world_seed=args.seed, log_level=args.log_level)
    setup_logging(config.log_level, verbose=args.verbose)

    sim = Simulation(config)
    for name, col, row in args.defender:
        kind_name = _KIND_ALIASES.get(name.lower(), name.upper())
        if kind_name not in Archetype.__members__:
            logger.error("Unknown defender kind %r", name)
            continue
        if not sim.place_defender(Archetype[kind_name], col, row):
            logger.warning("Could not place %s at (%d, %d)", kind_name, col, row)

    events = sim.run(args.seconds, args.dt)

    snap = sim.snapshot()
    counts = Counter(ev.category for ev in events)
    logger.info(
        "Done at tick %d (wave %d): spawned=%d killed=%d escaped=%d defenders_lost=%d gold=%s",
        snap.tick, snap.wave_level, snap.total_spawned, snap.total_killed,
        snap.total_escaped, snap.defenders_lost, snap.gold,
    )
    logger.info("Events: %s", ", ".join(f"{k}={v}" for k, v in sorted(counts.items())))


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None or args.command == "serve":
        if args.command is None:
            args = parser.parse_args(["serve"])
        _run_server(args)
    elif args.command == "cli":
        _run_cli(args)


if __name__ == "__main__":
    main()

"""Logging setup for the CLI and the HTTP host."""

from __future__ import annotations

import logging
import sys
from typing import Iterable

# Short names accepted by ``verbose`` mapped to their logger names
SUBSYSTEMS = {
    "waves": "lanedefense.systems.waves",
    "movement": "lanedefense.ai.movement",
    "targeting": "lanedefense.ai.targeting",
    "combat": "lanedefense.actions.combat",
    "pathfinding": "lanedefense.ai.pathfinding",
    "simulation": "lanedefense.engine.simulation",
    "engine": "lanedefense.api.engine_manager",
}


def _to_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(level: str | int = "INFO", verbose: Iterable[str] = ()) -> None:
    """Route everything to stdout as ``time [LEVEL] logger | message``.

    *verbose* names subsystems (keys of ``SUBSYSTEMS``) that log at DEBUG
    while the rest stay at *level*. Unknown names are reported and skipped.
    """
    root_level = _to_level(level)
    debug_names = []
    unknown = []
    for name in verbose:
        if name in SUBSYSTEMS:
            debug_names.append(SUBSYSTEMS[name])
        else:
            unknown.append(name)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG if debug_names else root_level)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d [%(levelname)-5s] %(name)-30s | %(message)s",
        datefmt="%H:%M:%S",
    ))

    root = logging.getLogger()
    root.setLevel(root_level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in debug_names:
        logging.getLogger(name).setLevel(logging.DEBUG)
    if unknown:
        logging.getLogger(__name__).warning(
            "Unknown subsystem(s) %s; choose from %s", ", ".join(unknown), ", ".join(sorted(SUBSYSTEMS)),
        )

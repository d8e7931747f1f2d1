"""Hit-effect descriptors keyed by FireStyle.

Every style deals the shooter's single-target damage; styles differ only
in the color and effect label handed to renderers. Each archetype picks a
FireStyle at spawn time and the scheduler looks the style up here instead
of dispatching through a subclass. To add a style:
  1. Add a FireStyle member.
  2. Write a ``(source, target) -> Shot`` function.
  3. Register it in FIRE_STRATEGIES.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from lanedefense.core.enums import FireStyle

if TYPE_CHECKING:
    from lanedefense.core.models import Entity


@dataclass(frozen=True, slots=True)
class Shot:
    """Resolved outcome of one trigger pull."""

    damage: float
    color: str        # hit-spark hint for the renderer
    effect: str       # "bullet", "sonic", "rocket", "beam"


FireStrategy = Callable[["Entity", "Entity"], Shot]


def _cannon(source: Entity, target: Entity) -> Shot:
    return Shot(damage=source.damage, color="#ff0080", effect="bullet")


def _sonic(source: Entity, target: Entity) -> Shot:
    return Shot(damage=source.damage, color="#8b5cf6", effect="sonic")


def _rocket(source: Entity, target: Entity) -> Shot:
    return Shot(damage=source.damage, color="#9d00ff", effect="rocket")


def _laser(source: Entity, target: Entity) -> Shot:
    return Shot(damage=source.damage, color="#00ff41", effect="beam")


FIRE_STRATEGIES: dict[FireStyle, FireStrategy] = {
    FireStyle.CANNON: _cannon,
    FireStyle.SONIC: _sonic,
    FireStyle.ROCKET: _rocket,
    FireStyle.LASER: _laser,
}


def get_fire_strategy(style: FireStyle) -> FireStrategy:
    """Look up the strategy for *style*, falling back to cannon fire."""
    return FIRE_STRATEGIES.get(style, _cannon)

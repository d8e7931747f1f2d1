"""Fire-interval timers and damage application."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from lanedefense.actions.fire import get_fire_strategy

if TYPE_CHECKING:
    from lanedefense.core.arena import EntityHandle
    from lanedefense.core.models import Entity, WorldPos

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FireEvent:
    """One shot that landed this tick."""

    source: EntityHandle
    target: EntityHandle
    damage: float
    effect: str


@dataclass(frozen=True, slots=True)
class HitNotice:
    """Hit-spark request for the rendering/audio side."""

    x: float
    y: float
    source: EntityHandle
    color: str
    killed: bool


class CombatScheduler:
    """Gates firing by interval and applies damage.

    The source entity is never modified beyond its own fire timer. Targets
    reaching zero hp are flagged not-alive here; removal happens in the
    simulation's end-of-tick sweep.
    """

    __slots__ = ("_on_hit",)

    def __init__(self, on_hit: Callable[[FireEvent, HitNotice], None] | None = None) -> None:
        self._on_hit = on_hit

    def tick(self, entity: Entity, target: Entity, delta_ms: float) -> FireEvent | None:
        """Advance *entity*'s fire timer; fire at *target* when it elapses."""
        if not entity.active or not target.active:
            return None

        entity.time_since_last_fire_ms += delta_ms
        if entity.time_since_last_fire_ms < entity.fire_interval_ms:
            return None

        entity.time_since_last_fire_ms = 0.0
        return self.fire(entity, target)

    def fire(self, entity: Entity, target: Entity) -> FireEvent:
        shot = get_fire_strategy(entity.fire_style)(entity, target)
        killed = target.take_damage(shot.damage)
        event = FireEvent(
            source=entity.handle, target=target.handle,
            damage=shot.damage, effect=shot.effect,
        )
        notice = _hit_notice(target.world_position, entity.handle, shot.color, killed)
        if killed:
            logger.debug("%r killed %r", entity.handle, target.handle)
        if self._on_hit is not None:
            self._on_hit(event, notice)
        return event


def _hit_notice(pos: WorldPos, source: EntityHandle, color: str, killed: bool) -> HitNotice:
    return HitNotice(x=pos.x, y=pos.y, source=source, color=color, killed=killed)

"""Immutable snapshot of the world state for renderers and API threads."""

from __future__ import annotations

from dataclasses import dataclass

from lanedefense.core.enums import Archetype, LockState, MoveState, Side
from lanedefense.core.models import Cell, Entity
from lanedefense.core.world_state import WorldState


@dataclass(frozen=True, slots=True)
class EntityView:
    """Read-only copy of the published fields of one entity."""

    id: int
    side: Side
    kind: Archetype
    col: int
    row: int
    x: float
    y: float
    hp: float
    max_hp: float
    hp_ratio: float
    level: int
    heading_deg: float
    target_id: int | None
    lock_state: LockState
    move_state: MoveState | None
    route: tuple[Cell, ...]

    @classmethod
    def from_entity(cls, entity: Entity) -> EntityView:
        motion = entity.motion
        target = entity.current_target
        return cls(
            id=entity.handle.key,
            side=entity.side,
            kind=entity.kind,
            col=entity.grid_position.col,
            row=entity.grid_position.row,
            x=entity.world_position.x,
            y=entity.world_position.y,
            hp=entity.hp,
            max_hp=entity.max_hp,
            hp_ratio=entity.hp_ratio,
            level=entity.level,
            heading_deg=entity.heading_deg,
            target_id=target.key if target is not None else None,
            lock_state=entity.lock_state,
            move_state=motion.state if motion is not None else None,
            route=motion.route if motion is not None else (),
        )


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Read-only view of the world, safe to share across threads.

    Only entities still on the field are published; removed ones are gone
    by the time a snapshot is taken.
    """

    tick: int
    elapsed_ms: float
    seed: int
    wave_level: int
    wave_timer_ms: float
    spawn_interval_ms: float
    hp_bonus: float
    gold: int | None
    total_spawned: int
    total_killed: int
    total_escaped: int
    defenders_lost: int
    grid_width: int
    grid_height: int
    walkable: tuple[bool, ...]
    entities: tuple[EntityView, ...]

    @classmethod
    def from_world(cls, world: WorldState, gold: int | None = None) -> Snapshot:
        wave = world.wave
        return cls(
            tick=world.tick,
            elapsed_ms=world.elapsed_ms,
            seed=world.seed,
            wave_level=wave.level,
            wave_timer_ms=wave.wave_timer_ms,
            spawn_interval_ms=wave.spawn_interval_ms,
            hp_bonus=wave.hp_bonus,
            gold=gold,
            total_spawned=world.total_spawned,
            total_killed=world.total_killed,
            total_escaped=world.total_escaped,
            defenders_lost=world.defenders_lost,
            grid_width=world.grid.width,
            grid_height=world.grid.height,
            walkable=tuple(world.grid.walkable_mask()),
            entities=tuple(EntityView.from_entity(e) for e in world.arena if e.active),
        )

    def of_side(self, side: Side) -> tuple[EntityView, ...]:
        return tuple(e for e in self.entities if e.side is side)

"""Core data models: Cell, WorldPos, Entity, Motion, WaveState."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lanedefense.core.enums import Archetype, FireStyle, LockState, MoveState, Side

if TYPE_CHECKING:
    from lanedefense.core.arena import EntityHandle


@dataclass(frozen=True, slots=True)
class Cell:
    """Immutable integer grid coordinate."""

    col: int = 0
    row: int = 0

    def distance(self, other: Cell) -> float:
        """Euclidean distance in whole cells."""
        return math.hypot(self.col - other.col, self.row - other.row)

    def __repr__(self) -> str:
        return f"({self.col}, {self.row})"


@dataclass(slots=True)
class WorldPos:
    """Continuous world position in pixels."""

    x: float = 0.0
    y: float = 0.0

    def distance(self, other: WorldPos) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def copy(self) -> WorldPos:
        return WorldPos(self.x, self.y)


@dataclass(slots=True)
class Motion:
    """Attacker-only movement state."""

    target_cell: Cell
    last_cell: Cell
    stuck_timer_sec: float = 0.0
    move_speed: float = 0.0
    state: MoveState = MoveState.CRUISING
    route: tuple[Cell, ...] = ()

    def copy(self) -> Motion:
        return Motion(
            target_cell=self.target_cell, last_cell=self.last_cell,
            stuck_timer_sec=self.stuck_timer_sec, move_speed=self.move_speed,
            state=self.state, route=self.route,
        )


@dataclass(slots=True)
class Entity:
    """An attacker or defender. Attackers carry a ``Motion`` record."""

    side: Side
    kind: Archetype
    grid_position: Cell
    world_position: WorldPos
    hp: float
    max_hp: float
    attack_range_cells: float
    fire_interval_ms: float
    damage: float
    fire_style: FireStyle = FireStyle.CANNON
    time_since_last_fire_ms: float = 0.0
    current_target: EntityHandle | None = None
    target_lost_ms: float = 0.0
    lock_state: LockState = LockState.UNLOCKED
    alive: bool = True
    escaped: bool = False
    heading_deg: float = 0.0
    level: int = 1
    reward: int = 0
    handle: EntityHandle | None = None
    motion: Motion | None = None

    @property
    def is_attacker(self) -> bool:
        return self.side is Side.ATTACKER

    @property
    def active(self) -> bool:
        """Alive and still on the field."""
        return self.alive and not self.escaped

    @property
    def hp_ratio(self) -> float:
        return self.hp / self.max_hp if self.max_hp > 0 else 0.0

    def take_damage(self, amount: float) -> bool:
        """Apply *amount* damage, clamped at zero. Returns True if this killed it."""
        if not self.alive:
            return False
        self.hp = min(self.max_hp, max(0.0, self.hp - amount))
        if self.hp <= 0:
            self.alive = False
            return True
        return False

    def clear_target(self) -> None:
        self.current_target = None
        self.target_lost_ms = 0.0
        self.time_since_last_fire_ms = 0.0
        self.lock_state = LockState.UNLOCKED

    def copy(self) -> Entity:
        return Entity(
            side=self.side, kind=self.kind,
            grid_position=self.grid_position,
            world_position=self.world_position.copy(),
            hp=self.hp, max_hp=self.max_hp,
            attack_range_cells=self.attack_range_cells,
            fire_interval_ms=self.fire_interval_ms, damage=self.damage,
            fire_style=self.fire_style,
            time_since_last_fire_ms=self.time_since_last_fire_ms,
            current_target=self.current_target,
            target_lost_ms=self.target_lost_ms, lock_state=self.lock_state,
            alive=self.alive, escaped=self.escaped,
            heading_deg=self.heading_deg, level=self.level,
            reward=self.reward, handle=self.handle,
            motion=self.motion.copy() if self.motion else None,
        )


@dataclass(slots=True)
class WaveState:
    """Difficulty epoch and spawn cadence."""

    level: int = 1
    wave_timer_ms: float = 0.0
    spawn_timer_ms: float = 0.0
    spawn_interval_ms: float = 2000.0
    hp_bonus: float = 0.0
    spawn_attempts: int = 0

"""Entity builders: turn an ArchetypeSpec plus a cell into a ready Entity."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lanedefense.core.enums import Side
from lanedefense.core.models import Entity, Motion

if TYPE_CHECKING:
    from lanedefense.config import ArchetypeSpec
    from lanedefense.core.grid import GridMap
    from lanedefense.core.models import Cell


def build_attacker(spec: ArchetypeSpec, cell: Cell, grid: GridMap, hp_bonus: float = 0.0) -> Entity:
    """Attacker standing at the center of *cell*, heading for it.

    ``target_cell == grid_position`` on spawn, so the first movement tick
    commits the cell and picks the next one.
    """
    hp = spec.hp + hp_bonus
    return Entity(
        side=Side.ATTACKER,
        kind=spec.kind,
        grid_position=cell,
        world_position=grid.cell_center(cell),
        hp=hp,
        max_hp=hp,
        attack_range_cells=spec.attack_range_cells,
        fire_interval_ms=spec.fire_interval_ms,
        damage=spec.damage,
        fire_style=spec.fire_style,
        reward=spec.reward,
        motion=Motion(target_cell=cell, last_cell=cell, move_speed=spec.move_speed),
    )


def build_defender(spec: ArchetypeSpec, cell: Cell, grid: GridMap, level: int = 1) -> Entity:
    return Entity(
        side=Side.DEFENDER,
        kind=spec.kind,
        grid_position=cell,
        world_position=grid.cell_center(cell),
        hp=spec.hp,
        max_hp=spec.hp,
        attack_range_cells=spec.attack_range_cells,
        fire_interval_ms=spec.fire_interval_at(level),
        damage=spec.damage_at(level),
        fire_style=spec.fire_style,
        level=level,
    )


def apply_level(entity: Entity, spec: ArchetypeSpec, level: int) -> None:
    """Re-derive level-dependent stats in place (upgrades)."""
    entity.level = level
    entity.fire_interval_ms = spec.fire_interval_at(level)
    entity.damage = spec.damage_at(level)

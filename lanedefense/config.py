"""Simulation configuration with sensible defaults."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lanedefense.core.enums import Archetype, FireStyle, Side

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ArchetypeSpec:
    """Static stats for one attacker or defender archetype."""

    kind: Archetype
    side: Side
    hp: float
    attack_range_cells: float
    fire_interval_ms: float
    damage: float
    fire_style: FireStyle
    move_speed: float = 0.0        # px/s, attackers only
    reward: int = 0                # gold paid on kill (attackers)
    cost: int = 0                  # placement cost (defenders)
    upgrade_cost: int = 0          # per current level
    sell_gain: int = 0             # per current level
    # Per-level (1-based) multipliers applied on top of the base stats
    level_fire_interval_mult: tuple[float, ...] = (1.0,)
    level_damage_mult: tuple[float, ...] = (1.0,)

    def fire_interval_at(self, level: int) -> float:
        idx = min(max(level, 1), len(self.level_fire_interval_mult)) - 1
        return self.fire_interval_ms * self.level_fire_interval_mult[idx]

    def damage_at(self, level: int) -> float:
        idx = min(max(level, 1), len(self.level_damage_mult)) - 1
        return self.damage * self.level_damage_mult[idx]


DEFAULT_ARCHETYPES: tuple[ArchetypeSpec, ...] = (
    ArchetypeSpec(
        kind=Archetype.TANK, side=Side.ATTACKER,
        hp=10, move_speed=50.0, attack_range_cells=3,
        fire_interval_ms=1000, damage=1, fire_style=FireStyle.CANNON,
        reward=20,
    ),
    ArchetypeSpec(
        kind=Archetype.SONIC_TANK, side=Side.ATTACKER,
        hp=15, move_speed=40.0, attack_range_cells=6,
        fire_interval_ms=2500, damage=2, fire_style=FireStyle.SONIC,
        reward=20,
    ),
    ArchetypeSpec(
        kind=Archetype.ROCKET_TOWER, side=Side.DEFENDER,
        hp=5, attack_range_cells=5,
        fire_interval_ms=600, damage=2, fire_style=FireStyle.ROCKET,
        cost=120, upgrade_cost=70, sell_gain=60,
        level_fire_interval_mult=(1.2, 1.0, 0.8),
        level_damage_mult=(1.0, 1.25, 1.5),
    ),
    ArchetypeSpec(
        kind=Archetype.LASER_TOWER, side=Side.DEFENDER,
        hp=5, attack_range_cells=4,
        fire_interval_ms=400, damage=1, fire_style=FireStyle.LASER,
        cost=100, upgrade_cost=60, sell_gain=50,
        level_fire_interval_mult=(1.0, 0.8, 0.65),
        level_damage_mult=(1.0, 1.5, 2.0),
    ),
)


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable configuration for the simulation run."""

    # World
    world_seed: int = 42
    grid_width: int = 25
    grid_height: int = 6
    battle_start_row: int = 2
    battle_rows: int = 4
    cell_size: float = 80.0                # px, world conversion only
    battlefield_width: float | None = None  # px; None -> grid_width * cell_size
    spawn_col: int = 0

    # Movement
    arrive_epsilon_px: float = 5.0
    stuck_retreat_threshold_sec: float = 1.0
    publish_routes: bool = True

    # Targeting
    lock_grace_ms: float = 500.0

    # Pathfinding
    pathfinding_straight_cost: float = 1.0
    pathfinding_diagonal_cost: float = 1.4
    pathfinding_max_steps: int = 1000
    pathfinding_heuristic: str = "manhattan"   # or "octile"

    # Waves
    wave_duration_ms: float = 15000.0
    hp_bonus_per_wave: float = 2.0
    base_spawn_interval_ms: float = 2000.0
    min_spawn_interval_ms: float = 800.0
    spawn_interval_reduction: float = 0.92
    heavy_chance_base: float = 0.25
    heavy_chance_per_wave: float = 0.05
    heavy_chance_cap: float = 0.5
    light_archetype: Archetype = Archetype.TANK
    heavy_archetype: Archetype = Archetype.SONIC_TANK

    # Economy
    initial_gold: int = 1000
    max_defender_level: int = 3

    # Archetypes
    archetypes: tuple[ArchetypeSpec, ...] = field(default=DEFAULT_ARCHETYPES)

    # Host
    tick_rate_seconds: float = 0.05
    log_level: str = "INFO"

    # -- derived --

    @property
    def effective_battlefield_width(self) -> float:
        if self.battlefield_width is not None:
            return self.battlefield_width
        return self.grid_width * self.cell_size

    @property
    def battle_end_row(self) -> int:
        """Last battle row (inclusive)."""
        return self.battle_start_row + self.battle_rows - 1

    def archetype(self, kind: Archetype) -> ArchetypeSpec:
        for spec in self.archetypes:
            if spec.kind == kind:
                return spec
        raise KeyError(f"No archetype configured for {kind.name}")

    def archetypes_for(self, side: Side) -> list[ArchetypeSpec]:
        return [a for a in self.archetypes if a.side == side]

    def validate(self) -> SimulationConfig:
        """Raise ValueError on impossible settings; return self for chaining."""
        if self.grid_width <= 0 or self.grid_height <= 0:
            raise ValueError("grid dimensions must be positive")
        if self.battle_rows <= 0:
            raise ValueError("battle_rows must be positive")
        if self.battle_start_row < 0 or self.battle_end_row >= self.grid_height:
            raise ValueError(
                f"battle band [{self.battle_start_row}, {self.battle_end_row}] "
                f"lies outside a grid of height {self.grid_height}"
            )
        if not 0 <= self.spawn_col < self.grid_width:
            raise ValueError("spawn_col must be inside the grid")
        if self.cell_size <= 0:
            raise ValueError("cell_size must be positive")
        if self.base_spawn_interval_ms <= 0 or self.min_spawn_interval_ms <= 0:
            raise ValueError("spawn intervals must be positive")
        if self.wave_duration_ms <= 0:
            raise ValueError("wave_duration_ms must be positive")
        if not 0.0 < self.spawn_interval_reduction <= 1.0:
            raise ValueError("spawn_interval_reduction must be in (0, 1]")
        if self.pathfinding_heuristic not in ("manhattan", "octile"):
            raise ValueError(f"unknown heuristic {self.pathfinding_heuristic!r}")
        if self.pathfinding_max_steps <= 0:
            raise ValueError("pathfinding_max_steps must be positive")
        for spec in self.archetypes:
            if spec.fire_interval_ms <= 0:
                raise ValueError(f"{spec.kind.name}: fire_interval_ms must be positive")
        for kind in (self.light_archetype, self.heavy_archetype):
            try:
                spec = self.archetype(kind)
            except KeyError as exc:
                raise ValueError(str(exc)) from exc
            if spec.side is not Side.ATTACKER:
                raise ValueError(f"{kind.name} is not an attacker archetype")
        if not 0.0 <= self.heavy_chance_base <= 1.0 or not 0.0 <= self.heavy_chance_cap <= 1.0:
            raise ValueError("heavy chances must lie in [0, 1]")

        if (
            self.pathfinding_heuristic == "manhattan"
            and self.pathfinding_diagonal_cost < self.pathfinding_straight_cost
        ):
            logger.warning(
                "Diagonal cost %.2f < straight cost %.2f: Manhattan heuristic is "
                "not admissible, A* paths may be suboptimal (consider 'octile').",
                self.pathfinding_diagonal_cost,
                self.pathfinding_straight_cost,
            )
        return self

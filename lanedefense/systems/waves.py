"""Wave escalation and spawn cadence.

Two independent timers run off the same ``delta_ms``:

  wave timer   every ``wave_duration_ms``: level += 1, hp bonus and spawn
               interval recomputed
  spawn timer  every ``spawn_interval_ms``: one spawn attempt

A spawn attempt that finds every battle row of the spawn column taken is
dropped, not queued.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from lanedefense.core.enums import Domain
from lanedefense.core.models import Cell, WaveState
from lanedefense.systems.generator import build_attacker

if TYPE_CHECKING:
    from lanedefense.config import SimulationConfig
    from lanedefense.core.enums import Archetype
    from lanedefense.core.grid import GridMap
    from lanedefense.core.models import Entity
    from lanedefense.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)


class WaveDirector:
    """Owns the ``WaveState`` and decides what to spawn and where."""

    __slots__ = ("_config", "_rng", "_state")

    def __init__(self, config: SimulationConfig, rng: DeterministicRNG, state: WaveState | None = None) -> None:
        self._config = config
        self._rng = rng
        if state is None:
            state = WaveState(spawn_interval_ms=self.spawn_interval_for_level(1))
        self._state = state

    @property
    def state(self) -> WaveState:
        return self._state

    @property
    def level(self) -> int:
        return self._state.level

    # -- escalation curve --

    def spawn_interval_for_level(self, level: int) -> float:
        cfg = self._config
        decayed = cfg.base_spawn_interval_ms * cfg.spawn_interval_reduction ** (level - 1)
        return max(cfg.min_spawn_interval_ms, decayed)

    def hp_bonus_for_level(self, level: int) -> float:
        return (level - 1) * self._config.hp_bonus_per_wave

    def heavy_chance(self, level: int | None = None) -> float:
        cfg = self._config
        lvl = self._state.level if level is None else level
        return min(cfg.heavy_chance_base + (lvl - 1) * cfg.heavy_chance_per_wave, cfg.heavy_chance_cap)

    # -- timers --

    def tick(self, delta_ms: float) -> bool:
        """Advance both timers. Returns True when a spawn attempt is due."""
        state = self._state

        state.wave_timer_ms += delta_ms
        if state.wave_timer_ms >= self._config.wave_duration_ms:
            state.wave_timer_ms = 0.0
            self.advance_wave()

        state.spawn_timer_ms += delta_ms
        if state.spawn_timer_ms >= state.spawn_interval_ms:
            state.spawn_timer_ms = 0.0
            return True
        return False

    def advance_wave(self) -> None:
        state = self._state
        state.level += 1
        state.hp_bonus = self.hp_bonus_for_level(state.level)
        state.spawn_interval_ms = self.spawn_interval_for_level(state.level)
        logger.info(
            "Wave %d: spawn interval %.0f ms, hp bonus %+.0f, heavy chance %.0f%%",
            state.level, state.spawn_interval_ms, state.hp_bonus, self.heavy_chance() * 100,
        )

    # -- spawning --

    def free_spawn_rows(self, attackers: Iterable[Entity], grid: GridMap) -> list[int]:
        """Battle rows of the spawn column that are walkable and hold no attacker."""
        col = self._config.spawn_col
        taken = {
            e.grid_position.row for e in attackers
            if e.active and e.grid_position.col == col
        }
        return [
            row for row in grid.battle_row_range
            if row not in taken and grid.is_walkable(col, row)
        ]

    def choose_archetype(self, attempt: int) -> Archetype:
        cfg = self._config
        if self._rng.next_bool(Domain.ARCHETYPE, attempt, self.heavy_chance()):
            return cfg.heavy_archetype
        return cfg.light_archetype

    def choose_spawn(self, attackers: Iterable[Entity], grid: GridMap) -> Entity | None:
        """Build the attacker for one spawn attempt, or None if every row is taken."""
        state = self._state
        attempt = state.spawn_attempts
        state.spawn_attempts += 1

        rows = self.free_spawn_rows(attackers, grid)
        if not rows:
            logger.debug("Spawn attempt %d skipped: spawn column full", attempt)
            return None

        row = self._rng.choice(Domain.SPAWN_ROW, attempt, rows)
        spec = self._config.archetype(self.choose_archetype(attempt))
        return build_attacker(spec, Cell(self._config.spawn_col, row), grid, state.hp_bonus)

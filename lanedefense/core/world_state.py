"""Mutable authoritative world state, only mutated by the Simulation."""

from __future__ import annotations

from lanedefense.core.arena import EntityArena
from lanedefense.core.grid import GridMap
from lanedefense.core.models import Cell, Entity, WaveState


class WorldState:
    """The single source of truth for one run."""

    __slots__ = (
        "tick", "elapsed_ms", "seed", "grid", "arena", "wave",
        "total_spawned", "total_killed", "total_escaped", "defenders_lost",
    )

    def __init__(self, seed: int, grid: GridMap, wave: WaveState, arena: EntityArena | None = None) -> None:
        self.tick: int = 0
        self.elapsed_ms: float = 0.0
        self.seed: int = seed
        self.grid: GridMap = grid
        self.arena: EntityArena = arena if arena is not None else EntityArena()
        self.wave: WaveState = wave
        self.total_spawned: int = 0
        self.total_killed: int = 0
        self.total_escaped: int = 0
        self.defenders_lost: int = 0

    def defender_at(self, col: int, row: int) -> Entity | None:
        for entity in self.arena.defenders():
            if entity.active and entity.grid_position.col == col and entity.grid_position.row == row:
                return entity
        return None

    def defender_cells(self) -> list[Cell]:
        """Cells currently blocked by a living defender."""
        return [d.grid_position for d in self.arena.defenders() if d.active]

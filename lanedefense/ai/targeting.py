"""Nearest-in-range target acquisition with lock hysteresis.

Shared by both populations. Distances are measured between the cells that
contain the two entities' world positions, so results do not depend on the
pixel size of a cell.

Lock states:
  UNLOCKED -> LOCKED   a candidate is in range
  LOCKED   -> LOCKED   re-acquired (possibly a nearer candidate)
  LOCKED   -> GRACE    nothing acquired, locked target alive but out of range
  GRACE    -> UNLOCKED target_lost_ms exceeds the grace window, or target gone
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from lanedefense.core.enums import LockState

if TYPE_CHECKING:
    from lanedefense.config import SimulationConfig
    from lanedefense.core.arena import EntityArena
    from lanedefense.core.grid import GridMap
    from lanedefense.core.models import Cell, Entity

logger = logging.getLogger(__name__)


class TargetAcquisition:
    """Resolves ``current_target`` for one entity per call."""

    __slots__ = ("_grid", "_arena", "_grace_ms")

    def __init__(self, config: SimulationConfig, grid: GridMap, arena: EntityArena) -> None:
        self._grid = grid
        self._arena = arena
        self._grace_ms = config.lock_grace_ms

    def cell_of(self, entity: Entity) -> Cell:
        return self._grid.world_to_cell(entity.world_position)

    def grid_distance(self, a: Entity, b: Entity) -> float:
        return self.cell_of(a).distance(self.cell_of(b))

    def engaged_target(self, entity: Entity) -> Entity | None:
        """The currently locked target, if it is still active and within range."""
        locked = self._arena.get(entity.current_target)
        if locked is None or not locked.active:
            return None
        if self.grid_distance(entity, locked) > entity.attack_range_cells:
            return None
        return locked

    def acquire(self, entity: Entity, pool: Iterable[Entity]) -> Entity | None:
        """Closest active candidate within range; first found wins ties."""
        best: Entity | None = None
        best_dist = entity.attack_range_cells
        origin = self.cell_of(entity)
        for cand in pool:
            if cand is entity or not cand.active:
                continue
            dist = origin.distance(self.cell_of(cand))
            if dist > entity.attack_range_cells:
                continue
            if best is None or dist < best_dist:
                best = cand
                best_dist = dist
        return best

    def resolve(self, entity: Entity, pool: Iterable[Entity], delta_ms: float) -> Entity | None:
        """Advance the lock machine by *delta_ms*; return the target to attack."""
        if not entity.active:
            return None

        found = self.acquire(entity, pool)
        if found is not None:
            entity.current_target = found.handle
            entity.target_lost_ms = 0.0
            entity.lock_state = LockState.LOCKED
            return found

        if entity.current_target is None:
            return None

        locked = self._arena.get(entity.current_target)
        if locked is None or not locked.active:
            logger.debug("%r lost target %r (gone)", entity.handle, entity.current_target)
            entity.clear_target()
            return None

        if self.grid_distance(entity, locked) <= entity.attack_range_cells:
            entity.target_lost_ms = 0.0
            entity.lock_state = LockState.LOCKED
            return locked

        entity.target_lost_ms += delta_ms
        if entity.target_lost_ms <= self._grace_ms:
            entity.lock_state = LockState.GRACE
            return locked

        logger.debug("%r released target %r after %.0f ms", entity.handle, locked.handle, entity.target_lost_ms)
        entity.clear_target()
        return None

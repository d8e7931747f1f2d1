"""Per-attacker lane movement: next-cell selection, interpolation, stuck recovery.

Attackers step cell by cell toward increasing columns. Each tick the world
position slides toward the center of ``motion.target_cell``; on arrival the
cell is committed and a new target cell is picked:

  forward (col + 1)  >  up (row + 1) / down (row - 1)  >  stay

When both vertical neighbours are open the one closer to the middle of the
battle band wins. An attacker that cannot pick anything but its own cell
for longer than the stuck threshold tries one retreat step
(back, then up, then down).
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from lanedefense.ai.pathfinding import simplify_path
from lanedefense.core.enums import MoveState
from lanedefense.core.models import Cell

if TYPE_CHECKING:
    from lanedefense.ai.pathfinding import Pathfinder
    from lanedefense.config import SimulationConfig
    from lanedefense.core.models import Entity, WorldPos

logger = logging.getLogger(__name__)


class MovementController:
    """Advances one attacker per call. Holds no per-entity state of its own."""

    __slots__ = ("_config", "_pathfinder", "_grid", "_last_exit_col")

    def __init__(self, config: SimulationConfig, pathfinder: Pathfinder) -> None:
        self._config = config
        self._pathfinder = pathfinder
        self._grid = pathfinder.grid
        # First column whose center lies past the battlefield edge
        edge_cells = config.effective_battlefield_width / self._grid.cell_size
        self._last_exit_col = max(self._grid.width, math.floor(edge_cells - 0.5) + 1)

    # -- public --

    def advance(self, entity: Entity, dt: float, target: Entity | None = None) -> None:
        """Move *entity* for *dt* seconds, or just face *target* while engaged."""
        motion = entity.motion
        if motion is None or not entity.active:
            return

        if target is not None:
            motion.state = MoveState.ENGAGED
            self.face(entity, target)
            return

        entity.heading_deg = 0.0
        grid = self._grid
        pos = entity.world_position

        if pos.distance(grid.cell_center(motion.target_cell)) < self._config.arrive_epsilon_px:
            motion.last_cell = entity.grid_position
            entity.grid_position = motion.target_cell
            self.select_next_target_cell(entity)
            if entity.grid_position != motion.last_cell:
                motion.stuck_timer_sec = 0.0
                self.refresh_route(entity)
        elif motion.state is MoveState.ENGAGED:
            motion.state = MoveState.CRUISING

        self._check_stuck(entity, dt)
        self._step_toward(pos, grid.cell_center(motion.target_cell), motion.move_speed * dt)

        if pos.x > self._config.effective_battlefield_width:
            entity.escaped = True
            motion.state = MoveState.ESCAPED
            logger.debug("Attacker %r escaped at x=%.1f", entity.handle, pos.x)

    def face(self, entity: Entity, target: Entity) -> None:
        """Point *entity* at *target* (degrees, 0 = +x, counter-clockwise)."""
        dx = target.world_position.x - entity.world_position.x
        dy = target.world_position.y - entity.world_position.y
        entity.heading_deg = math.degrees(math.atan2(dy, dx))

    def can_move_to(self, col: int, row: int) -> bool:
        """Walkable grid cell, or an exit-lane cell between the grid and the far edge."""
        if self._grid.width <= col <= self._last_exit_col and self._grid.in_battle_band(row):
            return True
        return self._pathfinder.is_walkable(col, row)

    def select_next_target_cell(self, entity: Entity) -> Cell:
        """Pick and store the next target cell (forward > vertical > stay)."""
        motion = entity.motion
        cur = entity.grid_position
        col, row = cur.col, cur.row

        if self.can_move_to(col + 1, row):
            motion.target_cell = Cell(col + 1, row)
            motion.state = MoveState.CRUISING
            return motion.target_cell

        can_up = self.can_move_to(col, row + 1)
        can_down = self.can_move_to(col, row - 1)

        if can_up and can_down:
            if row < self._grid.battle_center_row:
                motion.target_cell = Cell(col, row + 1)
            else:
                motion.target_cell = Cell(col, row - 1)
        elif can_up:
            motion.target_cell = Cell(col, row + 1)
        elif can_down:
            motion.target_cell = Cell(col, row - 1)
        else:
            motion.target_cell = cur
            motion.state = MoveState.STALLED
            return cur

        motion.state = MoveState.CRUISING
        return motion.target_cell

    def try_retreat(self, entity: Entity) -> bool:
        """Back off one cell: back, then up, then down. False if boxed in."""
        motion = entity.motion
        col, row = entity.grid_position.col, entity.grid_position.row
        for dc, dr in ((-1, 0), (0, 1), (0, -1)):
            if self.can_move_to(col + dc, row + dr):
                motion.target_cell = Cell(col + dc, row + dr)
                motion.state = MoveState.RETREATING
                logger.debug("Attacker %r retreating to %s", entity.handle, motion.target_cell)
                return True
        return False

    # -- internals --

    def _check_stuck(self, entity: Entity, dt: float) -> None:
        motion = entity.motion
        if motion.target_cell == entity.grid_position:
            motion.stuck_timer_sec += dt
            if motion.stuck_timer_sec > self._config.stuck_retreat_threshold_sec:
                self.try_retreat(entity)
                motion.stuck_timer_sec = 0.0
        else:
            motion.stuck_timer_sec = 0.0

    @staticmethod
    def _step_toward(pos: WorldPos, target: WorldPos, max_dist: float) -> None:
        dist = pos.distance(target)
        if dist <= 0.1:
            return
        move = min(max_dist, dist)
        pos.x += (target.x - pos.x) / dist * move
        pos.y += (target.y - pos.y) / dist * move

    def refresh_route(self, entity: Entity) -> None:
        """Publish a simplified A* route from the current cell to the last column."""
        if not self._config.publish_routes:
            return
        motion = entity.motion
        grid = self._grid
        start = entity.grid_position
        if not grid.in_bounds(start.col, start.row):
            motion.route = ()
            return
        exit_col = grid.width - 1
        # Same row first, then rows ordered by distance from it
        rows = sorted(grid.battle_row_range, key=lambda r: (abs(r - start.row), r))
        for row in rows:
            path = self._pathfinder.find_path(start, Cell(exit_col, row))
            if path is not None:
                motion.route = tuple(simplify_path(path))
                return
        motion.route = ()

"""Tests for lane movement: next-cell policy, stuck recovery, escape, engagement."""

from __future__ import annotations

import pytest

from lanedefense.ai.movement import MovementController
from lanedefense.ai.pathfinding import Pathfinder
from lanedefense.config import SimulationConfig
from lanedefense.core.enums import Archetype, MoveState
from lanedefense.core.grid import GridMap
from lanedefense.core.models import Cell
from lanedefense.systems.generator import build_attacker


@pytest.fixture
def cfg() -> SimulationConfig:
    return SimulationConfig(grid_width=10, grid_height=6, battle_start_row=2, battle_rows=4, cell_size=80.0)


@pytest.fixture
def grid(cfg) -> GridMap:
    return GridMap(cfg.grid_width, cfg.grid_height, cfg.battle_start_row, cfg.battle_rows, cfg.cell_size)


@pytest.fixture
def mover(cfg, grid) -> MovementController:
    return MovementController(cfg, Pathfinder.from_config(grid, cfg))


def _tank(cfg, grid, col: int, row: int, speed: float | None = None):
    entity = build_attacker(cfg.archetype(Archetype.TANK), Cell(col, row), grid)
    if speed is not None:
        entity.motion.move_speed = speed
    return entity


class TestNextCellSelection:
    def test_forward_preferred(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 3)
        assert mover.select_next_target_cell(tank) == Cell(4, 3)

    def test_blocked_ahead_detours_toward_band_center(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 3)
        grid.set_walkable(4, 3, False)
        # Band rows 2..5, center 4.0: row 3 sits below it, so go up
        assert mover.select_next_target_cell(tank) == Cell(3, 4)
        assert tank.motion.state is MoveState.CRUISING

    def test_blocked_ahead_above_center_goes_down(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 4)
        grid.set_walkable(4, 4, False)
        assert mover.select_next_target_cell(tank) == Cell(3, 3)

    def test_single_vertical_option_taken(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 5)
        grid.set_walkable(4, 5, False)
        # Row 6 is outside the grid
        assert mover.select_next_target_cell(tank) == Cell(3, 4)

    def test_boxed_in_stalls(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 3)
        for col, row in ((4, 3), (3, 4), (3, 2)):
            grid.set_walkable(col, row, False)
        assert mover.select_next_target_cell(tank) == Cell(3, 3)
        assert tank.motion.state is MoveState.STALLED

    def test_exit_lane_past_last_column(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 9, 3)
        assert mover.can_move_to(10, 3)
        assert not mover.can_move_to(10, 0)
        assert mover.select_next_target_cell(tank) == Cell(10, 3)

    def test_exit_lane_reaches_wider_battlefield(self, grid):
        wide = SimulationConfig(
            grid_width=10, grid_height=6, battle_start_row=2, battle_rows=4,
            cell_size=80.0, battlefield_width=12 * 80.0,
        )
        mover = MovementController(wide, Pathfinder.from_config(grid, wide))
        # Column 12 is the first whose center lies past x=960
        assert mover.can_move_to(11, 3)
        assert mover.can_move_to(12, 3)
        assert not mover.can_move_to(13, 3)
        assert not mover.can_move_to(11, 1)

    def test_default_exit_lane_is_one_column(self, mover):
        assert not mover.can_move_to(11, 3)


class TestDetour:
    def test_obstacle_ahead_moves_vertically(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 3)
        grid.set_walkable(4, 3, False)
        start_y = tank.world_position.y
        mover.advance(tank, 0.05)
        assert tank.motion.target_cell == Cell(3, 4)
        assert tank.world_position.y > start_y
        assert tank.motion.stuck_timer_sec == 0.0


class TestStuckRetreat:
    def _boxed(self, cfg, grid, back_open: bool = True):
        tank = _tank(cfg, grid, 3, 3)
        for col, row in ((4, 3), (3, 4), (3, 2)):
            grid.set_walkable(col, row, False)
        if not back_open:
            grid.set_walkable(2, 3, False)
        return tank

    def test_no_retreat_before_threshold(self, cfg, grid, mover):
        tank = self._boxed(cfg, grid)
        for _ in range(4):
            mover.advance(tank, 0.25)
        assert tank.motion.stuck_timer_sec == pytest.approx(1.0)
        assert tank.motion.target_cell == Cell(3, 3)

    def test_retreats_one_step_back_after_threshold(self, cfg, grid, mover):
        tank = self._boxed(cfg, grid)
        start_x = tank.world_position.x
        for _ in range(5):
            mover.advance(tank, 0.25)
        assert tank.motion.target_cell == Cell(2, 3)
        assert tank.motion.state is MoveState.RETREATING
        assert tank.motion.stuck_timer_sec == 0.0
        assert tank.world_position.x < start_x

    def test_timer_stays_reset_while_retreating(self, cfg, grid, mover):
        tank = self._boxed(cfg, grid)
        for _ in range(8):
            mover.advance(tank, 0.25)
        assert tank.motion.stuck_timer_sec == 0.0
        assert tank.grid_position == Cell(3, 3)

    def test_retreat_commits_back_cell(self, cfg, grid, mover):
        tank = self._boxed(cfg, grid)
        for _ in range(5):
            mover.advance(tank, 0.25)
        # 80 px back at 50 px/s
        for _ in range(40):
            mover.advance(tank, 0.05)
        assert tank.grid_position == Cell(2, 3)
        assert tank.motion.last_cell == Cell(3, 3)
        assert tank.motion.stuck_timer_sec == 0.0

    def test_fully_boxed_stays_put(self, cfg, grid, mover):
        tank = self._boxed(cfg, grid, back_open=False)
        start = tank.world_position.copy()
        for _ in range(12):
            mover.advance(tank, 0.25)
        assert tank.grid_position == Cell(3, 3)
        assert tank.world_position == start
        assert tank.motion.target_cell == Cell(3, 3)


class TestInterpolation:
    def test_moves_at_configured_speed(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 3)
        x0 = tank.world_position.x
        mover.advance(tank, 0.1)
        assert tank.world_position.x == pytest.approx(x0 + 5.0)

    def test_commits_cell_on_arrival(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 3, speed=400.0)
        for _ in range(5):
            mover.advance(tank, 0.05)
        assert tank.grid_position == Cell(4, 3)
        assert tank.motion.target_cell == Cell(5, 3)

    def test_route_published_on_commit(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 3, speed=400.0)
        for _ in range(5):
            mover.advance(tank, 0.05)
        assert tank.motion.route == (Cell(4, 3), Cell(9, 3))

    def test_refresh_route_detours(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 3)
        for row in grid.battle_row_range:
            if row != 5:
                grid.set_walkable(6, row, False)
        mover.refresh_route(tank)
        route = tank.motion.route
        assert route[0] == Cell(3, 3)
        assert route[-1].col == 9
        assert len(route) > 2


class TestEscape:
    def test_crossing_far_edge_escapes(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 9, 3, speed=400.0)
        for _ in range(5):
            mover.advance(tank, 0.05)
        assert tank.escaped
        assert not tank.active
        assert tank.motion.state is MoveState.ESCAPED
        assert tank.world_position.x > cfg.effective_battlefield_width

    def test_escaped_attacker_no_longer_moves(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 9, 3, speed=400.0)
        for _ in range(5):
            mover.advance(tank, 0.05)
        x = tank.world_position.x
        mover.advance(tank, 0.05)
        assert tank.world_position.x == x


class TestEngaged:
    def test_engaged_holds_position_and_faces_target(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 3)
        target = _tank(cfg, grid, 3, 5)
        start = tank.world_position.copy()
        mover.advance(tank, 0.5, target=target)
        assert tank.world_position == start
        assert tank.motion.state is MoveState.ENGAGED
        assert tank.heading_deg == pytest.approx(90.0)

    def test_resumes_cruising_when_disengaged(self, cfg, grid, mover):
        tank = _tank(cfg, grid, 3, 3)
        target = _tank(cfg, grid, 5, 3)
        mover.advance(tank, 0.5, target=target)
        x0 = tank.world_position.x
        mover.advance(tank, 0.1)
        assert tank.motion.state is MoveState.CRUISING
        assert tank.world_position.x > x0
        assert tank.heading_deg == 0.0

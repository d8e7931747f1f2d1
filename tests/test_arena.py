"""Tests for the generation-checked entity arena."""

from __future__ import annotations

import pytest

from lanedefense.config import SimulationConfig
from lanedefense.core.arena import EntityArena, EntityHandle
from lanedefense.core.enums import Archetype, Side
from lanedefense.core.grid import GridMap
from lanedefense.core.models import Cell
from lanedefense.systems.generator import build_attacker, build_defender


@pytest.fixture
def parts():
    cfg = SimulationConfig()
    grid = GridMap(cfg.grid_width, cfg.grid_height, cfg.battle_start_row, cfg.battle_rows, cfg.cell_size)
    return cfg, grid


def _tank(parts, col=0, row=3):
    cfg, grid = parts
    return build_attacker(cfg.archetype(Archetype.TANK), Cell(col, row), grid)


def _tower(parts, col=5, row=3):
    cfg, grid = parts
    return build_defender(cfg.archetype(Archetype.ROCKET_TOWER), Cell(col, row), grid)


class TestHandles:
    def test_insert_assigns_handle(self, parts):
        arena = EntityArena()
        tank = _tank(parts)
        handle = arena.insert(tank)
        assert tank.handle == handle
        assert arena.get(handle) is tank
        assert handle in arena

    def test_removed_handle_is_stale(self, parts):
        arena = EntityArena()
        handle = arena.insert(_tank(parts))
        assert arena.remove(handle) is not None
        assert arena.get(handle) is None
        assert handle not in arena
        assert arena.remove(handle) is None

    def test_slot_reuse_bumps_generation(self, parts):
        arena = EntityArena()
        old = arena.insert(_tank(parts))
        arena.remove(old)
        new = arena.insert(_tank(parts, row=4))
        assert new.index == old.index
        assert new.generation == old.generation + 1
        assert arena.get(old) is None
        assert arena.get(new) is not None

    def test_lowest_free_slot_reused(self, parts):
        arena = EntityArena()
        handles = [arena.insert(_tank(parts, row=2 + i)) for i in range(4)]
        arena.remove(handles[3])
        arena.remove(handles[1])
        assert arena.insert(_tank(parts)).index == 1
        assert arena.insert(_tank(parts)).index == 3

    def test_get_none_and_out_of_range(self):
        arena = EntityArena()
        assert arena.get(None) is None
        assert arena.get(EntityHandle(99, 0)) is None

    def test_key_round_trip(self):
        handle = EntityHandle(index=7, generation=3)
        assert EntityHandle.from_key(handle.key) == handle
        assert EntityHandle(7, 0).key != EntityHandle(7, 1).key


class TestIteration:
    def test_index_order_and_len(self, parts):
        arena = EntityArena()
        a = _tank(parts)
        b = _tower(parts)
        c = _tank(parts, row=4)
        for e in (a, b, c):
            arena.insert(e)
        arena.remove(b.handle)
        assert list(arena) == [a, c]
        assert len(arena) == 2

    def test_side_filters(self, parts):
        arena = EntityArena()
        tank = _tank(parts)
        tower = _tower(parts)
        arena.insert(tank)
        arena.insert(tower)
        assert arena.attackers() == [tank]
        assert arena.defenders() == [tower]
        assert arena.of_side(Side.DEFENDER) == [tower]

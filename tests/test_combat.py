"""Tests for fire-interval gating, damage application, and fire strategies."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from lanedefense.actions.combat import CombatScheduler
from lanedefense.actions.fire import FIRE_STRATEGIES, get_fire_strategy
from lanedefense.ai.targeting import TargetAcquisition
from lanedefense.config import SimulationConfig
from lanedefense.core.arena import EntityArena
from lanedefense.core.enums import Archetype, FireStyle
from lanedefense.core.grid import GridMap
from lanedefense.core.models import Cell
from lanedefense.systems.generator import build_attacker, build_defender


def _setup():
    cfg = SimulationConfig()
    grid = GridMap(cfg.grid_width, cfg.grid_height, cfg.battle_start_row, cfg.battle_rows, cfg.cell_size)
    arena = EntityArena()
    tower = build_defender(cfg.archetype(Archetype.LASER_TOWER), Cell(5, 3), grid)
    tank = build_attacker(cfg.archetype(Archetype.TANK), Cell(6, 3), grid)
    arena.insert(tower)
    arena.insert(tank)
    return cfg, grid, arena, tower, tank


class TestFireInterval:
    def test_no_shot_before_interval(self):
        _, _, _, tower, tank = _setup()
        combat = CombatScheduler()
        assert combat.tick(tower, tank, 399) is None
        assert tower.time_since_last_fire_ms == 399
        assert tank.hp == tank.max_hp

    def test_fires_when_interval_reached(self):
        _, _, _, tower, tank = _setup()
        combat = CombatScheduler()
        combat.tick(tower, tank, 200)
        event = combat.tick(tower, tank, 200)
        assert event is not None
        assert event.source == tower.handle
        assert event.target == tank.handle
        assert event.damage == 1
        assert event.effect == "beam"
        assert tower.time_since_last_fire_ms == 0.0
        assert tank.hp == tank.max_hp - 1

    def test_one_shot_per_elapse(self):
        _, _, _, tower, tank = _setup()
        combat = CombatScheduler()
        shots = [combat.tick(tower, tank, 100) for _ in range(20)]
        assert sum(1 for s in shots if s is not None) == 5

    def test_source_unchanged_by_firing(self):
        _, _, _, tower, tank = _setup()
        hp_before = tower.hp
        CombatScheduler().fire(tower, tank)
        assert tower.hp == hp_before
        assert tower.alive

    def test_inactive_pair_does_not_fire(self):
        _, _, _, tower, tank = _setup()
        combat = CombatScheduler()
        tank.alive = False
        assert combat.tick(tower, tank, 1000) is None
        assert tower.time_since_last_fire_ms == 0.0


class TestDamage:
    def test_lethal_hit_removes_from_pool(self):
        cfg, grid, arena, tower, tank = _setup()
        targeting = TargetAcquisition(cfg, grid, arena)
        tank.hp = 1
        tower.damage = 1
        CombatScheduler().fire(tower, tank)
        assert tank.hp == 0
        assert not tank.alive
        assert targeting.acquire(tower, [tank]) is None

    def test_hp_clamped_at_zero(self):
        _, _, _, _, tank = _setup()
        assert tank.take_damage(1000) is True
        assert tank.hp == 0.0

    def test_hp_clamped_at_max(self):
        _, _, _, _, tank = _setup()
        tank.take_damage(3)
        tank.take_damage(-50)
        assert tank.hp == tank.max_hp

    def test_dead_target_not_killed_twice(self):
        _, _, _, _, tank = _setup()
        assert tank.take_damage(100) is True
        assert tank.take_damage(100) is False

    def test_hit_notice_delivered(self):
        _, _, _, tower, tank = _setup()
        seen = []
        combat = CombatScheduler(on_hit=lambda event, notice: seen.append((event, notice)))
        tank.hp = 1
        combat.fire(tower, tank)
        assert len(seen) == 1
        event, notice = seen[0]
        assert (notice.x, notice.y) == (tank.world_position.x, tank.world_position.y)
        assert notice.source == tower.handle
        assert notice.color == "#00ff41"
        assert notice.killed is True


class TestFireStrategies:
    def test_every_style_registered(self):
        for style in FireStyle:
            assert style in FIRE_STRATEGIES

    @pytest.mark.parametrize("style, effect", [
        (FireStyle.CANNON, "bullet"),
        (FireStyle.SONIC, "sonic"),
        (FireStyle.ROCKET, "rocket"),
        (FireStyle.LASER, "beam"),
    ])
    def test_effect_per_style(self, style, effect):
        _, _, _, tower, tank = _setup()
        tower.fire_style = style
        shot = get_fire_strategy(style)(tower, tank)
        assert shot.effect == effect
        assert shot.damage == tower.damage

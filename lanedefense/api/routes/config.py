"""GET /api/v1/config: expose simulation configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lanedefense.api.dependencies import get_engine_manager
from lanedefense.api.engine_manager import EngineManager
from lanedefense.api.schemas import ArchetypeSchema, SimulationConfigResponse

router = APIRouter()


@router.get("/config", response_model=SimulationConfigResponse)
def get_config(
    manager: EngineManager = Depends(get_engine_manager),
) -> SimulationConfigResponse:
    cfg = manager.config
    return SimulationConfigResponse(
        world_seed=cfg.world_seed,
        grid_width=cfg.grid_width,
        grid_height=cfg.grid_height,
        battle_start_row=cfg.battle_start_row,
        battle_rows=cfg.battle_rows,
        cell_size=cfg.cell_size,
        battlefield_width=cfg.effective_battlefield_width,
        lock_grace_ms=cfg.lock_grace_ms,
        stuck_retreat_threshold_sec=cfg.stuck_retreat_threshold_sec,
        wave_duration_ms=cfg.wave_duration_ms,
        base_spawn_interval_ms=cfg.base_spawn_interval_ms,
        min_spawn_interval_ms=cfg.min_spawn_interval_ms,
        spawn_interval_reduction=cfg.spawn_interval_reduction,
        initial_gold=cfg.initial_gold,
        max_defender_level=cfg.max_defender_level,
        archetypes=[
            ArchetypeSchema(
                kind=a.kind.name.lower(), side=a.side.name.lower(),
                hp=a.hp, attack_range_cells=a.attack_range_cells,
                fire_interval_ms=a.fire_interval_ms, damage=a.damage,
                move_speed=a.move_speed, reward=a.reward, cost=a.cost,
                upgrade_cost=a.upgrade_cost, sell_gain=a.sell_gain,
            )
            for a in cfg.archetypes
        ],
        tick_rate=manager.tick_rate,
    )

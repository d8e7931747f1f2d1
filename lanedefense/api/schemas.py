"""Pydantic request/response models for the REST API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# --- Entity ---

class CellSchema(BaseModel):
    col: int
    row: int


class EntitySchema(BaseModel):
    id: int
    side: str
    kind: str
    col: int
    row: int
    x: float
    y: float
    hp: float
    max_hp: float
    hp_ratio: float = 1.0   # health-bar fill
    level: int = 1
    heading_deg: float = 0.0
    target_id: int | None = None
    lock_state: str = "unlocked"
    move_state: str | None = None
    route: list[CellSchema] = Field(default_factory=list)


class EventSchema(BaseModel):
    tick: int
    category: str
    message: str
    entity_ids: list[int] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class WaveSchema(BaseModel):
    level: int
    wave_timer_ms: float
    spawn_interval_ms: float
    hp_bonus: float


class WorldStateResponse(BaseModel):
    tick: int
    elapsed_ms: float
    gold: int | None = None
    wave: WaveSchema
    entities: list[EntitySchema]
    events: list[EventSchema] = Field(default_factory=list)


# --- Map ---

class MapResponse(BaseModel):
    width: int
    height: int
    cell_size: float
    battle_start_row: int
    battle_rows: int
    grid: list[int]     # RLE: [value, count, value, count, ...]


# --- Control ---

class ControlResponse(BaseModel):
    status: str
    message: str
    tick: int = 0
    running: bool = False
    paused: bool = False


# --- Placement ---

class PlaceDefenderRequest(BaseModel):
    kind: str = Field(..., description="Defender archetype name, e.g. 'rocket_tower'")
    col: int = Field(..., ge=0)
    row: int = Field(..., ge=0)


class DefenderActionResponse(BaseModel):
    status: str
    message: str
    id: int | None = None
    gold: int | None = None


# --- Config ---

class ArchetypeSchema(BaseModel):
    kind: str
    side: str
    hp: float
    attack_range_cells: float
    fire_interval_ms: float
    damage: float
    move_speed: float = 0.0
    reward: int = 0
    cost: int = 0
    upgrade_cost: int = 0
    sell_gain: int = 0


class SimulationConfigResponse(BaseModel):
    world_seed: int
    grid_width: int
    grid_height: int
    battle_start_row: int
    battle_rows: int
    cell_size: float
    battlefield_width: float
    lock_grace_ms: float
    stuck_retreat_threshold_sec: float
    wave_duration_ms: float
    base_spawn_interval_ms: float
    min_spawn_interval_ms: float
    spawn_interval_reduction: float
    initial_gold: int
    max_defender_level: int
    archetypes: list[ArchetypeSchema]
    tick_rate: float


# --- Stats ---

class SimulationStats(BaseModel):
    tick: int
    wave_level: int
    attackers: int
    defenders: int
    total_spawned: int
    total_killed: int
    total_escaped: int
    defenders_lost: int
    gold: int | None = None
    running: bool
    paused: bool
    last_tick_ms: float = 0.0
    event_totals: dict[str, int] = Field(default_factory=dict)

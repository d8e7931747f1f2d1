"""GET /api/v1/state, /events, /stats: live data polled by the UI."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from lanedefense.api.dependencies import get_engine_manager
from lanedefense.api.engine_manager import EngineManager
from lanedefense.api.schemas import (
    CellSchema,
    EntitySchema,
    EventSchema,
    SimulationStats,
    WaveSchema,
    WorldStateResponse,
)
from lanedefense.core.enums import Side
from lanedefense.core.snapshot import EntityView
from lanedefense.utils.event_log import SimEvent

router = APIRouter()


def _serialize_entity(e: EntityView) -> EntitySchema:
    return EntitySchema(
        id=e.id,
        side=e.side.name.lower(),
        kind=e.kind.name.lower(),
        col=e.col,
        row=e.row,
        x=e.x,
        y=e.y,
        hp=e.hp,
        max_hp=e.max_hp,
        hp_ratio=e.hp_ratio,
        level=e.level,
        heading_deg=e.heading_deg,
        target_id=e.target_id,
        lock_state=e.lock_state.name.lower(),
        move_state=e.move_state.name.lower() if e.move_state is not None else None,
        route=[CellSchema(col=c.col, row=c.row) for c in e.route],
    )


def _serialize_event(ev: SimEvent) -> EventSchema:
    return EventSchema(
        tick=ev.tick,
        category=ev.category,
        message=ev.message,
        entity_ids=list(ev.entity_ids),
        metadata=dict(ev.metadata),
    )


@router.get("/state", response_model=WorldStateResponse)
def get_state(
    since_tick: int = Query(0, ge=0, description="Only include events from this tick onward"),
    manager: EngineManager = Depends(get_engine_manager),
) -> WorldStateResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="Simulation not initialized yet.")

    return WorldStateResponse(
        tick=snapshot.tick,
        elapsed_ms=snapshot.elapsed_ms,
        gold=snapshot.gold,
        wave=WaveSchema(
            level=snapshot.wave_level,
            wave_timer_ms=snapshot.wave_timer_ms,
            spawn_interval_ms=snapshot.spawn_interval_ms,
            hp_bonus=snapshot.hp_bonus,
        ),
        entities=[_serialize_entity(e) for e in snapshot.entities],
        events=[_serialize_event(ev) for ev in manager.event_log.since_tick(since_tick)],
    )


@router.get("/events", response_model=list[EventSchema])
def get_events(
    since_tick: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=5000),
    category: list[str] | None = Query(None, description="Repeat to select several categories"),
    manager: EngineManager = Depends(get_engine_manager),
) -> list[EventSchema]:
    events = manager.event_log.since_tick(since_tick, categories=category)
    return [_serialize_event(ev) for ev in events[-limit:]]


@router.get("/stats", response_model=SimulationStats)
def get_stats(
    manager: EngineManager = Depends(get_engine_manager),
) -> SimulationStats:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="Simulation not initialized yet.")

    return SimulationStats(
        tick=snapshot.tick,
        wave_level=snapshot.wave_level,
        attackers=len(snapshot.of_side(Side.ATTACKER)),
        defenders=len(snapshot.of_side(Side.DEFENDER)),
        total_spawned=snapshot.total_spawned,
        total_killed=snapshot.total_killed,
        total_escaped=snapshot.total_escaped,
        defenders_lost=snapshot.defenders_lost,
        gold=snapshot.gold,
        running=manager.running,
        paused=manager.paused,
        last_tick_ms=manager.last_tick_ms,
        event_totals=manager.event_log.totals(),
    )

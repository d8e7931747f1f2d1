"""Defender placement: place, upgrade, sell."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from lanedefense.api.dependencies import get_engine_manager
from lanedefense.api.engine_manager import EngineManager
from lanedefense.api.schemas import DefenderActionResponse, PlaceDefenderRequest
from lanedefense.core.enums import Archetype, Side

router = APIRouter()


def _parse_kind(name: str, manager: EngineManager) -> Archetype:
    try:
        kind = Archetype[name.strip().upper()]
    except KeyError:
        raise HTTPException(status_code=422, detail=f"Unknown archetype {name!r}.") from None
    if manager.config.archetype(kind).side is not Side.DEFENDER:
        raise HTTPException(status_code=422, detail=f"{name!r} is not a defender archetype.")
    return kind


def _gold(manager: EngineManager) -> int | None:
    snapshot = manager.get_snapshot()
    return snapshot.gold if snapshot else None


@router.post("/defenders", response_model=DefenderActionResponse, status_code=201)
def place_defender(
    body: PlaceDefenderRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> DefenderActionResponse:
    kind = _parse_kind(body.kind, manager)
    entity = manager.place_defender(kind, body.col, body.row)
    if entity is None:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot place {kind.name.lower()} at ({body.col}, {body.row}).",
        )
    return DefenderActionResponse(
        status="ok", message=f"{kind.name.lower()} placed.",
        id=entity.handle.key, gold=_gold(manager),
    )


@router.post("/defenders/{defender_id}/upgrade", response_model=DefenderActionResponse)
def upgrade_defender(
    defender_id: int,
    manager: EngineManager = Depends(get_engine_manager),
) -> DefenderActionResponse:
    if not manager.upgrade_defender(defender_id):
        raise HTTPException(status_code=409, detail=f"Cannot upgrade defender {defender_id}.")
    return DefenderActionResponse(status="ok", message="Upgraded.", id=defender_id, gold=_gold(manager))


@router.delete("/defenders/{defender_id}", response_model=DefenderActionResponse)
def sell_defender(
    defender_id: int,
    manager: EngineManager = Depends(get_engine_manager),
) -> DefenderActionResponse:
    if not manager.sell_defender(defender_id):
        raise HTTPException(status_code=404, detail=f"No defender {defender_id}.")
    return DefenderActionResponse(status="ok", message="Sold.", id=defender_id, gold=_gold(manager))

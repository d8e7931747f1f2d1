"""GET /api/v1/map: walkability grid (refetch after placements)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from lanedefense.api.dependencies import get_engine_manager
from lanedefense.api.engine_manager import EngineManager
from lanedefense.api.schemas import MapResponse

router = APIRouter()


def rle_encode(values: tuple[bool, ...] | list[bool]) -> list[int]:
    """Run-length encode as ``[value, count, value, count, ...]``."""
    rle: list[int] = []
    if not values:
        return rle
    cur_val = int(values[0])
    cur_count = 1
    for v in values[1:]:
        v = int(v)
        if v == cur_val:
            cur_count += 1
        else:
            rle.append(cur_val)
            rle.append(cur_count)
            cur_val = v
            cur_count = 1
    rle.append(cur_val)
    rle.append(cur_count)
    return rle


@router.get("/map", response_model=MapResponse)
def get_map(manager: EngineManager = Depends(get_engine_manager)) -> MapResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="Simulation not initialized yet.")

    cfg = manager.config
    return MapResponse(
        width=snapshot.grid_width,
        height=snapshot.grid_height,
        cell_size=cfg.cell_size,
        battle_start_row=cfg.battle_start_row,
        battle_rows=cfg.battle_rows,
        grid=rle_encode(snapshot.walkable),
    )

"""Lifecycle controls: POST /api/v1/control/{action} and /speed."""

from __future__ import annotations

from enum import Enum

from fastapi import APIRouter, Depends, Query

from lanedefense.api.dependencies import get_engine_manager
from lanedefense.api.engine_manager import MAX_TICK_RATE, MIN_TICK_RATE, EngineManager
from lanedefense.api.schemas import ControlResponse

router = APIRouter()


class ControlAction(str, Enum):
    start = "start"
    pause = "pause"
    resume = "resume"
    step = "step"
    reset = "reset"


def _reply(manager: EngineManager, message: str, status: str = "ok") -> ControlResponse:
    snapshot = manager.get_snapshot()
    return ControlResponse(
        status=status,
        message=message,
        tick=snapshot.tick if snapshot else 0,
        running=manager.running,
        paused=manager.paused,
    )


@router.post("/control/{action}", response_model=ControlResponse)
def control(
    action: ControlAction,
    count: int = Query(1, ge=1, le=500, description="Ticks to run for 'step' while stopped"),
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    match action:
        case ControlAction.start:
            if manager.running:
                return _reply(manager, "Already running.", status="noop")
            manager.start()
            return _reply(manager, "Simulation started.")

        case ControlAction.pause | ControlAction.resume if not manager.running:
            return _reply(manager, "Not running.", status="error")

        case ControlAction.pause:
            manager.pause()
            return _reply(manager, "Simulation paused.")

        case ControlAction.resume:
            manager.resume()
            return _reply(manager, "Simulation resumed.")

        case ControlAction.step if manager.running:
            # The engine thread owns ticking; it picks the request up between ticks
            manager.step()
            return _reply(manager, "Single tick queued.")

        case ControlAction.step:
            for _ in range(count):
                manager.tick_now()
            return _reply(manager, f"{count} tick(s) executed.")

        case ControlAction.reset:
            manager.reset()
            return _reply(manager, "Simulation reset.")


@router.post("/speed", response_model=ControlResponse)
def set_speed(
    tps: float = Query(
        20.0, ge=1.0 / MAX_TICK_RATE, le=1.0 / MIN_TICK_RATE, description="Ticks per second",
    ),
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    manager.tick_rate = 1.0 / tps
    return _reply(manager, f"Speed set to {tps:.1f} tps (dt={manager.tick_rate:.3f}s).")

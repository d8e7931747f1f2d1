"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lanedefense.api.dependencies import set_engine_manager
from lanedefense.api.engine_manager import EngineManager
from lanedefense.api.routes import api_router
from lanedefense.config import SimulationConfig
from lanedefense.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: SimulationConfig | None = None, autostart: bool = True) -> FastAPI:
    """Build and return the fully-configured FastAPI application.

    With ``autostart=False`` the simulation is built but left stopped, so
    it only advances through ``POST /control/step`` (handy for tests).
    """
    if config is None:
        config = SimulationConfig()

    _config = config.validate()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        manager = EngineManager(_config)
        set_engine_manager(manager)
        if autostart:
            manager.start()
            logger.info("API server started, simulation running.")
        yield
        manager.stop()
        set_engine_manager(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Lane Defense Simulation",
        description=(
            "Tick-driven lane defense simulation core.\n\n"
            "## API Groups\n\n"
            "- **State**: live entities, wave, counters, events\n"
            "- **Map**: walkability grid of the battlefield\n"
            "- **Control**: start, pause, resume, step, reset, speed\n"
            "- **Defenders**: place, upgrade, sell\n"
            "- **Config**: read-only simulation configuration\n"
        ),
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Live simulation state polled by the frontend."},
            {"name": "Map", "description": "Walkability grid, RLE-encoded. Changes when defenders are placed or lost."},
            {"name": "Control", "description": "Simulation lifecycle controls: start, pause, resume, single-step, reset."},
            {"name": "Defenders", "description": "Placement requests, applied between ticks."},
            {"name": "Config", "description": "Read-only configuration: grid, waves, archetypes."},
        ],
    )

    # CORS: allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app

"""
app.py: FastAPI application factory.

This is the ASGI application object imported by uvicorn.
It wires the allocation engine and registers the router.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from training_scheduler.controllers.allocation_controller import router as allocation_router
from training_scheduler.services.allocation_service import SessionAllocationEngine
from training_scheduler.utils.config import Settings, get_settings
from training_scheduler.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    The engine holds only settings and the transition table, so a single
    instance on app.state serves every request without locking.
    """
    resolved_settings = settings or get_settings()
    allocation_engine = SessionAllocationEngine(settings=resolved_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Startup complete | app=%s | version=%s | day_start=%s",
            resolved_settings.app_name,
            resolved_settings.app_version,
            resolved_settings.schedule_day_start,
        )
        yield

    app = FastAPI(
        title=resolved_settings.app_name,
        version=resolved_settings.app_version,
        lifespan=lifespan,
    )
    app.include_router(allocation_router)
    app.state.allocation_engine = allocation_engine
    return app


# Module-level app object for uvicorn
app = create_app()

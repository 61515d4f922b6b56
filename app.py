"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the repository and services, registers routers, and runs startup
initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from backend.controllers.analytics_controller import router as analytics_router
from backend.controllers.booking_controller import router as booking_router
from backend.repository.data_repository import DataRepository
from backend.services.analytics_service import RoomAnalyticsService
from backend.services.forecast_service import RoomForecastService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, *, seed: bool = True) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every dependency is created here and exposed through app.state.
    """
    settings = settings or get_settings()

    # --- Repository (SQLite connection factory) ---
    repository = DataRepository(settings)

    # --- Services (no direct DB access in the forecasting code) ---
    forecast_service = RoomForecastService(settings=settings)
    analytics_service = RoomAnalyticsService(
        repository=repository,
        forecast_service=forecast_service,
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app, seed=seed)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(booking_router)
    app.include_router(analytics_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.repository = repository
    app.state.forecast_service = forecast_service
    app.state.analytics_service = analytics_service

    return app


def _startup(app: FastAPI, *, seed: bool = True) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Order matters:
      1. Schema must exist before seeding.
      2. Seeding is skipped when rooms already exist.
    """
    repository: DataRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if seed:
        logger.info("Startup: seeding synthetic rooms and bookings")
        repository.seed_synthetic_data()

    logger.info("Startup complete, system ready")


# Module-level app object for uvicorn
app = create_app()

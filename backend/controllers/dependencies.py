"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from backend.services.analytics_service import RoomAnalyticsService
from backend.services.forecast_service import RoomForecastService
from backend.utils.config import get_settings


def get_forecast_service(request: Request) -> RoomForecastService:
    service = getattr(request.app.state, "forecast_service", None)
    if service is None:
        service = RoomForecastService(settings=get_settings())
        request.app.state.forecast_service = service
    return service


def get_analytics_service(request: Request) -> RoomAnalyticsService:
    service = getattr(request.app.state, "analytics_service", None)
    if service is None:
        repository = getattr(request.app.state, "repository", None)
        if repository is not None:
            service = RoomAnalyticsService(
                repository=repository,
                forecast_service=get_forecast_service(request),
                settings=get_settings(),
            )
            request.app.state.analytics_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analytics service is not initialized",
        )
    return service

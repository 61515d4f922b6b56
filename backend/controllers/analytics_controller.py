"""HTTP controller layer for booking analytics and forecasts."""

from __future__ import annotations

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from backend.controllers.dependencies import get_analytics_service, get_forecast_service
from backend.domain.constraints import ForecastConfigurationError
from backend.domain.models import RoomForecast, SeriesValidationError, TimeSeries
from backend.services.analytics_service import (
    DateRangeValidationError,
    RoomAnalyticsService,
    RoomNotFoundError,
)
from backend.services.forecast_service import ForecastComputationError, RoomForecastService
from backend.services.pricing import PricingValidationError
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["analytics"])


class BookingCountRow(BaseModel):
    date: datetime.date
    count: int = Field(ge=0)
    time_index: int = Field(ge=0)


class GuestRecordRow(BaseModel):
    guest_name: str
    date: datetime.date


class RoomAnalyticsRow(BaseModel):
    room_id: int = Field(gt=0)
    name: str
    price: float = Field(gt=0.0)
    bookings_over_time: list[BookingCountRow]
    guest_records: list[GuestRecordRow]


class AnalyticsResponse(BaseModel):
    analytics: list[RoomAnalyticsRow]


class SeriesPointRequest(BaseModel):
    date: datetime.date
    count: int = Field(ge=0)


class ForecastRequest(BaseModel):
    """Raw series plus pricing inputs; options left empty use server defaults."""

    series: list[SeriesPointRequest]
    price: float = Field(gt=0.0)
    total_bookings: Optional[int] = Field(default=None, ge=0)
    trendline_degree: Optional[int] = None
    window_size: Optional[int] = None
    alpha: Optional[float] = None


class ForecastPointResponse(BaseModel):
    index: int = Field(ge=0)
    date: Optional[datetime.date] = None
    actual: Optional[float] = None
    moving_average: Optional[float] = None
    exp_smooth: Optional[float] = None
    regression: Optional[float] = None


class NextPeriodResponse(BaseModel):
    date: Optional[datetime.date] = None
    moving_average: float
    exp_smooth: Optional[float] = None
    regression: float


class RegressionModelResponse(BaseModel):
    degree: int = Field(ge=1, le=3)
    coefficients: list[float]


class TrendlinePointResponse(BaseModel):
    x: int = Field(ge=0)
    y: float


class TrendlineResponse(BaseModel):
    requested_degree: int = Field(ge=1, le=3)
    model: RegressionModelResponse
    used_fallback: bool
    points: list[TrendlinePointResponse]
    r_squared: float = Field(ge=0.0, le=1.0)


class DemandResponse(BaseModel):
    tier: str
    price_multiplier: float = Field(gt=0.0)
    recommendation: str
    avg_bookings: float = Field(ge=0.0)
    base_price: float = Field(gt=0.0)
    optimal_price: float = Field(gt=0.0)


class SummaryResponse(BaseModel):
    total_bookings: int = Field(ge=0)
    total_sales: float = Field(ge=0.0)
    days_observed: int = Field(ge=0)
    avg_daily_bookings: float = Field(ge=0.0)


class RoomForecastResponse(BaseModel):
    room_id: Optional[int] = None
    room_name: Optional[str] = None
    window_size: int = Field(ge=1)
    alpha: float = Field(gt=0.0, lt=1.0)
    points: list[ForecastPointResponse]
    next_period: Optional[NextPeriodResponse] = None
    smoothed_levels: list[float]
    trendline: TrendlineResponse
    demand: DemandResponse
    summary: SummaryResponse


class RoomForecastListResponse(BaseModel):
    forecasts: list[RoomForecastResponse]


def _to_response(forecast: RoomForecast) -> RoomForecastResponse:
    return RoomForecastResponse(**forecast.to_dict())


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/analytics", response_model=AnalyticsResponse, status_code=status.HTTP_200_OK)
async def get_analytics(
    service: RoomAnalyticsService = Depends(get_analytics_service),
) -> AnalyticsResponse:
    try:
        return AnalyticsResponse(analytics=service.get_room_analytics())
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected analytics failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch analytics",
        ) from exc


@router.get(
    "/analytics/forecast",
    response_model=RoomForecastListResponse,
    status_code=status.HTTP_200_OK,
)
async def forecast_all_rooms(
    trendline_degree: Optional[int] = Query(default=None),
    window_size: Optional[int] = Query(default=None),
    alpha: Optional[float] = Query(default=None),
    start: Optional[datetime.date] = Query(default=None),
    end: Optional[datetime.date] = Query(default=None),
    service: RoomAnalyticsService = Depends(get_analytics_service),
) -> RoomForecastListResponse:
    try:
        forecasts = service.forecast_all_rooms(
            trendline_degree=trendline_degree,
            window_size=window_size,
            alpha=alpha,
            start=start,
            end=end,
        )
        return RoomForecastListResponse(forecasts=[_to_response(item) for item in forecasts])
    except (ForecastConfigurationError, PricingValidationError, DateRangeValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ForecastComputationError as exc:
        logger.exception("Forecast produced non-finite output")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected forecast failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute forecasts",
        ) from exc


@router.get(
    "/analytics/{room_id}/forecast",
    response_model=RoomForecastResponse,
    status_code=status.HTTP_200_OK,
)
async def forecast_room(
    room_id: int,
    trendline_degree: Optional[int] = Query(default=None),
    window_size: Optional[int] = Query(default=None),
    alpha: Optional[float] = Query(default=None),
    start: Optional[datetime.date] = Query(default=None),
    end: Optional[datetime.date] = Query(default=None),
    service: RoomAnalyticsService = Depends(get_analytics_service),
) -> RoomForecastResponse:
    try:
        forecast = service.forecast_room(
            room_id,
            trendline_degree=trendline_degree,
            window_size=window_size,
            alpha=alpha,
            start=start,
            end=end,
        )
        return _to_response(forecast)
    except (ForecastConfigurationError, PricingValidationError, DateRangeValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ForecastComputationError as exc:
        logger.exception("Forecast produced non-finite output")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected forecast failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute forecast",
        ) from exc


@router.post("/forecast", response_model=RoomForecastResponse, status_code=status.HTTP_200_OK)
async def forecast_series(
    payload: ForecastRequest,
    service: RoomForecastService = Depends(get_forecast_service),
) -> RoomForecastResponse:
    """Forecast an arbitrary series without touching persisted bookings."""
    try:
        series = TimeSeries.from_records(
            {"date": point.date, "count": point.count} for point in payload.series
        )
        forecast = service.build_forecast(
            series,
            payload.price,
            total_bookings=payload.total_bookings,
            trendline_degree=payload.trendline_degree,
            window_size=payload.window_size,
            alpha=payload.alpha,
        )
        return _to_response(forecast)
    except (
        SeriesValidationError,
        ForecastConfigurationError,
        PricingValidationError,
    ) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ForecastComputationError as exc:
        logger.exception("Forecast produced non-finite output")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected forecast failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute forecast",
        ) from exc

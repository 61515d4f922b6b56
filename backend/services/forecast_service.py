"""Per-room forecast assembly over a booking-count series."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from backend.domain.constraints import ForecastConfig, validate_forecast_config
from backend.domain.models import (
    ForecastPoint,
    NextPeriodForecast,
    RoomForecast,
    TimeSeries,
    TrendlineFit,
    TrendlinePoint,
)
from backend.services.pricing import average_bookings, classify_demand, summarize_bookings
from backend.services.regression import fit_linear, fit_trendline, r_squared
from backend.services.smoothing import (
    exponential_smoothing,
    moving_average,
    moving_average_forecast,
)
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class ForecastComputationError(Exception):
    """Raised when a computed forecast value is not a finite number."""


def _ensure_finite(label: str, values: Iterable[Optional[float]]) -> None:
    for value in values:
        if value is not None and not math.isfinite(value):
            raise ForecastComputationError(f"{label} produced a non-finite value: {value!r}")


class RoomForecastService:
    """Stateless composition of the smoothing, regression and pricing steps."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def resolve_config(
        self,
        *,
        trendline_degree: Optional[int] = None,
        window_size: Optional[int] = None,
        alpha: Optional[float] = None,
    ) -> ForecastConfig:
        """Fill omitted options from settings and reject malformed ones."""
        config = ForecastConfig(
            window_size=self._settings.forecast_window_size if window_size is None else window_size,
            alpha=self._settings.forecast_alpha if alpha is None else alpha,
            trendline_degree=(
                self._settings.forecast_trendline_degree
                if trendline_degree is None
                else trendline_degree
            ),
        )
        validate_forecast_config(config)
        return config

    def _build_trendline(self, counts: list[int], degree: int) -> TrendlineFit:
        model = fit_trendline(counts, degree)
        fitted = model.evaluate_many(range(len(counts)))
        return TrendlineFit(
            requested_degree=degree,
            model=model,
            points=tuple(TrendlinePoint(x=x, y=y) for x, y in enumerate(fitted)),
            r_squared=r_squared(counts, fitted),
        )

    def build_forecast(
        self,
        series: TimeSeries,
        price: float,
        *,
        total_bookings: Optional[int] = None,
        trendline_degree: Optional[int] = None,
        window_size: Optional[int] = None,
        alpha: Optional[float] = None,
        room_id: Optional[int] = None,
        room_name: Optional[str] = None,
    ) -> RoomForecast:
        config = self.resolve_config(
            trendline_degree=trendline_degree,
            window_size=window_size,
            alpha=alpha,
        )
        counts = series.counts
        n = len(counts)
        if total_bookings is None:
            total_bookings = sum(counts)

        averaged = moving_average(counts, config.window_size)
        smoothed = exponential_smoothing(counts, config.alpha)
        linear_model = fit_linear(counts)
        linear_fit = linear_model.evaluate_many(range(n))

        points = [
            ForecastPoint(
                index=index,
                date=point.date,
                actual=float(point.count),
                moving_average=averaged[index],
                exp_smooth=smoothed[index],
                regression=linear_fit[index],
            )
            for index, point in enumerate(series.points)
        ]

        next_period: Optional[NextPeriodForecast] = None
        if n > 0:
            next_period = NextPeriodForecast(
                date=series.next_date(),
                moving_average=moving_average_forecast(counts, config.window_size),
                exp_smooth=smoothed[n],
                regression=linear_model.evaluate(n),
            )
            points.append(
                ForecastPoint(
                    index=n,
                    date=next_period.date,
                    actual=None,
                    moving_average=next_period.moving_average,
                    exp_smooth=next_period.exp_smooth,
                    regression=next_period.regression,
                )
            )

        trendline = self._build_trendline(counts, config.trendline_degree)
        demand = classify_demand(average_bookings(total_bookings, n), price)
        summary = summarize_bookings(total_bookings, n, price)

        for point in points:
            _ensure_finite(
                "forecast series",
                (point.moving_average, point.exp_smooth, point.regression),
            )
        _ensure_finite("trendline", (point.y for point in trendline.points))
        _ensure_finite("trendline coefficients", trendline.model.coefficients)
        _ensure_finite("pricing", (demand.optimal_price, trendline.r_squared))
        _ensure_finite("summary", (summary.total_sales, summary.avg_daily_bookings))

        logger.info(
            (
                "Forecast completed | room_id=%s | points=%s | window=%s | alpha=%.3f | "
                "degree=%s | fitted_degree=%s | r_squared=%.6f | tier=%s"
            ),
            room_id,
            n,
            config.window_size,
            config.alpha,
            config.trendline_degree,
            trendline.model.degree,
            trendline.r_squared,
            demand.tier.value,
        )

        return RoomForecast(
            points=tuple(points),
            next_period=next_period,
            trendline=trendline,
            demand=demand,
            summary=summary,
            window_size=config.window_size,
            alpha=config.alpha,
            room_id=room_id,
            room_name=room_name,
            smoothed_levels=tuple(smoothed),
        )

"""Domain models for room demand forecasting and pricing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Iterable, Mapping, Optional


class SeriesValidationError(ValueError):
    """Raised when a booking-count series violates its ordering or value rules."""


@dataclass(frozen=True)
class TimeSeriesPoint:
    date: date
    count: int


@dataclass(frozen=True)
class TimeSeries:
    """Chronologically ordered daily booking counts for one room."""

    points: tuple[TimeSeriesPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    @property
    def counts(self) -> list[int]:
        return [point.count for point in self.points]

    @property
    def dates(self) -> list[date]:
        return [point.date for point in self.points]

    @property
    def last_date(self) -> Optional[date]:
        if not self.points:
            return None
        return self.points[-1].date

    def next_date(self) -> Optional[date]:
        last = self.last_date
        if last is None:
            return None
        return last + timedelta(days=1)

    def between(self, start: Optional[date] = None, end: Optional[date] = None) -> "TimeSeries":
        """Points with ``start <= date <= end``; an open bound is unbounded."""
        return TimeSeries(
            points=tuple(
                point
                for point in self.points
                if (start is None or point.date >= start) and (end is None or point.date <= end)
            )
        )

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "TimeSeries":
        """Build a validated series from ``{"date": ..., "count": ...}`` mappings."""
        points: list[TimeSeriesPoint] = []
        previous: Optional[date] = None
        for record in records:
            raw_date = record.get("date")
            if isinstance(raw_date, datetime):
                point_date = raw_date.date()
            elif isinstance(raw_date, date):
                point_date = raw_date
            else:
                try:
                    point_date = date.fromisoformat(str(raw_date))
                except ValueError as exc:
                    raise SeriesValidationError(
                        f"date must follow YYYY-MM-DD format, got {raw_date!r}"
                    ) from exc

            count = record.get("count")
            if isinstance(count, bool) or not isinstance(count, int):
                raise SeriesValidationError(f"count must be an integer, got {count!r}")
            if count < 0:
                raise SeriesValidationError("count must be >= 0")
            if previous is not None and point_date <= previous:
                raise SeriesValidationError(
                    "series dates must be strictly increasing and unique"
                )
            points.append(TimeSeriesPoint(date=point_date, count=count))
            previous = point_date
        return cls(points=tuple(points))


@dataclass(frozen=True)
class ForecastPoint:
    index: int
    date: Optional[date]
    actual: Optional[float]
    moving_average: Optional[float]
    exp_smooth: Optional[float]
    regression: Optional[float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "date": self.date.isoformat() if self.date is not None else None,
            "actual": self.actual,
            "moving_average": self.moving_average,
            "exp_smooth": self.exp_smooth,
            "regression": self.regression,
        }


@dataclass(frozen=True)
class NextPeriodForecast:
    date: Optional[date]
    moving_average: float
    exp_smooth: Optional[float]
    regression: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat() if self.date is not None else None,
            "moving_average": self.moving_average,
            "exp_smooth": self.exp_smooth,
            "regression": self.regression,
        }


@dataclass(frozen=True)
class RegressionModel:
    """Polynomial in the time index, coefficients lowest order first."""

    degree: int
    coefficients: tuple[float, ...]

    def evaluate(self, x: float) -> float:
        # Horner's rule
        result = 0.0
        for coefficient in reversed(self.coefficients):
            result = result * x + coefficient
        return float(result)

    def evaluate_many(self, xs: Iterable[float]) -> list[float]:
        return [self.evaluate(x) for x in xs]

    def to_dict(self) -> dict[str, Any]:
        return {"degree": self.degree, "coefficients": list(self.coefficients)}


@dataclass(frozen=True)
class TrendlinePoint:
    x: int
    y: float


@dataclass(frozen=True)
class TrendlineFit:
    requested_degree: int
    model: RegressionModel
    points: tuple[TrendlinePoint, ...]
    r_squared: float

    @property
    def used_fallback(self) -> bool:
        return self.model.degree != self.requested_degree

    def to_dict(self) -> dict[str, Any]:
        return {
            "requested_degree": self.requested_degree,
            "model": self.model.to_dict(),
            "used_fallback": self.used_fallback,
            "points": [{"x": point.x, "y": point.y} for point in self.points],
            "r_squared": self.r_squared,
        }


class DemandTier(str, Enum):
    LOW = "Low"
    STABLE = "Stable"
    HIGH = "High"


@dataclass(frozen=True)
class DemandClassification:
    tier: DemandTier
    price_multiplier: float
    recommendation: str
    avg_bookings: float
    base_price: float
    optimal_price: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier.value,
            "price_multiplier": self.price_multiplier,
            "recommendation": self.recommendation,
            "avg_bookings": self.avg_bookings,
            "base_price": self.base_price,
            "optimal_price": self.optimal_price,
        }


@dataclass(frozen=True)
class DescriptiveSummary:
    total_bookings: int
    total_sales: float
    days_observed: int
    avg_daily_bookings: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_bookings": self.total_bookings,
            "total_sales": self.total_sales,
            "days_observed": self.days_observed,
            "avg_daily_bookings": self.avg_daily_bookings,
        }


@dataclass(frozen=True)
class RoomForecast:
    """Everything the presentation layer needs for one room."""

    points: tuple[ForecastPoint, ...]
    next_period: Optional[NextPeriodForecast]
    trendline: TrendlineFit
    demand: DemandClassification
    summary: DescriptiveSummary
    window_size: int
    alpha: float
    room_id: Optional[int] = None
    room_name: Optional[str] = None
    smoothed_levels: tuple[float, ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        return {
            "room_id": self.room_id,
            "room_name": self.room_name,
            "window_size": self.window_size,
            "alpha": self.alpha,
            "points": [point.to_dict() for point in self.points],
            "next_period": self.next_period.to_dict() if self.next_period is not None else None,
            "smoothed_levels": list(self.smoothed_levels),
            "trendline": self.trendline.to_dict(),
            "demand": self.demand.to_dict(),
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class Room:
    room_id: int
    name: str
    description: Optional[str]
    price: float


@dataclass(frozen=True)
class Booking:
    booking_id: int
    room_id: int
    guest_name: str
    created_at: str


@dataclass(frozen=True)
class GuestRecord:
    guest_name: str
    date: str

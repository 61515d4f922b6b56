from __future__ import annotations

import json
from dataclasses import replace
from datetime import date

import pytest

from backend.domain.constraints import ForecastConfigurationError
from backend.domain.models import DemandTier, SeriesValidationError, TimeSeries
from backend.services.forecast_service import ForecastComputationError, RoomForecastService
from backend.utils.config import get_settings


def _series(counts: list[int], start: str = "2025-10-25") -> TimeSeries:
    first = date.fromisoformat(start).toordinal()
    return TimeSeries.from_records(
        {"date": date.fromordinal(first + offset).isoformat(), "count": count}
        for offset, count in enumerate(counts)
    )


def _service(**overrides) -> RoomForecastService:
    return RoomForecastService(settings=replace(get_settings(), **overrides))


def test_forecast_golden_series() -> None:
    service = _service()

    forecast = service.build_forecast(_series([2, 4, 6]), price=1200.0)

    assert len(forecast.points) == 4
    assert [point.actual for point in forecast.points[:3]] == [2.0, 4.0, 6.0]
    assert forecast.points[0].moving_average is None
    assert forecast.points[1].moving_average is None
    assert forecast.points[2].moving_average == pytest.approx(4.0)
    assert [point.exp_smooth for point in forecast.points] == pytest.approx([2.0, 2.0, 2.6, 3.62])
    assert [point.regression for point in forecast.points] == pytest.approx([2.0, 4.0, 6.0, 8.0])

    next_point = forecast.points[-1]
    assert next_point.actual is None
    assert next_point.index == 3
    assert next_point.date == date(2025, 10, 28)
    assert forecast.next_period is not None
    assert forecast.next_period.moving_average == pytest.approx(4.0)
    assert forecast.next_period.exp_smooth == pytest.approx(3.62)
    assert forecast.next_period.regression == pytest.approx(8.0)

    assert forecast.trendline.r_squared == pytest.approx(1.0)
    assert forecast.demand.tier is DemandTier.STABLE
    assert forecast.summary.total_bookings == 12


def test_constant_series_is_flat_everywhere() -> None:
    service = _service()

    forecast = service.build_forecast(
        _series([5, 5, 5, 5, 5]),
        price=2000.0,
        trendline_degree=2,
    )

    assert forecast.next_period is not None
    assert forecast.next_period.moving_average == pytest.approx(5.0)
    assert forecast.next_period.exp_smooth == pytest.approx(5.0)
    assert forecast.next_period.regression == pytest.approx(5.0)
    assert [point.y for point in forecast.trendline.points] == pytest.approx([5.0] * 5, abs=1e-9)
    assert forecast.trendline.r_squared == 1.0
    assert forecast.demand.tier is DemandTier.HIGH
    assert forecast.demand.optimal_price == pytest.approx(2200.0)


def test_cubic_trendline_is_really_cubic() -> None:
    counts = [4, 3, 2, 4, 12, 29, 58, 102]

    forecast = _service().build_forecast(_series(counts), price=1000.0, trendline_degree=3)

    assert forecast.trendline.requested_degree == 3
    assert forecast.trendline.model.degree == 3
    assert forecast.trendline.used_fallback is False
    assert len(forecast.trendline.model.coefficients) == 4


def test_short_series_reports_fallback_trendline() -> None:
    forecast = _service().build_forecast(_series([3, 1]), price=1000.0, trendline_degree=2)

    assert forecast.trendline.model.degree == 1
    assert forecast.trendline.used_fallback is True
    assert [point.y for point in forecast.trendline.points] == pytest.approx([3.0, 1.0])


def test_single_point_series() -> None:
    forecast = _service().build_forecast(_series([4]), price=1000.0)

    assert len(forecast.points) == 2
    assert forecast.points[0].moving_average is None
    assert forecast.next_period is not None
    assert forecast.next_period.moving_average == pytest.approx(4.0)
    assert forecast.next_period.regression == pytest.approx(4.0)
    assert forecast.trendline.r_squared == 0.0


def test_empty_series_has_no_forecast_points() -> None:
    forecast = _service().build_forecast(TimeSeries(), price=1500.0)

    assert forecast.points == ()
    assert forecast.next_period is None
    assert forecast.trendline.points == ()
    assert forecast.trendline.r_squared == 0.0
    assert forecast.demand.tier is DemandTier.LOW
    assert forecast.demand.avg_bookings == 0.0
    assert forecast.summary.days_observed == 0


def test_total_bookings_override_drives_classification() -> None:
    forecast = _service().build_forecast(
        _series([1, 1, 1]),
        price=1000.0,
        total_bookings=15,
    )

    assert forecast.demand.avg_bookings == pytest.approx(5.0)
    assert forecast.demand.tier is DemandTier.HIGH
    assert forecast.summary.total_sales == 15000.0


def test_settings_provide_defaults() -> None:
    service = _service(forecast_window_size=2, forecast_alpha=0.5, forecast_trendline_degree=2)

    forecast = service.build_forecast(_series([2, 4, 6, 8]), price=1000.0)

    assert forecast.window_size == 2
    assert forecast.alpha == 0.5
    assert forecast.trendline.requested_degree == 2
    assert forecast.points[1].moving_average == pytest.approx(3.0)


@pytest.mark.parametrize(
    "overrides",
    [
        {"window_size": 0},
        {"window_size": -3},
        {"alpha": 0.0},
        {"alpha": 1.0},
        {"trendline_degree": 4},
        {"trendline_degree": 0},
    ],
)
def test_invalid_configuration_is_rejected(overrides: dict) -> None:
    with pytest.raises(ForecastConfigurationError):
        _service().build_forecast(_series([1, 2, 3]), price=1000.0, **overrides)


def test_invalid_settings_defaults_are_rejected_not_substituted() -> None:
    service = _service(forecast_alpha=1.5)

    with pytest.raises(ForecastConfigurationError):
        service.build_forecast(_series([1, 2, 3]), price=1000.0)


def test_forecast_is_deterministic_and_json_ready() -> None:
    service = _service()
    series = _series([3, 7, 2, 9, 4, 6])

    first = service.build_forecast(series, price=1800.0, trendline_degree=3)
    second = service.build_forecast(series, price=1800.0, trendline_degree=3)

    assert first == second
    payload = json.loads(json.dumps(first.to_dict()))
    assert payload["points"][-1]["actual"] is None
    assert payload["points"][-1]["date"] == "2025-10-31"
    assert payload["demand"]["tier"] in {"Low", "Stable", "High"}


def test_series_validation_rejects_unordered_dates() -> None:
    with pytest.raises(SeriesValidationError):
        TimeSeries.from_records(
            [
                {"date": "2025-10-26", "count": 1},
                {"date": "2025-10-25", "count": 2},
            ]
        )


def test_series_validation_rejects_duplicates_and_negatives() -> None:
    with pytest.raises(SeriesValidationError):
        TimeSeries.from_records(
            [
                {"date": "2025-10-25", "count": 1},
                {"date": "2025-10-25", "count": 2},
            ]
        )
    with pytest.raises(SeriesValidationError):
        TimeSeries.from_records([{"date": "2025-10-25", "count": -1}])
    with pytest.raises(ValueError):
        TimeSeries.from_records([{"date": "25/10/2025", "count": 1}])


def test_overflowing_total_sales_is_rejected() -> None:
    # avg 1 keeps the optimal price finite; only total_sales overflows
    with pytest.raises(ForecastComputationError):
        _service().build_forecast(_series([1, 1, 1]), price=1e308, total_bookings=3)


def test_series_between_is_inclusive() -> None:
    series = _series([1, 2, 3, 4])

    narrowed = series.between(date(2025, 10, 26), date(2025, 10, 27))

    assert narrowed.counts == [2, 3]
    assert narrowed.next_date() == date(2025, 10, 28)
    assert series.between(start=date(2025, 10, 27)).counts == [3, 4]
    assert series.between(end=date(2025, 10, 25)).counts == [1]
    assert series.between().counts == [1, 2, 3, 4]
    assert len(series.between(date(2025, 11, 1), date(2025, 11, 2))) == 0

from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import create_app
from backend.controllers.analytics_controller import router as analytics_router
from backend.services.forecast_service import RoomForecastService
from backend.utils.config import get_settings


def _build_test_settings(tmp_path, filename: str):
    get_settings.cache_clear()
    base = get_settings()
    return replace(base, database_path=tmp_path / filename)


@pytest.fixture
def client(tmp_path):
    settings = _build_test_settings(tmp_path, "analytics_api.db")
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_rooms_are_seeded_with_bookings(client: TestClient) -> None:
    response = client.get("/rooms")

    assert response.status_code == 200
    rooms = response.json()["rooms"]
    assert [room["name"] for room in rooms] == ["Standard Room", "Deluxe Room", "Suite"]
    for room in rooms:
        assert 4 <= len(room["bookings"]) <= 12


def test_analytics_buckets_bookings_by_date(client: TestClient) -> None:
    response = client.get("/analytics")

    assert response.status_code == 200
    analytics = response.json()["analytics"]
    assert len(analytics) == 3
    for room in analytics:
        dates = [row["date"] for row in room["bookings_over_time"]]
        assert dates == ["2025-10-25", "2025-10-26", "2025-10-27", "2025-10-28"]
        assert [row["time_index"] for row in room["bookings_over_time"]] == [0, 1, 2, 3]
        total = sum(row["count"] for row in room["bookings_over_time"])
        assert total == len(room["guest_records"])
        record_dates = [record["date"] for record in room["guest_records"]]
        assert record_dates == sorted(record_dates, reverse=True)


def test_room_forecast_endpoint(client: TestClient) -> None:
    response = client.get("/analytics/1/forecast", params={"trendline_degree": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["room_id"] == 1
    assert body["room_name"] == "Standard Room"
    assert len(body["points"]) == 5
    assert body["points"][-1]["actual"] is None
    assert body["points"][-1]["date"] == "2025-10-29"
    assert body["next_period"]["date"] == "2025-10-29"
    assert body["trendline"]["requested_degree"] == 2
    assert 0.0 <= body["trendline"]["r_squared"] <= 1.0
    assert body["demand"]["tier"] in {"Low", "Stable", "High"}
    assert body["demand"]["base_price"] == 1200.0
    assert body["summary"]["days_observed"] == 4


def test_forecast_all_rooms(client: TestClient) -> None:
    response = client.get("/analytics/forecast", params={"trendline_degree": 3})

    assert response.status_code == 200
    forecasts = response.json()["forecasts"]
    assert [item["room_id"] for item in forecasts] == [1, 2, 3]


def test_room_forecast_narrowed_to_date_range(client: TestClient) -> None:
    full = client.get("/analytics/1/forecast").json()
    counts = {
        row["date"]: row["count"]
        for row in client.get("/analytics").json()["analytics"][0]["bookings_over_time"]
    }

    response = client.get(
        "/analytics/1/forecast",
        params={"start": "2025-10-26", "end": "2025-10-27"},
    )

    assert response.status_code == 200
    body = response.json()
    assert [point["date"] for point in body["points"]] == [
        "2025-10-26",
        "2025-10-27",
        "2025-10-28",
    ]
    assert [point["actual"] for point in body["points"][:2]] == [
        counts["2025-10-26"],
        counts["2025-10-27"],
    ]
    assert body["next_period"]["date"] == "2025-10-28"
    assert full["next_period"]["date"] == "2025-10-29"
    assert [point["x"] for point in body["trendline"]["points"]] == [0, 1]
    assert len(full["trendline"]["points"]) == 4
    assert body["summary"]["days_observed"] == 2
    assert body["summary"]["total_bookings"] == counts["2025-10-26"] + counts["2025-10-27"]


def test_room_forecast_open_ended_range(client: TestClient) -> None:
    response = client.get("/analytics/2/forecast", params={"start": "2025-10-28"})

    assert response.status_code == 200
    body = response.json()
    assert [point["date"] for point in body["points"]] == ["2025-10-28", "2025-10-29"]
    assert body["trendline"]["used_fallback"] is False


def test_room_forecast_rejects_inverted_range(client: TestClient) -> None:
    response = client.get(
        "/analytics/1/forecast",
        params={"start": "2025-10-28", "end": "2025-10-25"},
    )

    assert response.status_code == 400


def test_forecast_all_rooms_with_date_range(client: TestClient) -> None:
    response = client.get(
        "/analytics/forecast",
        params={"start": "2025-10-25", "end": "2025-10-26"},
    )

    assert response.status_code == 200
    for item in response.json()["forecasts"]:
        assert item["summary"]["days_observed"] == 2
        assert item["next_period"]["date"] == "2025-10-27"

    inverted = client.get(
        "/analytics/forecast",
        params={"start": "2025-10-26", "end": "2025-10-25"},
    )
    assert inverted.status_code == 400


def test_stateless_forecast_rejects_overflowing_sales(client: TestClient) -> None:
    response = client.post(
        "/forecast",
        json={
            "series": [
                {"date": "2025-10-25", "count": 1},
                {"date": "2025-10-26", "count": 1},
                {"date": "2025-10-27", "count": 1},
            ],
            "price": 1e308,
            "total_bookings": 3,
        },
    )

    assert response.status_code == 500


def test_room_forecast_unknown_room(client: TestClient) -> None:
    response = client.get("/analytics/999/forecast")

    assert response.status_code == 404


@pytest.mark.parametrize(
    "params",
    [
        {"window_size": 0},
        {"alpha": 1.5},
        {"alpha": 0},
        {"trendline_degree": 5},
    ],
)
def test_room_forecast_rejects_invalid_configuration(client: TestClient, params: dict) -> None:
    response = client.get("/analytics/1/forecast", params=params)

    assert response.status_code == 400


def test_booking_extends_series(client: TestClient) -> None:
    before = client.get("/analytics").json()["analytics"][0]

    response = client.post("/booking", json={"roomId": 1, "guestName": "Ana Cruz"})

    assert response.status_code == 200
    booking = response.json()["booking"]
    assert booking["room_id"] == 1
    assert booking["guest_name"] == "Ana Cruz"

    after = client.get("/analytics").json()["analytics"][0]
    assert len(after["guest_records"]) == len(before["guest_records"]) + 1
    assert len(after["bookings_over_time"]) == len(before["bookings_over_time"]) + 1
    assert after["guest_records"][0]["guest_name"] == "Ana Cruz"


def test_booking_accepts_snake_case_fields(client: TestClient) -> None:
    response = client.post("/booking", json={"room_id": 2, "guest_name": "Guest"})

    assert response.status_code == 200


def test_booking_validation(client: TestClient) -> None:
    assert client.post("/booking", json={"roomId": 999, "guestName": "Ana"}).status_code == 404
    assert client.post("/booking", json={"roomId": 1, "guestName": "   "}).status_code == 400
    assert client.post("/booking", json={"roomId": 1}).status_code == 422


def test_stateless_forecast_endpoint(client: TestClient) -> None:
    response = client.post(
        "/forecast",
        json={
            "series": [
                {"date": "2025-10-25", "count": 2},
                {"date": "2025-10-26", "count": 4},
                {"date": "2025-10-27", "count": 6},
            ],
            "price": 1200,
        },
    )

    assert response.status_code == 200
    body = response.json()
    next_period = body["next_period"]
    assert next_period["date"] == "2025-10-28"
    assert next_period["moving_average"] == pytest.approx(4.0)
    assert next_period["exp_smooth"] == pytest.approx(3.62)
    assert next_period["regression"] == pytest.approx(8.0)
    assert body["trendline"]["model"]["coefficients"] == pytest.approx([2.0, 2.0])
    assert body["trendline"]["r_squared"] == pytest.approx(1.0)
    assert body["demand"]["tier"] == "Stable"
    assert body["demand"]["optimal_price"] == pytest.approx(1200.0)


def test_stateless_forecast_rejects_unordered_series(client: TestClient) -> None:
    response = client.post(
        "/forecast",
        json={
            "series": [
                {"date": "2025-10-26", "count": 2},
                {"date": "2025-10-25", "count": 4},
            ],
            "price": 1200,
        },
    )

    assert response.status_code == 400


def test_stateless_forecast_rejects_bad_options(client: TestClient) -> None:
    response = client.post(
        "/forecast",
        json={
            "series": [{"date": "2025-10-25", "count": 2}],
            "price": 1200,
            "window_size": 0,
        },
    )

    assert response.status_code == 400


def test_stateless_forecast_without_app_state() -> None:
    app = FastAPI()
    app.include_router(analytics_router)
    client = TestClient(app)

    response = client.post(
        "/forecast",
        json={"series": [], "price": 900, "trendline_degree": 3},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["points"] == []
    assert body["next_period"] is None
    assert body["demand"]["tier"] == "Low"
    assert isinstance(app.state.forecast_service, RoomForecastService)


def test_analytics_without_repository_is_unavailable() -> None:
    app = FastAPI()
    app.include_router(analytics_router)
    client = TestClient(app)

    assert client.get("/analytics").status_code == 503

"""Room analytics workflow: persisted bookings in, forecasts out."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from backend.domain.models import Booking, Room, RoomForecast
from backend.repository.data_repository import DataRepository
from backend.services.forecast_service import RoomForecastService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class AnalyticsError(Exception):
    """Base exception for analytics workflow failures."""


class RoomNotFoundError(AnalyticsError):
    """Raised when a room id does not exist in persisted state."""


class BookingValidationError(AnalyticsError):
    """Raised when a booking request is incomplete."""


class DateRangeValidationError(AnalyticsError):
    """Raised when a forecast date range starts after it ends."""


def _validate_date_range(start: Optional[date], end: Optional[date]) -> None:
    if start is not None and end is not None and start > end:
        raise DateRangeValidationError(
            f"start ({start.isoformat()}) must not be after end ({end.isoformat()})"
        )


class RoomAnalyticsService:
    """Loads per-room booking series and hands them to the forecaster."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        forecast_service: Optional[RoomForecastService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._forecast_service = forecast_service or RoomForecastService(settings=self._settings)

    def _require_room(self, room_id: int) -> Room:
        room = self._repository.get_room(room_id)
        if room is None:
            raise RoomNotFoundError(f"room_id {room_id} not found")
        return room

    def list_rooms(self) -> list[dict[str, Any]]:
        rooms = []
        for room in self._repository.list_rooms():
            rooms.append(
                {
                    "id": room.room_id,
                    "name": room.name,
                    "description": room.description,
                    "price": room.price,
                    "bookings": [
                        {
                            "id": booking.booking_id,
                            "guest_name": booking.guest_name,
                            "created_at": booking.created_at,
                        }
                        for booking in self._repository.list_bookings(room.room_id)
                    ],
                }
            )
        return rooms

    def create_booking(self, room_id: int, guest_name: str) -> Booking:
        if room_id <= 0:
            raise BookingValidationError("room_id must be a positive integer")
        cleaned_name = guest_name.strip()
        if not cleaned_name:
            raise BookingValidationError("guest_name must not be blank")
        self._require_room(room_id)
        return self._repository.create_booking(room_id=room_id, guest_name=cleaned_name)

    def get_room_analytics(self) -> list[dict[str, Any]]:
        analytics = []
        for room in self._repository.list_rooms():
            series = self._repository.get_daily_booking_series(room.room_id)
            analytics.append(
                {
                    "room_id": room.room_id,
                    "name": room.name,
                    "price": room.price,
                    "bookings_over_time": [
                        {"date": point.date.isoformat(), "count": point.count, "time_index": index}
                        for index, point in enumerate(series.points)
                    ],
                    "guest_records": [
                        {"guest_name": record.guest_name, "date": record.date}
                        for record in self._repository.get_guest_records(room.room_id)
                    ],
                }
            )
        return analytics

    def forecast_room(
        self,
        room_id: int,
        *,
        trendline_degree: Optional[int] = None,
        window_size: Optional[int] = None,
        alpha: Optional[float] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> RoomForecast:
        _validate_date_range(start, end)
        room = self._require_room(room_id)
        series = self._repository.get_daily_booking_series(room_id)
        if start is None and end is None:
            total_bookings = self._repository.count_bookings(room_id)
        else:
            series = series.between(start, end)
            total_bookings = sum(series.counts)
            logger.info(
                "Narrowed booking series room_id=%s start=%s end=%s days=%s",
                room_id,
                start,
                end,
                len(series),
            )
        return self._forecast_service.build_forecast(
            series,
            room.price,
            total_bookings=total_bookings,
            trendline_degree=trendline_degree,
            window_size=window_size,
            alpha=alpha,
            room_id=room.room_id,
            room_name=room.name,
        )

    def forecast_all_rooms(
        self,
        *,
        trendline_degree: Optional[int] = None,
        window_size: Optional[int] = None,
        alpha: Optional[float] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[RoomForecast]:
        _validate_date_range(start, end)
        return [
            self.forecast_room(
                room.room_id,
                trendline_degree=trendline_degree,
                window_size=window_size,
                alpha=alpha,
                start=start,
                end=end,
            )
            for room in self._repository.list_rooms()
        ]

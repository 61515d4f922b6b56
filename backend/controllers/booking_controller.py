"""HTTP controller layer for rooms and bookings."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from backend.controllers.dependencies import get_analytics_service
from backend.services.analytics_service import (
    BookingValidationError,
    RoomAnalyticsService,
    RoomNotFoundError,
)
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["rooms"])


class BookingSummary(BaseModel):
    id: int = Field(gt=0)
    guest_name: str
    created_at: str


class RoomResponse(BaseModel):
    id: int = Field(gt=0)
    name: str
    description: str | None = None
    price: float = Field(gt=0.0)
    bookings: list[BookingSummary]


class RoomsResponse(BaseModel):
    rooms: list[RoomResponse]


class CreateBookingRequest(BaseModel):
    """Accepts both snake_case and camelCase field names."""

    model_config = ConfigDict(populate_by_name=True)

    room_id: int = Field(gt=0, validation_alias=AliasChoices("room_id", "roomId"))
    guest_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("guest_name", "guestName"),
    )


class BookingResponse(BaseModel):
    id: int = Field(gt=0)
    room_id: int = Field(gt=0)
    guest_name: str
    created_at: str


class CreateBookingResponse(BaseModel):
    booking: BookingResponse


@router.get("/rooms", response_model=RoomsResponse, status_code=status.HTTP_200_OK)
async def list_rooms(
    service: RoomAnalyticsService = Depends(get_analytics_service),
) -> RoomsResponse:
    try:
        return RoomsResponse(rooms=service.list_rooms())
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected room listing failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch rooms",
        ) from exc


@router.post("/booking", response_model=CreateBookingResponse, status_code=status.HTTP_200_OK)
async def create_booking(
    payload: CreateBookingRequest,
    service: RoomAnalyticsService = Depends(get_analytics_service),
) -> CreateBookingResponse:
    try:
        booking = service.create_booking(room_id=payload.room_id, guest_name=payload.guest_name)
        return CreateBookingResponse(
            booking=BookingResponse(
                id=booking.booking_id,
                room_id=booking.room_id,
                guest_name=booking.guest_name,
                created_at=booking.created_at,
            )
        )
    except BookingValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected booking failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create booking",
        ) from exc

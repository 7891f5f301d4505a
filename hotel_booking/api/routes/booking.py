"""
Hotel booking endpoints.

Every route runs behind bearer authentication, delegates to the booking
service and translates its BookingResult into a status code.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.metrics import booking_latency, record_booking_attempt
from hotel_booking.core.security import get_current_user_id
from hotel_booking.db.session import get_db
from hotel_booking.schemas.booking import (
    BookingRequest,
    BookingResponse,
    BookingWithRoomResponse,
    parse_identifier,
)
from hotel_booking.services import booking_service
from hotel_booking.services.results import BookingResult, ResultStatus

router = APIRouter(prefix="/booking", tags=["Booking"])

_DETAILS = {
    "room_not_found": "Room not found",
    "room_full": "Room is full",
    "ticket_not_eligible": "A paid in-person ticket with hotel is required",
    "booking_exists": "User already has a booking",
    "booking_not_found": "Booking not found",
    "booking_not_owned": "Booking does not belong to user",
    "booking_conflict": "Room was booked concurrently, please try again",
}


def _unwrap(operation: str, result: BookingResult):
    record_booking_attempt(operation, result.status.value)
    if result.ok:
        return result.booking

    detail = _DETAILS.get(result.reason, "Rules not satisfied")
    if result.status is ResultStatus.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


@router.get("", response_model=BookingWithRoomResponse)
async def get_booking(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Current booking of the authenticated user, with its room."""
    with booking_latency.labels(operation="query").time():
        result = await booking_service.get_booking(db, user_id)
    return _unwrap("query", result)


@router.post("", response_model=BookingResponse)
async def create_booking(
    booking_data: Optional[BookingRequest] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Book a room.

    404 if the room does not exist. 403 if the room is full, the user has no
    paid in-person ticket with hotel, or the user already has a booking.
    """
    room_id = booking_data.room_id if booking_data else None
    with booking_latency.labels(operation="create").time():
        result = await booking_service.book_room(db, user_id, room_id)
    return _unwrap("create", result)


@router.put("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: str,
    booking_data: Optional[BookingRequest] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Move the user's booking to another room.

    404 if the room does not exist. 403 if the room is full, the user has no
    booking, or `booking_id` is not the user's booking.
    """
    room_id = booking_data.room_id if booking_data else None
    with booking_latency.labels(operation="update").time():
        result = await booking_service.change_booking_room(
            db, user_id, room_id, parse_identifier(booking_id)
        )
    return _unwrap("update", result)

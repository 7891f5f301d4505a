"""
Booking and room persistence.

Each function is a single statement against the store; callers own the
transaction boundary (the request session).
"""

from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hotel_booking.core.logging import get_logger
from hotel_booking.models.booking import Booking
from hotel_booking.models.hotel import Room

logger = get_logger(__name__)


async def get_booking_by_user(db: AsyncSession, user_id: int) -> Optional[Booking]:
    """The user's booking with its room loaded, or None."""
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id)
        .options(selectinload(Booking.room))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_booking(db: AsyncSession, user_id: int, room_id: int) -> Optional[Booking]:
    """
    Insert a booking. Returns None when the one-booking-per-user constraint
    rejects the row; the session is rolled back in that case.
    """
    booking = Booking(user_id=user_id, room_id=room_id)
    db.add(booking)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.info("booking_insert_rejected", user_id=user_id, room_id=room_id)
        return None
    await db.refresh(booking)
    return booking


async def update_booking_room(db: AsyncSession, booking_id: int, room_id: int) -> Optional[Booking]:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        return None

    booking.room_id = room_id
    await db.flush()
    await db.refresh(booking)
    return booking


async def get_room(db: AsyncSession, room_id: Optional[int]) -> Optional[Room]:
    if room_id is None:
        return None
    # claim_room compares against `version`, so always reload the row
    result = await db.execute(
        select(Room)
        .where(Room.id == room_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def count_bookings_for_room(db: AsyncSession, room_id: int) -> int:
    result = await db.execute(
        select(func.count(Booking.id)).where(Booking.room_id == room_id)
    )
    return result.scalar_one()


async def claim_room(db: AsyncSession, room_id: int, seen_version: int) -> bool:
    """
    Optimistic lock on the room row.

    UPDATE rooms SET version = version + 1 WHERE id = :room_id AND version = :seen_version

    False means another transaction booked into the room after we read it.
    """
    result = await db.execute(
        update(Room)
        .where(Room.id == room_id, Room.version == seen_version)
        .values(version=Room.version + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1

"""
Booking rules: who may book which room, and when.

CONCURRENCY STRATEGY: Unique Constraint + Optimistic Room Claim
===============================================================

Problem:
  The rules are check-then-write. Two requests for the last slot in a room
  both count N-1 bookings, both insert, and the room ends up over capacity.
  Two requests from the same user both see "no booking" and both insert.

Solution:
  - One booking per user is a UNIQUE constraint on bookings.user_id. The
    losing insert raises IntegrityError and is reported as forbidden.
  - Capacity uses the `version` column on Room. Once every rule passes:

      UPDATE rooms SET version = version + 1
      WHERE id = :room_id AND version = :version_we_read

    Zero rows affected means another booking landed in the room after our
    read. We roll back and rerun the whole rule sequence, which recounts
    the room. The row lock taken by the UPDATE serializes the writers that
    read the same version.

Rule order is fixed and the first failing rule decides the outcome:

  create: room exists -> room not full -> ticket eligible -> no booking yet
  update: room exists -> room not full -> has booking -> owns booking id
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.config import get_settings
from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import record_claim_retry
from hotel_booking.models.hotel import Room
from hotel_booking.models.ticket import TicketStatus
from hotel_booking.repositories import booking_repository, enrollment_repository, ticket_repository
from hotel_booking.services.results import BookingResult

logger = get_logger(__name__)
settings = get_settings()


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

async def room_exists(db: AsyncSession, room_id: Optional[int]) -> bool:
    room = await booking_repository.get_room(db, room_id)
    return room is not None


async def is_room_full(db: AsyncSession, room: Room) -> bool:
    """A room at exactly its capacity is full."""
    booked = await booking_repository.count_bookings_for_room(db, room.id)
    return booked >= room.capacity


async def user_can_book(db: AsyncSession, user_id: int) -> bool:
    """True when the user holds a PAID, in-person ticket that includes the hotel."""
    enrollment = await enrollment_repository.get_enrollment_by_user(db, user_id)
    if not enrollment:
        return False

    ticket = await ticket_repository.get_ticket_by_enrollment(db, enrollment.id)
    if not ticket:
        return False

    return (
        ticket.status == TicketStatus.PAID.value
        and not ticket.ticket_type.is_remote
        and ticket.ticket_type.includes_hotel
    )


async def user_has_booking(db: AsyncSession, user_id: int) -> bool:
    booking = await booking_repository.get_booking_by_user(db, user_id)
    return booking is not None


async def user_owns_booking(db: AsyncSession, user_id: int, booking_id: Optional[int]) -> bool:
    """
    Ownership is decided by comparing the user's current booking id with the
    requested one. A user without a booking owns nothing.
    """
    booking = await booking_repository.get_booking_by_user(db, user_id)
    if booking is None or booking_id is None:
        return False
    return booking.id == booking_id


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def _rejected(operation: str, result: BookingResult, **context) -> BookingResult:
    logger.info(
        "booking_rejected",
        operation=operation,
        status=result.status.value,
        reason=result.reason,
        **context,
    )
    return result


async def get_booking(db: AsyncSession, user_id: int) -> BookingResult:
    """The user's current booking with its room embedded."""
    booking = await booking_repository.get_booking_by_user(db, user_id)
    if booking is None:
        return BookingResult.not_found("booking_not_found")
    return BookingResult.success(booking)


async def book_room(db: AsyncSession, user_id: int, room_id: Optional[int]) -> BookingResult:
    """
    Create a booking for `user_id` in `room_id`.
    Reruns the rules up to MAX_BOOKING_RETRY_ATTEMPTS times on claim conflicts.
    """
    context = {"user_id": user_id, "room_id": room_id}

    for attempt in range(1, settings.MAX_BOOKING_RETRY_ATTEMPTS + 1):
        room = await booking_repository.get_room(db, room_id)
        if room is None:
            return _rejected("create", BookingResult.not_found("room_not_found"), **context)

        if await is_room_full(db, room):
            return _rejected("create", BookingResult.forbidden("room_full"), **context)

        if not await user_can_book(db, user_id):
            return _rejected("create", BookingResult.forbidden("ticket_not_eligible"), **context)

        if await user_has_booking(db, user_id):
            return _rejected("create", BookingResult.forbidden("booking_exists"), **context)

        if not await booking_repository.claim_room(db, room.id, room.version):
            logger.info("booking_retry", attempt=attempt, reason="version_conflict", **context)
            record_claim_retry()
            # Expire cached state so the next attempt recounts the room
            await db.rollback()
            continue

        booking = await booking_repository.create_booking(db, user_id, room.id)
        if booking is None:
            return _rejected("create", BookingResult.forbidden("booking_exists"), **context)

        logger.info("booking_created", booking_id=booking.id, attempt=attempt, **context)
        return BookingResult.success(booking)

    return _rejected("create", BookingResult.forbidden("booking_conflict"), **context)


async def change_booking_room(
    db: AsyncSession,
    user_id: int,
    room_id: Optional[int],
    booking_id: Optional[int],
) -> BookingResult:
    """
    Move the user's booking `booking_id` into `room_id`.
    Ticket eligibility is not rechecked; only capacity and ownership are.
    """
    context = {"user_id": user_id, "room_id": room_id, "booking_id": booking_id}

    for attempt in range(1, settings.MAX_BOOKING_RETRY_ATTEMPTS + 1):
        room = await booking_repository.get_room(db, room_id)
        if room is None:
            return _rejected("update", BookingResult.not_found("room_not_found"), **context)

        if await is_room_full(db, room):
            return _rejected("update", BookingResult.forbidden("room_full"), **context)

        if not await user_has_booking(db, user_id):
            return _rejected("update", BookingResult.forbidden("booking_not_found"), **context)

        if not await user_owns_booking(db, user_id, booking_id):
            return _rejected("update", BookingResult.forbidden("booking_not_owned"), **context)

        if not await booking_repository.claim_room(db, room.id, room.version):
            logger.info("booking_retry", attempt=attempt, reason="version_conflict", **context)
            record_claim_retry()
            await db.rollback()
            continue

        booking = await booking_repository.update_booking_room(db, booking_id, room.id)
        if booking is None:
            return _rejected("update", BookingResult.forbidden("booking_not_owned"), **context)

        logger.info("booking_room_changed", attempt=attempt, **context)
        return BookingResult.success(booking)

    return _rejected("update", BookingResult.forbidden("booking_conflict"), **context)

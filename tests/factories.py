"""
Row builders for tests. Each helper commits and returns the refreshed model.
"""

import itertools

from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.models import Booking, Enrollment, Hotel, Room, Ticket, TicketType, User

_sequence = itertools.count(1)


async def _save(db: AsyncSession, obj):
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


async def create_user(db: AsyncSession) -> User:
    return await _save(db, User(email=f"user{next(_sequence)}@example.com"))


async def create_enrollment(db: AsyncSession, user: User) -> Enrollment:
    return await _save(db, Enrollment(
        name="Test Attendee",
        cpf=f"{next(_sequence):011d}",
        phone="(21) 98999-9999",
        user_id=user.id,
    ))


async def create_ticket_type(
    db: AsyncSession,
    is_remote: bool = False,
    includes_hotel: bool = True,
) -> TicketType:
    return await _save(db, TicketType(
        name=f"Ticket type {next(_sequence)}",
        price=500,
        is_remote=is_remote,
        includes_hotel=includes_hotel,
    ))


async def create_ticket(
    db: AsyncSession,
    enrollment: Enrollment,
    ticket_type: TicketType,
    status: str = "RESERVED",
) -> Ticket:
    return await _save(db, Ticket(
        enrollment_id=enrollment.id,
        ticket_type_id=ticket_type.id,
        status=status,
    ))


async def create_hotel(db: AsyncSession) -> Hotel:
    return await _save(db, Hotel(
        name=f"Hotel {next(_sequence)}",
        image="https://example.com/hotel.png",
    ))


async def create_room(db: AsyncSession, hotel: Hotel, capacity: int = 3) -> Room:
    return await _save(db, Room(
        name=f"{next(_sequence)}",
        capacity=capacity,
        hotel_id=hotel.id,
    ))


async def create_booking(db: AsyncSession, room: Room, user: User) -> Booking:
    return await _save(db, Booking(room_id=room.id, user_id=user.id))


async def fill_room(db: AsyncSession, room: Room, count: int) -> list[Booking]:
    """Book `count` slots in `room` for freshly created users."""
    bookings = []
    for _ in range(count):
        bookings.append(await create_booking(db, room, await create_user(db)))
    return bookings

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hotel_booking.models.ticket import Ticket


async def get_ticket_by_enrollment(db: AsyncSession, enrollment_id: int) -> Optional[Ticket]:
    """The enrollment's ticket with its TicketType eager-loaded."""
    result = await db.execute(
        select(Ticket)
        .where(Ticket.enrollment_id == enrollment_id)
        .options(selectinload(Ticket.ticket_type))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()

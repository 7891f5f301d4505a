from hotel_booking.schemas.booking import (
    BookingRequest,
    BookingResponse,
    BookingWithRoomResponse,
    RoomResponse,
    parse_identifier,
)

__all__ = [
    "BookingRequest", "BookingResponse", "BookingWithRoomResponse",
    "RoomResponse", "parse_identifier",
]

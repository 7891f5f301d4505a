"""
Pydantic schemas for booking request/response validation.

Wire names are camelCase (`roomId`, `userId`, `createdAt`, embedded `Room`)
to match the rest of the platform's API.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


# Primary keys are INTEGER columns (signed 32-bit)
MIN_IDENTIFIER = -(2 ** 31)
MAX_IDENTIFIER = 2 ** 31 - 1


def parse_identifier(value: Any) -> Optional[int]:
    """
    Coerce a client-supplied id to int.

    Anything that is not an integral number (missing, null, text, 1.5, bool)
    or does not fit the id column becomes None, which downstream lookups
    treat as "no such entity".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        identifier = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        identifier = int(value)
    elif isinstance(value, str):
        try:
            identifier = int(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not MIN_IDENTIFIER <= identifier <= MAX_IDENTIFIER:
        return None
    return identifier


class BookingRequest(BaseModel):
    room_id: Optional[int] = Field(default=None, validation_alias="roomId")

    @field_validator("room_id", mode="before")
    @classmethod
    def coerce_room_id(cls, value: Any) -> Optional[int]:
        return parse_identifier(value)


class RoomResponse(BaseModel):
    id: int
    name: str
    capacity: int
    hotel_id: int = Field(serialization_alias="hotelId")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    user_id: int = Field(serialization_alias="userId")
    room_id: int = Field(serialization_alias="roomId")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    model_config = {"from_attributes": True}


class BookingWithRoomResponse(BookingResponse):
    room: RoomResponse = Field(serialization_alias="Room")

"""
Tagged outcome shared by every booking operation.

Business rejections are values, not exceptions: the service returns a
BookingResult and the HTTP layer maps its status to a response code.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from hotel_booking.models.booking import Booking


class ResultStatus(str, enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class BookingResult:
    status: ResultStatus
    booking: Optional[Booking] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.OK

    @classmethod
    def success(cls, booking: Booking) -> "BookingResult":
        return cls(ResultStatus.OK, booking=booking)

    @classmethod
    def not_found(cls, reason: str) -> "BookingResult":
        return cls(ResultStatus.NOT_FOUND, reason=reason)

    @classmethod
    def forbidden(cls, reason: str) -> "BookingResult":
        return cls(ResultStatus.FORBIDDEN, reason=reason)

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from backend.app.services.dates import DateRange


class BookingType(str, Enum):
    BOOKING = "booking"
    WISH = "wish"


class BookingColor(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    PINK = "pink"
    INDIGO = "indigo"
    ORANGE = "orange"
    RED = "red"
    TEAL = "teal"


@dataclass(frozen=True)
class Booking:
    """A persisted booking or wish.

    ``color`` stays a plain string: rows written before the palette was
    fixed may carry values outside ``BookingColor``.
    """

    id: str
    name: str
    start_date: date
    end_date: date
    created_at: datetime
    type: BookingType = BookingType.BOOKING
    note: str | None = None
    color: str | None = None

    @property
    def range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def is_wish(self) -> bool:
        return self.type is BookingType.WISH

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "created_at": self.created_at.isoformat(),
            "type": self.type.value,
            "note": self.note,
            "color": self.color,
        }


@dataclass(frozen=True)
class BookingFields:
    """Writable fields of a booking, as passed to create and update."""

    name: str
    start_date: date
    end_date: date
    type: BookingType = BookingType.BOOKING
    note: str | None = None
    color: str | None = None

    @property
    def range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    def to_booking(self, booking_id: str, created_at: datetime | None = None) -> Booking:
        return Booking(
            id=booking_id,
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            created_at=created_at or datetime.now(timezone.utc),
            type=self.type,
            note=self.note,
            color=self.color,
        )

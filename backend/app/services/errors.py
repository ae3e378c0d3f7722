from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from backend.app.services.models import Booking


class BookingError(Exception):
    """Base class for booking failures a caller can recover from."""


class BookingValidationError(BookingError):
    pass


class BookingConflictError(BookingError):
    def __init__(self, conflict: Booking) -> None:
        super().__init__(f"Dates overlap booking {conflict.id}")
        self.conflict = conflict


class BookingNotFound(BookingError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class StoreUnavailable(BookingError):
    """A round trip to the database or Redis failed."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Booking store unavailable during {action}")
        self.action = action

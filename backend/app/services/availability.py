from __future__ import annotations

from collections.abc import Iterable

from backend.app.services.bookings import BookingStore
from backend.app.services.dates import DateRange, ranges_overlap
from backend.app.services.errors import BookingConflictError
from backend.app.services.models import Booking


def find_conflict(
    candidate: DateRange,
    bookings: Iterable[Booking],
    exclude_id: str | None = None,
) -> Booking | None:
    """First confirmed booking overlapping ``candidate``. Wishes never block."""
    for booking in bookings:
        if booking.is_wish or booking.id == exclude_id:
            continue
        if ranges_overlap(candidate, booking.range):
            return booking
    return None


async def is_available(
    store: BookingStore,
    candidate: DateRange,
    exclude_id: str | None = None,
) -> bool:
    """Check ``candidate`` against a fresh snapshot of the store.

    This is not atomic with the write that follows it: two submissions
    racing each other can both pass.
    """
    return find_conflict(candidate, await store.list(), exclude_id) is None


async def ensure_available(
    store: BookingStore,
    candidate: DateRange,
    exclude_id: str | None = None,
) -> None:
    conflict = find_conflict(candidate, await store.list(), exclude_id)
    if conflict is not None:
        raise BookingConflictError(conflict)

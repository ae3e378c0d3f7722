from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Sequence

from backend.app.services.dates import DateRange, day_in_range, normalize_to_day
from backend.app.services.models import Booking, BookingColor
from backend.app.services.month_grid import MonthRef


PALETTE: tuple[str, ...] = tuple(color.value for color in BookingColor)

# Rows created before bookings carried a color are painted from this
# shorter list; changing it would recolor existing bookings.
LEGACY_PALETTE: tuple[str, ...] = (
    "blue",
    "green",
    "yellow",
    "purple",
    "pink",
    "indigo",
    "orange",
)

WISH_COLOR = "gray"


@dataclass(frozen=True)
class CalendarDay:
    day: date
    is_current_month: bool
    is_today: bool
    is_selected: bool = False
    is_in_range: bool = False
    is_range_start: bool = False
    is_range_end: bool = False
    booking: Booking | None = None
    color: str | None = None
    muted: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "is_current_month": self.is_current_month,
            "is_today": self.is_today,
            "is_selected": self.is_selected,
            "is_in_range": self.is_in_range,
            "is_range_start": self.is_range_start,
            "is_range_end": self.is_range_end,
            "booking": self.booking.as_dict() if self.booking else None,
            "color": self.color,
            "muted": self.muted,
        }


def legacy_color_index(name: str) -> int:
    # Sum of UTF-16 code units, so characters outside the BMP count as
    # their surrogate pair.
    raw = name.encode("utf-16-le")
    total = sum(int.from_bytes(raw[i : i + 2], "little") for i in range(0, len(raw), 2))
    return total % len(LEGACY_PALETTE)


def booking_color(booking: Booking) -> tuple[str, bool]:
    """Return ``(color, muted)`` for an occupied day."""
    if booking.is_wish:
        return WISH_COLOR, True
    if booking.color:
        return (booking.color if booking.color in PALETTE else PALETTE[0]), False
    return LEGACY_PALETTE[legacy_color_index(booking.name)], False


def booking_for_day(day: date, bookings: Iterable[Booking]) -> Booking | None:
    """First booking or wish covering ``day``, in store order."""
    day = normalize_to_day(day)
    for booking in bookings:
        if normalize_to_day(booking.start_date) <= day <= normalize_to_day(booking.end_date):
            return booking
    return None


def resolve_day(
    day: date,
    month: MonthRef,
    today: date,
    selection: DateRange | None,
    bookings: Sequence[Booking],
) -> CalendarDay:
    booking = booking_for_day(day, bookings)
    base = {
        "day": day,
        "is_current_month": month.contains(day),
        "is_today": day == today,
    }

    if booking is not None:
        # A booking wins over any selection that came to cover it through
        # another client's write.
        color, muted = booking_color(booking)
        return CalendarDay(**base, booking=booking, color=color, muted=muted)

    if selection is None:
        return CalendarDay(**base)

    return CalendarDay(
        **base,
        is_selected=day in (selection.start, selection.end),
        is_in_range=day_in_range(day, selection),
        is_range_start=day == selection.start,
        is_range_end=day == selection.end,
    )


def resolve_month(
    month: MonthRef,
    today: date,
    selection: DateRange | None,
    bookings: Sequence[Booking],
) -> list[CalendarDay]:
    return [resolve_day(day, month, today, selection, bookings) for day in month.grid()]

"""User-facing copy. The calendar ships in Danish only."""

from datetime import date

from backend.app.services.dates import DateRange
from backend.app.services.models import BookingType


MONTH_NAMES = (
    "Januar",
    "Februar",
    "Marts",
    "April",
    "Maj",
    "Juni",
    "Juli",
    "August",
    "September",
    "Oktober",
    "November",
    "December",
)

DAY_NAMES = ("Man", "Tir", "Ons", "Tor", "Fre", "Lør", "Søn")

NAME_REQUIRED = "Indtast venligst et navn"
DATES_REQUIRED = "Vælg venligst start- og slutdato"
DATES_BOOKED = "Disse datoer er allerede booket"
DATES_BOOKED_FOR_WISH = "Der er allerede en booking i disse datoer, så ønsket kan ikke oprettes"
WISH_OVERLAPS_BOOKING = "Ønsket overlapper en eksisterende booking og kan ikke accepteres"
SAVE_FAILED = "Der opstod en fejl. Prøv igen."
DELETE_FAILED = "Der opstod en fejl ved sletning. Prøv igen."
ACCEPT_FAILED = "Der opstod en fejl ved accept af ønske. Prøv igen."

TYPE_LABELS = {
    BookingType.BOOKING: "booking",
    BookingType.WISH: "ønsket",
}


def month_label(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year}"


def format_day(day: date) -> str:
    """Long Danish date, e.g. ``10. juni 2024``."""
    return f"{day.day}. {MONTH_NAMES[day.month - 1].lower()} {day.year}"


def format_range(selection: DateRange) -> str:
    if selection.start == selection.end:
        return format_day(selection.start)
    return f"{format_day(selection.start)} - {format_day(selection.end)}"


def conflict_message(booking_type: BookingType) -> str:
    if booking_type is BookingType.WISH:
        return DATES_BOOKED_FOR_WISH
    return DATES_BOOKED

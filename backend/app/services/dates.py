from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


DayLike = date | datetime | str


def normalize_to_day(value: DayLike) -> date:
    """Strip the time of day, returning the calendar date of ``value``.

    Accepts ``date``/``datetime`` objects and ISO strings, either a bare
    ``YYYY-MM-DD`` or a full timestamp such as ``2024-06-10T14:30:00+02:00``.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def day_key(value: DayLike) -> str:
    """Canonical ``YYYY-MM-DD`` form of a day."""
    return normalize_to_day(value).isoformat()


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days, ``start <= end``."""

    start: date
    end: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", normalize_to_day(self.start))
        object.__setattr__(self, "end", normalize_to_day(self.end))
        if self.start > self.end:
            raise ValueError(f"range start {self.start} is after end {self.end}")

    @classmethod
    def single(cls, day: DayLike) -> DateRange:
        day = normalize_to_day(day)
        return cls(day, day)

    @classmethod
    def spanning(cls, a: DayLike, b: DayLike) -> DateRange:
        """Range covering both days regardless of their order."""
        a, b = normalize_to_day(a), normalize_to_day(b)
        return cls(min(a, b), max(a, b))

    def as_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def day_in_range(day: DayLike, selection: DateRange | None) -> bool:
    if selection is None:
        return False
    return selection.start <= normalize_to_day(day) <= selection.end


def day_in_range_by_key(day: DayLike, selection: DateRange | None) -> bool:
    # ISO day keys sort lexicographically in calendar order.
    if selection is None:
        return False
    return day_key(selection.start) <= day_key(day) <= day_key(selection.end)


def ranges_overlap(a: DateRange, b: DateRange) -> bool:
    """Inclusive overlap: ranges sharing a single day overlap."""
    return a.start <= b.end and a.end >= b.start

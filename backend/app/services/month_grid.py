import calendar
from datetime import date, timedelta
from typing import NamedTuple


GRID_DAYS = 42  # six Monday-first weeks, whatever the month needs

# Every month in this span has a full grid of valid dates.
MIN_YEAR = 1
MAX_YEAR = 9998


def month_grid(year: int, month: int) -> list[date]:
    """Return the 42 days shown for ``year``/``month``, Monday first.

    Leading days come from the end of the previous month, then the month's
    own days, then the start of the next month up to six full weeks.
    """
    first = date(year, month, 1)
    leading = first.weekday()
    days_in_month = calendar.monthrange(year, month)[1]

    days = [first - timedelta(days=offset) for offset in range(leading, 0, -1)]
    days.extend(date(year, month, day) for day in range(1, days_in_month + 1))

    next_year, next_month = shift_month(year, month, 1)
    days.extend(date(next_year, next_month, day) for day in range(1, GRID_DAYS - len(days) + 1))
    return days


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    shifted_year, shifted_month = divmod(index, 12)
    return shifted_year, shifted_month + 1


class MonthRef(NamedTuple):
    year: int
    month: int

    @classmethod
    def of(cls, day: date) -> "MonthRef":
        return cls(day.year, day.month)

    def shift(self, delta: int) -> "MonthRef":
        """Move by ``delta`` months, staying put at the edges of the calendar."""
        shifted = MonthRef(*shift_month(self.year, self.month, delta))
        if not MIN_YEAR <= shifted.year <= MAX_YEAR:
            return self
        return shifted

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def grid(self) -> list[date]:
        return month_grid(self.year, self.month)

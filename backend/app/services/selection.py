"""Pointer-driven range selection for the calendar grid.

The machine knows nothing about the store: it is handed a lookup that
returns the booking occupying a day, if any. Occupied days cannot anchor a
drag and a drag never extends onto them; clicking one switches to editing
that booking with the selection forced to its dates.
"""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from typing import Callable

from backend.app.services.dates import DateRange, DayLike, normalize_to_day
from backend.app.services.models import Booking


logger = logging.getLogger(__name__)

OccupancyLookup = Callable[[date], Booking | None]


class SelectionState(str, Enum):
    IDLE = "idle"
    SELECTING_SINGLE = "selecting_single"
    DRAGGING = "dragging"
    EDITING = "editing"


class SelectionMachine:
    def __init__(self, occupant: OccupancyLookup) -> None:
        self._occupant = occupant
        self.selection: DateRange | None = None
        self.editing_id: str | None = None
        self.anchor: date | None = None

    @property
    def dragging(self) -> bool:
        return self.anchor is not None

    @property
    def state(self) -> SelectionState:
        if self.editing_id is not None:
            return SelectionState.EDITING
        if self.dragging:
            return SelectionState.DRAGGING
        if self.selection is not None:
            return SelectionState.SELECTING_SINGLE
        return SelectionState.IDLE

    def click(self, day: DayLike) -> None:
        day = normalize_to_day(day)
        booking = self._occupant(day)
        if booking is not None:
            self.anchor = None
            self.editing_id = booking.id
            self.selection = booking.range
            return

        if self.dragging:
            return
        self.selection = DateRange.single(day)
        self.editing_id = None

    def pointer_down(self, day: DayLike) -> None:
        day = normalize_to_day(day)
        if self._occupant(day) is not None:
            return
        self.anchor = day
        self.selection = DateRange.single(day)
        self.editing_id = None

    def pointer_enter(self, day: DayLike) -> None:
        if self.anchor is None:
            return
        day = normalize_to_day(day)
        if self._occupant(day) is not None:
            logger.debug("Drag from %s stalled at occupied day %s", self.anchor, day)
            return
        self.selection = DateRange.spanning(self.anchor, day)

    def pointer_up(self) -> None:
        self.anchor = None

    def set_start(self, day: DayLike) -> None:
        """Start date typed into the form; the end follows if it would precede it."""
        start = normalize_to_day(day)
        end = self.selection.end if self.selection else start
        self.selection = DateRange(start, max(start, end))

    def set_end(self, day: DayLike) -> None:
        end = normalize_to_day(day)
        start = self.selection.start if self.selection else end
        self.selection = DateRange(min(start, end), end)

    def reset(self) -> None:
        self.selection = None
        self.editing_id = None
        self.anchor = None

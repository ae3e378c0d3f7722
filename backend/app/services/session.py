from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from typing import Any, Callable

from backend.app.services import locale
from backend.app.services.bookings import BookingStore
from backend.app.services.errors import BookingValidationError
from backend.app.services.form import BookingForm
from backend.app.services.models import Booking, BookingType
from backend.app.services.month_grid import MonthRef
from backend.app.services.notifications import EmailNotifier
from backend.app.services.presentation import booking_for_day, resolve_month
from backend.app.services.selection import SelectionMachine


logger = logging.getLogger(__name__)

DAY_EVENTS = {"click", "pointer_down", "pointer_enter", "set_start", "set_end"}


class CalendarSession:
    """Interaction state of one connected calendar client.

    ``bookings`` is only ever replaced wholesale from the store
    subscription, never patched after a local write.
    """

    def __init__(
        self,
        store: BookingStore,
        notifier: EmailNotifier,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.today = today
        self.bookings: list[Booking] = []
        self.month = MonthRef.of(today())
        self.machine = SelectionMachine(self.booking_at)
        self.form = BookingForm(store, self.machine, notifier)

    def booking_at(self, day: date) -> Booking | None:
        return booking_for_day(day, self.bookings)

    def replace_bookings(self, bookings: Iterable[Booking]) -> None:
        self.bookings = list(bookings)
        if self.form.editing is None:
            return
        current = next((b for b in self.bookings if b.id == self.form.editing.id), None)
        if current is None:
            logger.info("Booking %s disappeared while being edited", self.form.editing.id)
            self.form.cancel()
        else:
            self.form.editing = current

    async def handle(self, event: str, day: date | None = None, draft: dict[str, Any] | None = None) -> dict[str, Any]:
        if event in DAY_EVENTS:
            if day is None:
                raise BookingValidationError(f"{event} needs a day")
            getattr(self.machine, event)(day)
        elif event == "pointer_up":
            self.machine.pointer_up()
        elif event == "prev_month":
            self.month = self.month.shift(-1)
        elif event == "next_month":
            self.month = self.month.shift(1)
        elif event == "today":
            self.month = MonthRef.of(self.today())
        elif event == "draft":
            changes = dict(draft or {})
            if "type" in changes:
                changes["type"] = BookingType(changes["type"])
            self.form.edit_draft(**changes)
        elif event == "submit":
            await self.form.submit()
        elif event == "delete":
            await self.form.delete()
        elif event == "accept":
            await self.form.accept_wish()
        elif event == "cancel":
            self.form.cancel()
        else:
            raise BookingValidationError(f"Unknown calendar event {event!r}")

        self._sync_editing()
        return self.view()

    def _sync_editing(self) -> None:
        editing_id = self.machine.editing_id
        loaded_id = self.form.editing.id if self.form.editing else None
        if editing_id == loaded_id:
            return
        self.form.load(next((b for b in self.bookings if b.id == editing_id), None))

    def view(self) -> dict[str, Any]:
        selection = self.machine.selection
        days = resolve_month(self.month, self.today(), selection, self.bookings)
        return {
            "month": {
                "year": self.month.year,
                "month": self.month.month,
                "label": locale.month_label(self.month.year, self.month.month),
            },
            "weekdays": list(locale.DAY_NAMES),
            "days": [day.as_dict() for day in days],
            "state": self.machine.state.value,
            "selection": selection.as_dict() if selection else None,
            "selection_label": locale.format_range(selection) if selection else None,
            "editing": self.machine.editing_id,
            "form": self.form.as_dict(),
        }

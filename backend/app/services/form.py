from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from backend.app.services import locale
from backend.app.services.availability import ensure_available
from backend.app.services.bookings import BookingStore
from backend.app.services.dates import DateRange
from backend.app.services.errors import (
    BookingConflictError,
    BookingNotFound,
    BookingValidationError,
    StoreUnavailable,
)
from backend.app.services.models import Booking, BookingFields, BookingType
from backend.app.services.notifications import EmailNotifier
from backend.app.services.selection import SelectionMachine


logger = logging.getLogger(__name__)


@dataclass
class BookingDraft:
    name: str = ""
    note: str = ""
    color: str | None = None
    type: BookingType = BookingType.BOOKING

    @classmethod
    def from_booking(cls, booking: Booking) -> BookingDraft:
        return cls(
            name=booking.name,
            note=booking.note or "",
            color=booking.color,
            type=booking.type,
        )


def build_fields(draft: BookingDraft, selection: DateRange | None) -> BookingFields:
    """Validate a draft before any round trip to the store."""
    name = draft.name.strip()
    if not name:
        raise BookingValidationError(locale.NAME_REQUIRED)
    if selection is None:
        raise BookingValidationError(locale.DATES_REQUIRED)
    return BookingFields(
        name=name,
        start_date=selection.start,
        end_date=selection.end,
        type=draft.type,
        note=draft.note.strip() or None,
        color=draft.color,
    )


class BookingForm:
    """Side form state for one calendar session.

    Every action leaves the form interactive: failures only set ``error``
    and re-enable submission. Successful actions reset the selection.
    """

    def __init__(self, store: BookingStore, machine: SelectionMachine, notifier: EmailNotifier) -> None:
        self.store = store
        self.machine = machine
        self.notifier = notifier
        self.draft = BookingDraft()
        self.editing: Booking | None = None
        self.is_submitting = False
        self.error: str | None = None

    def load(self, booking: Booking | None) -> None:
        self.editing = booking
        self.draft = BookingDraft.from_booking(booking) if booking else BookingDraft()
        self.error = None

    def edit_draft(self, **changes: Any) -> None:
        for key, value in changes.items():
            if key == "type" and self.editing is not None:
                continue
            setattr(self.draft, key, value)

    async def submit(self) -> str | None:
        """Create or update from the draft; return the record id on success."""
        if self.is_submitting:
            return None
        try:
            fields = build_fields(self.draft, self.machine.selection)
        except BookingValidationError as exc:
            self.error = str(exc)
            return None

        self.is_submitting = True
        self.error = None
        editing_id = self.editing.id if self.editing else None
        try:
            await ensure_available(self.store, fields.range, editing_id)
            if editing_id is not None:
                await self.store.update(editing_id, fields)
                booking_id = editing_id
            else:
                booking_id = await self.store.create(fields)
                self.notifier.schedule(fields.to_booking(booking_id))
        except BookingConflictError:
            self.error = locale.conflict_message(fields.type)
            return None
        except (StoreUnavailable, BookingNotFound):
            logger.exception("Error saving booking")
            self.error = locale.SAVE_FAILED
            return None
        finally:
            self.is_submitting = False

        self._finish()
        return booking_id

    async def delete(self) -> bool:
        if self.editing is None or self.is_submitting:
            return False
        self.is_submitting = True
        self.error = None
        try:
            await self.store.delete(self.editing.id)
        except (StoreUnavailable, BookingNotFound):
            logger.exception("Error deleting booking %s", self.editing.id)
            self.error = locale.DELETE_FAILED
            return False
        finally:
            self.is_submitting = False
        self._finish()
        return True

    async def accept_wish(self) -> bool:
        if self.editing is None or not self.editing.is_wish or self.is_submitting:
            return False
        self.is_submitting = True
        self.error = None
        wish = self.editing
        try:
            await ensure_available(self.store, wish.range, wish.id)
            await self.store.accept(wish.id)
        except BookingConflictError:
            self.error = locale.WISH_OVERLAPS_BOOKING
            return False
        except (StoreUnavailable, BookingNotFound):
            logger.exception("Error accepting wish %s", wish.id)
            self.error = locale.ACCEPT_FAILED
            return False
        finally:
            self.is_submitting = False
        self._finish()
        return True

    def cancel(self) -> None:
        self._finish()

    def _finish(self) -> None:
        self.machine.reset()
        self.load(None)

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.draft.name,
            "note": self.draft.note,
            "color": self.draft.color,
            "type": self.draft.type.value,
            "editing": self.editing.as_dict() if self.editing else None,
            "is_submitting": self.is_submitting,
            "error": self.error,
        }

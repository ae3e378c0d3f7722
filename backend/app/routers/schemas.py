from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from backend.app.services.models import Booking, BookingColor, BookingFields, BookingType


class BookingIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    # Day granularity: "2024-06-10"
    start_date: date
    end_date: date
    type: BookingType = BookingType.BOOKING
    note: str | None = Field(default=None, max_length=1024)
    color: BookingColor | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("note")
    @classmethod
    def _blank_note_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def _check_order(self) -> "BookingIn":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    def to_fields(self) -> BookingFields:
        return BookingFields(
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            type=self.type,
            note=self.note,
            color=self.color.value if self.color else None,
        )


class BookingOut(BaseModel):
    id: str
    name: str
    start_date: date
    end_date: date
    created_at: datetime
    type: BookingType
    note: str | None = None
    color: str | None = None

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingOut":
        return cls(**booking.as_dict())


class BookingCreatedOut(BaseModel):
    id: str


class AcceptOut(BaseModel):
    id: str
    accepted: bool


class AvailabilityCheckIn(BaseModel):
    start_date: date
    end_date: date
    exclude_id: str | None = None

    @model_validator(mode="after")
    def _check_order(self) -> "AvailabilityCheckIn":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class AvailabilityCheckOut(BaseModel):
    available: bool
    start_date: date
    end_date: date
    conflict: BookingOut | None = None


class DraftIn(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    note: str | None = Field(default=None, max_length=1024)
    color: BookingColor | None = None
    type: BookingType | None = None

    def changes(self) -> dict:
        # Only fields the client sent; an explicit null color clears it.
        values = self.model_dump(exclude_unset=True, mode="json")
        for key in ("name", "note"):
            if key in values and values[key] is None:
                values[key] = ""
        if values.get("type") is None:
            values.pop("type", None)
        return values


class CalendarEvent(BaseModel):
    event: Literal[
        "click",
        "pointer_down",
        "pointer_enter",
        "pointer_up",
        "set_start",
        "set_end",
        "prev_month",
        "next_month",
        "today",
        "draft",
        "submit",
        "delete",
        "accept",
        "cancel",
    ]
    day: date | None = None
    draft: DraftIn | None = None

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.app.routers.deps import get_store
from backend.app.routers.schemas import AvailabilityCheckIn, AvailabilityCheckOut, BookingOut
from backend.app.services.availability import find_conflict
from backend.app.services.bookings import BookingStore
from backend.app.services.dates import DateRange
from backend.app.services.errors import StoreUnavailable


router = APIRouter()


@router.post("/availability/check", response_model=AvailabilityCheckOut)
async def check_availability(
    payload: AvailabilityCheckIn,
    store: BookingStore = Depends(get_store),
) -> AvailabilityCheckOut:
    """Advisory check against a snapshot; a later write is not guaranteed to succeed."""
    candidate = DateRange(payload.start_date, payload.end_date)
    try:
        bookings = await store.list()
    except StoreUnavailable as exc:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Booking store unavailable") from exc

    conflict = find_conflict(candidate, bookings, payload.exclude_id)
    return AvailabilityCheckOut(
        available=conflict is None,
        start_date=candidate.start,
        end_date=candidate.end,
        conflict=BookingOut.from_booking(conflict) if conflict else None,
    )

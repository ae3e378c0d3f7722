import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status

from backend.app.routers.deps import get_notifier, get_store
from backend.app.routers.schemas import AcceptOut, BookingCreatedOut, BookingIn, BookingOut
from backend.app.services.availability import ensure_available
from backend.app.services.bookings import BookingStore
from backend.app.services.errors import (
    BookingConflictError,
    BookingError,
    BookingNotFound,
    BookingValidationError,
    StoreUnavailable,
)
from backend.app.services.notifications import EmailNotifier


logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http(exc: BookingError) -> HTTPException:
    if isinstance(exc, BookingConflictError):
        return HTTPException(
            status.HTTP_409_CONFLICT,
            detail={
                "message": "Dates already booked",
                "conflict": BookingOut.from_booking(exc.conflict).model_dump(mode="json"),
            },
        )
    if isinstance(exc, BookingNotFound):
        return HTTPException(status.HTTP_404_NOT_FOUND, detail="Booking not found")
    if isinstance(exc, BookingValidationError):
        return HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, StoreUnavailable):
        logger.warning("Store round trip failed: %s", exc, exc_info=exc.__cause__)
        return HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Booking store unavailable")
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unexpected booking error")


@router.get("/bookings", response_model=list[BookingOut])
async def list_bookings(store: BookingStore = Depends(get_store)) -> list[BookingOut]:
    try:
        bookings = await store.list()
    except BookingError as exc:
        raise _to_http(exc) from exc
    return [BookingOut.from_booking(booking) for booking in bookings]


@router.get("/bookings/{booking_id}", response_model=BookingOut)
async def get_booking(booking_id: str, store: BookingStore = Depends(get_store)) -> BookingOut:
    try:
        booking = await store.get(booking_id)
    except BookingError as exc:
        raise _to_http(exc) from exc
    if booking is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return BookingOut.from_booking(booking)


@router.post("/bookings", response_model=BookingCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingIn,
    background_tasks: BackgroundTasks,
    store: BookingStore = Depends(get_store),
    notifier: EmailNotifier = Depends(get_notifier),
) -> BookingCreatedOut:
    fields = payload.to_fields()
    try:
        await ensure_available(store, fields.range)
        booking_id = await store.create(fields)
    except BookingError as exc:
        raise _to_http(exc) from exc

    background_tasks.add_task(notifier.send, fields.to_booking(booking_id))
    return BookingCreatedOut(id=booking_id)


@router.put("/bookings/{booking_id}", response_model=BookingOut)
async def update_booking(
    booking_id: str,
    payload: BookingIn,
    store: BookingStore = Depends(get_store),
) -> BookingOut:
    fields = payload.to_fields()
    try:
        await ensure_available(store, fields.range, exclude_id=booking_id)
        await store.update(booking_id, fields)
        booking = await store.get(booking_id)
    except BookingError as exc:
        raise _to_http(exc) from exc
    if booking is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return BookingOut.from_booking(booking)


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(booking_id: str, store: BookingStore = Depends(get_store)) -> Response:
    try:
        await store.delete(booking_id)
    except BookingError as exc:
        raise _to_http(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/bookings/{booking_id}/accept", response_model=AcceptOut)
async def accept_wish(booking_id: str, store: BookingStore = Depends(get_store)) -> AcceptOut:
    """Turn a wish into a booking. Accepting a booking again is a no-op."""
    try:
        wish = await store.get(booking_id)
        if wish is None:
            raise BookingNotFound(booking_id)
        if not wish.is_wish:
            return AcceptOut(id=booking_id, accepted=False)
        await ensure_available(store, wish.range, exclude_id=booking_id)
        accepted = await store.accept(booking_id)
    except BookingError as exc:
        raise _to_http(exc) from exc
    return AcceptOut(id=booking_id, accepted=accepted)

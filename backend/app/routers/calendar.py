import asyncio
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Path, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from backend.app.routers.deps import get_notifier, get_store
from backend.app.routers.schemas import CalendarEvent
from backend.app.services import locale
from backend.app.services.bookings import BookingStore
from backend.app.services.dates import DateRange
from backend.app.services.errors import BookingValidationError, StoreUnavailable
from backend.app.services.month_grid import MAX_YEAR, MIN_YEAR, MonthRef
from backend.app.services.notifications import EmailNotifier
from backend.app.services.presentation import resolve_month
from backend.app.services.session import CalendarSession


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/calendar/{year}/{month}")
async def month_view(
    year: int = Path(ge=MIN_YEAR, le=MAX_YEAR),
    month: int = Path(ge=1, le=12),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    store: BookingStore = Depends(get_store),
) -> dict:
    """Render the 42-day grid of a month, optionally with a selection overlaid."""
    if (start is None) != (end is None):
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail="start and end go together")
    try:
        selection = DateRange(start, end) if start and end else None
    except ValueError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    try:
        bookings = await store.list()
    except StoreUnavailable as exc:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Booking store unavailable") from exc

    ref = MonthRef(year, month)
    days = resolve_month(ref, date.today(), selection, bookings)
    return {
        "month": {"year": year, "month": month, "label": locale.month_label(year, month)},
        "weekdays": list(locale.DAY_NAMES),
        "days": [day.as_dict() for day in days],
    }


@router.websocket("/ws/calendar")
async def calendar_socket(
    websocket: WebSocket,
    store: BookingStore = Depends(get_store),
    notifier: EmailNotifier = Depends(get_notifier),
) -> None:
    # One socket per open calendar: client pointer/form events in, rendered views out.
    await websocket.accept()
    session = CalendarSession(store, notifier)
    send_lock = asyncio.Lock()

    async def push(payload: dict) -> None:
        async with send_lock:
            await websocket.send_json(payload)

    async def pump_bookings(snapshots) -> None:
        async for bookings in snapshots:
            session.replace_bookings(bookings)
            await push(session.view())

    async def pump_events() -> None:
        while True:
            raw = await websocket.receive_json()
            try:
                event = CalendarEvent.model_validate(raw)
                view = await session.handle(
                    event.event,
                    day=event.day,
                    draft=event.draft.changes() if event.draft else None,
                )
            except (ValidationError, BookingValidationError) as exc:
                await push({"error": str(exc)})
                continue
            await push(view)

    try:
        async with store.subscribe() as snapshots:
            tasks = [asyncio.create_task(pump_events()), asyncio.create_task(pump_bookings(snapshots))]
            try:
                done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            finally:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
    except StoreUnavailable:
        logger.exception("Calendar socket lost the bookings subscription")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    for task in done:
        exc = task.exception()
        if isinstance(exc, StoreUnavailable):
            logger.error("Calendar socket lost the bookings subscription", exc_info=exc)
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        elif exc is not None and not isinstance(exc, WebSocketDisconnect):
            logger.error("Calendar socket failed", exc_info=exc)

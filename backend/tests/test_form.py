import asyncio
import json
from datetime import date

import pytest

from backend.app.services import locale
from backend.app.services.bookings import BookingStore
from backend.app.services.errors import StoreUnavailable
from backend.app.services.models import BookingType
from backend.app.services.month_grid import MAX_YEAR, MIN_YEAR, MonthRef
from backend.app.services.session import CalendarSession


pytestmark = pytest.mark.asyncio


class BrokenStore(BookingStore):
    async def list(self):
        raise StoreUnavailable("list")


def june(day: int) -> date:
    return date(2024, 6, day)


async def open_session(store, notifier) -> CalendarSession:
    session = CalendarSession(store, notifier, today=lambda: june(1))
    session.replace_bookings(await store.list())
    return session


async def test_submit_validates_before_round_trip(store, notifier):
    session = await open_session(store, notifier)

    view = await session.handle("submit")
    assert view["form"]["error"] == locale.NAME_REQUIRED

    await session.handle("draft", draft={"name": "  Alice "})
    view = await session.handle("submit")
    assert view["form"]["error"] == locale.DATES_REQUIRED
    assert await store.list() == []


async def test_submit_creates_booking_resets_and_notifies(store, notifier, sent_emails):
    session = await open_session(store, notifier)
    await session.handle("pointer_down", day=june(10))
    await session.handle("pointer_enter", day=june(12))
    await session.handle("pointer_up")
    await session.handle("draft", draft={"name": "Alice", "note": "  ", "color": "green"})

    view = await session.handle("submit")

    assert view["form"]["error"] is None
    assert view["selection"] is None
    assert view["state"] == "idle"
    [alice] = await store.list()
    assert alice.name == "Alice"
    assert alice.note is None
    assert alice.color == "green"
    assert (alice.start_date, alice.end_date) == (june(10), june(12))

    await asyncio.gather(*notifier._pending)
    [request] = sent_emails
    params = json.loads(request.content)["template_params"]
    assert params["booking_name"] == "Alice"
    assert params["date_range"] == "10. juni 2024 - 12. juni 2024"
    assert params["booking_type"] == "booking"


async def test_conflict_messages_differ_for_wishes(store, notifier, make_fields):
    await store.create(make_fields("Alice", "2024-06-10", "2024-06-12"))
    session = await open_session(store, notifier)

    await session.handle("click", day=june(12))  # occupied: enters editing
    await session.handle("cancel")
    await session.handle("set_start", day=june(11))
    await session.handle("set_end", day=june(14))
    await session.handle("draft", draft={"name": "Bob"})
    view = await session.handle("submit")
    assert view["form"]["error"] == locale.DATES_BOOKED

    await session.handle("draft", draft={"type": "wish"})
    view = await session.handle("submit")
    assert view["form"]["error"] == locale.DATES_BOOKED_FOR_WISH
    assert view["form"]["is_submitting"] is False
    assert len(await store.list()) == 1


async def test_editing_own_booking_is_not_a_conflict(store, notifier, make_fields):
    alice_id = await store.create(make_fields("Alice", "2024-06-10", "2024-06-12"))
    session = await open_session(store, notifier)

    view = await session.handle("click", day=june(11))
    assert view["editing"] == alice_id
    assert view["form"]["name"] == "Alice"

    await session.handle("set_end", day=june(13))
    await session.handle("draft", draft={"note": "Kommer sent"})
    view = await session.handle("submit")

    assert view["form"]["error"] is None
    updated = await store.get(alice_id)
    assert updated.end_date == june(13)
    assert updated.note == "Kommer sent"


async def test_accept_and_delete_from_form(store, notifier, make_fields):
    wish_id = await store.create(make_fields("Bob", "2024-06-20", "2024-06-21", BookingType.WISH))
    session = await open_session(store, notifier)

    await session.handle("click", day=june(20))
    view = await session.handle("accept")
    assert view["state"] == "idle"
    assert (await store.get(wish_id)).type is BookingType.BOOKING

    session.replace_bookings(await store.list())
    await session.handle("click", day=june(21))
    view = await session.handle("delete")
    assert view["form"]["editing"] is None
    assert await store.list() == []


async def test_accept_refused_when_wish_overlaps_booking(store, notifier, make_fields):
    await store.create(make_fields("Alice", "2024-06-10", "2024-06-12"))
    wish_id = await store.create(make_fields("Bob", "2024-06-12", "2024-06-14", BookingType.WISH))
    session = await open_session(store, notifier)
    # Alice comes first in store order, so pick a day only the wish covers.
    await session.handle("click", day=june(14))

    view = await session.handle("accept")

    assert view["form"]["error"] == locale.WISH_OVERLAPS_BOOKING
    assert (await store.get(wish_id)).type is BookingType.WISH


async def test_transport_failure_keeps_form_open(session_factory, redis_server, notifier, caplog):
    import fakeredis

    client = fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)
    session = CalendarSession(BrokenStore(session_factory, client), notifier, today=lambda: june(1))
    await session.handle("click", day=june(3))
    await session.handle("draft", draft={"name": "Alice"})

    view = await session.handle("submit")

    assert view["form"]["error"] == locale.SAVE_FAILED
    assert view["form"]["is_submitting"] is False
    assert view["selection"] == {"start": "2024-06-03", "end": "2024-06-03"}
    assert "Error saving booking" in caplog.text
    await client.aclose()


async def test_remote_delete_while_editing_resets_form(store, notifier, make_fields):
    alice_id = await store.create(make_fields("Alice", "2024-06-10", "2024-06-12"))
    session = await open_session(store, notifier)
    await session.handle("click", day=june(10))
    assert session.form.editing.id == alice_id

    await store.delete(alice_id)
    session.replace_bookings(await store.list())

    assert session.form.editing is None
    assert session.machine.selection is None


async def test_month_navigation_keeps_selection(store, notifier):
    session = await open_session(store, notifier)
    await session.handle("click", day=june(3))

    view = await session.handle("next_month")
    assert view["month"]["label"] == "Juli 2024"
    assert view["selection"] == {"start": "2024-06-03", "end": "2024-06-03"}

    view = await session.handle("today")
    assert (view["month"]["year"], view["month"]["month"]) == (2024, 6)
    assert len(view["days"]) == 42


async def test_submit_saves_once_when_announcement_fails(store, notifier, redis_server):
    session = await open_session(store, notifier)
    await session.handle("click", day=june(20))
    await session.handle("draft", draft={"name": "Bob", "type": "wish"})

    redis_server.connected = False
    try:
        view = await session.handle("submit")
    finally:
        redis_server.connected = True

    assert view["form"]["error"] is None
    assert view["state"] == "idle"
    assert [(b.name, b.type) for b in await store.list()] == [("Bob", BookingType.WISH)]


async def test_month_navigation_stops_at_calendar_edges(store, notifier):
    session = await open_session(store, notifier)

    session.month = MonthRef(MAX_YEAR, 12)
    view = await session.handle("next_month")
    assert (view["month"]["year"], view["month"]["month"]) == (MAX_YEAR, 12)
    assert len(view["days"]) == 42

    session.month = MonthRef(MIN_YEAR, 1)
    view = await session.handle("prev_month")
    assert (view["month"]["year"], view["month"]["month"]) == (MIN_YEAR, 1)
    assert view["days"][0] == date(MIN_YEAR, 1, 1).isoformat()

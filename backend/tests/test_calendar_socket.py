import asyncio
from contextlib import asynccontextmanager
from datetime import date

import fakeredis
import pytest
from fastapi import WebSocketDisconnect, status
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from backend.app.db.tables import metadata
from backend.app.main import app
from backend.app.routers.deps import get_notifier, get_store
from backend.app.services.bookings import BookingStore
from backend.app.services.errors import StoreUnavailable
from backend.app.services.notifications import EmailNotifier


async def _create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


def test_calendar_socket_round_trip(db_url, redis_server):
    engine = create_async_engine(db_url, poolclass=NullPool)
    asyncio.run(_create_tables(engine))
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    # Built inside the app's event loop, which the TestClient runs in its own thread.
    async def store_override() -> BookingStore:
        return BookingStore(factory, fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True))

    app.dependency_overrides[get_store] = store_override
    app.dependency_overrides[get_notifier] = lambda: EmailNotifier(None, None, None)
    today = date.today().isoformat()
    try:
        client = TestClient(app)
        with client.websocket_connect("/api/v1/ws/calendar") as ws:
            initial = ws.receive_json()
            assert initial["state"] == "idle"
            assert len(initial["days"]) == 42
            assert today in {d["day"] for d in initial["days"]}

            ws.send_json({"event": "click", "day": today})
            clicked = ws.receive_json()
            assert clicked["selection"] == {"start": today, "end": today}

            ws.send_json({"event": "bogus"})
            assert "error" in ws.receive_json()

            ws.send_json({"event": "draft", "draft": {"name": "Alice"}})
            assert ws.receive_json()["form"]["name"] == "Alice"

            ws.send_json({"event": "submit"})
            views = [ws.receive_json(), ws.receive_json()]
            assert all(v["selection"] is None for v in views)
            booked = [
                d for v in views for d in v["days"]
                if d["day"] == today and d["booking"] is not None
            ]
            assert booked and booked[0]["booking"]["name"] == "Alice"
    finally:
        app.dependency_overrides.clear()
        asyncio.run(engine.dispose())


class LostSubscriptionStore(BookingStore):
    @asynccontextmanager
    async def subscribe(self):
        async def snapshots():
            yield []
            raise StoreUnavailable("list")

        yield snapshots()


def test_calendar_socket_closes_when_store_is_lost(db_url, redis_server):
    engine = create_async_engine(db_url, poolclass=NullPool)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async def store_override() -> BookingStore:
        return LostSubscriptionStore(factory, fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True))

    app.dependency_overrides[get_store] = store_override
    app.dependency_overrides[get_notifier] = lambda: EmailNotifier(None, None, None)
    try:
        client = TestClient(app)
        with client.websocket_connect("/api/v1/ws/calendar") as ws:
            assert ws.receive_json()["state"] == "idle"
            with pytest.raises(WebSocketDisconnect) as info:
                ws.receive_json()
            assert info.value.code == status.WS_1011_INTERNAL_ERROR
    finally:
        app.dependency_overrides.clear()
        asyncio.run(engine.dispose())

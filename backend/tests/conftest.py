import os

# Settings are read at import time; the suite never talks to real services.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from datetime import date

import fakeredis
import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from backend.app.db.tables import metadata
from backend.app.services.bookings import BookingStore
from backend.app.services.models import BookingFields, BookingType
from backend.app.services.notifications import EmailNotifier


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}"


@pytest_asyncio.fixture
async def session_factory(db_url):
    engine = create_async_engine(db_url, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def store(session_factory, redis_server):
    client = fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)
    yield BookingStore(session_factory, client)
    await client.aclose()


@pytest.fixture
def sent_emails():
    return []


@pytest.fixture
def notifier(sent_emails):
    def handler(request: httpx.Request) -> httpx.Response:
        sent_emails.append(request)
        return httpx.Response(200, text="OK")

    return EmailNotifier(
        "service_test",
        "template_test",
        "public_test",
        transport=httpx.MockTransport(handler),
    )


def fields(
    name: str,
    start: str,
    end: str,
    booking_type: BookingType = BookingType.BOOKING,
    **extra,
) -> BookingFields:
    return BookingFields(
        name=name,
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end),
        type=booking_type,
        **extra,
    )


@pytest.fixture
def make_fields():
    return fields

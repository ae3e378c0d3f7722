from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.app.core.config import settings
from backend.app.core.logging_config import configure_logging
from backend.app.core.redis_client import close_redis, create_redis
from backend.app.db.session import SessionLocal, engine
from backend.app.services.bookings import BookingStore
from backend.app.services.notifications import EmailNotifier
import backend.app.routers.availability as availability
import backend.app.routers.bookings as bookings
import backend.app.routers.calendar as calendar
import backend.app.routers.health as health


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    redis_client = create_redis()
    app.state.store = BookingStore(SessionLocal, redis_client, channel=settings.BOOKINGS_CHANNEL)
    app.state.notifier = EmailNotifier.from_settings(settings)
    try:
        yield
    finally:
        app.state.store = None
        await close_redis(redis_client)
        await engine.dispose()


app = FastAPI(
    title="Summerhouse Calendar API",
    lifespan=lifespan,
)

app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(availability.router, prefix=settings.API_PREFIX)
app.include_router(bookings.router, prefix=settings.API_PREFIX)
app.include_router(calendar.router, prefix=settings.API_PREFIX)

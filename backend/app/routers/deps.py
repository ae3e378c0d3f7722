from fastapi import HTTPException, status
from fastapi.requests import HTTPConnection

from backend.app.services.bookings import BookingStore
from backend.app.services.notifications import EmailNotifier


def get_store(connection: HTTPConnection) -> BookingStore:
    """The store built by the application lifespan; shared by HTTP and WebSocket routes."""
    store = getattr(connection.app.state, "store", None)
    if store is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Booking store unavailable")
    return store


def get_notifier(connection: HTTPConnection) -> EmailNotifier:
    notifier = getattr(connection.app.state, "notifier", None)
    if notifier is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Notifier unavailable")
    return notifier

from fastapi import APIRouter, Depends, HTTPException

from backend.app.routers.deps import get_store
from backend.app.services.bookings import BookingStore
from backend.app.services.errors import StoreUnavailable


router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, bool]:
    """Basic liveness probe."""
    return {"ok": True}


@router.get("/readiness")
async def readiness(store: BookingStore = Depends(get_store)) -> dict[str, bool]:
    """Ensure the bookings database and Redis are reachable."""
    try:
        await store.ping()
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail="Booking store unavailable") from exc
    return {"ready": True}

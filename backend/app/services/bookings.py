from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from uuid import uuid4

import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy import delete, insert, select, text, update
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.app.db.tables import booking as booking_table
from backend.app.services.errors import BookingNotFound, StoreUnavailable
from backend.app.services.models import Booking, BookingFields, BookingType


logger = logging.getLogger(__name__)


def _row_to_booking(row: Row) -> Booking:
    return Booking(
        id=row.id,
        name=row.name,
        start_date=row.start_date,
        end_date=row.end_date,
        created_at=row.created_at,
        type=BookingType(row.type),
        note=row.note,
        color=row.color,
    )


@asynccontextmanager
async def _round_trip(action: str) -> AsyncIterator[None]:
    try:
        yield
    except (SQLAlchemyError, RedisError, OSError) as exc:
        raise StoreUnavailable(action) from exc


class BookingStore:
    """Bookings table plus a Redis channel announcing every write.

    Subscribers never receive deltas: each announcement makes them re-read
    and receive the complete list.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        redis_client: redis.Redis,
        channel: str = "bookings:changed",
    ) -> None:
        self._session_factory = session_factory
        self._redis = redis_client
        self.channel = channel

    async def list(self) -> list[Booking]:
        query = select(booking_table).order_by(booking_table.c.start_date, booking_table.c.created_at)
        async with _round_trip("list"):
            async with self._session_factory() as session:
                result = await session.execute(query)
                return [_row_to_booking(row) for row in result]

    async def get(self, booking_id: str) -> Booking | None:
        query = select(booking_table).where(booking_table.c.id == booking_id)
        async with _round_trip("get"):
            async with self._session_factory() as session:
                row = (await session.execute(query)).one_or_none()
        return _row_to_booking(row) if row is not None else None

    async def create(self, fields: BookingFields) -> str:
        """Insert a booking or wish and return its new id."""
        booking_id = str(uuid4())
        values = {
            "id": booking_id,
            "name": fields.name,
            "start_date": fields.start_date,
            "end_date": fields.end_date,
            "created_at": datetime.now(timezone.utc),
            "type": fields.type.value,
        }
        if fields.note is not None:
            values["note"] = fields.note
        if fields.color is not None:
            values["color"] = fields.color

        async with _round_trip("create"):
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(insert(booking_table).values(**values))
        await self._announce("created", booking_id)
        return booking_id

    async def update(self, booking_id: str, fields: BookingFields) -> None:
        # note/color are always written so that None clears them.
        statement = (
            update(booking_table)
            .where(booking_table.c.id == booking_id)
            .values(
                name=fields.name,
                start_date=fields.start_date,
                end_date=fields.end_date,
                type=fields.type.value,
                note=fields.note,
                color=fields.color,
            )
        )
        async with _round_trip("update"):
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(statement)
        if result.rowcount == 0:
            raise BookingNotFound(booking_id)
        await self._announce("updated", booking_id)

    async def delete(self, booking_id: str) -> None:
        async with _round_trip("delete"):
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(booking_table).where(booking_table.c.id == booking_id)
                    )
        if result.rowcount == 0:
            raise BookingNotFound(booking_id)
        await self._announce("deleted", booking_id)

    async def accept(self, booking_id: str) -> bool:
        """Turn a wish into a booking.

        Returns False without writing when the record already is a booking.
        """
        statement = (
            update(booking_table)
            .where(booking_table.c.id == booking_id)
            .where(booking_table.c.type == BookingType.WISH.value)
            .values(type=BookingType.BOOKING.value)
        )
        async with _round_trip("accept"):
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(statement)
                    if result.rowcount == 0:
                        exists = await session.execute(
                            select(booking_table.c.id).where(booking_table.c.id == booking_id)
                        )
                        if exists.first() is None:
                            raise BookingNotFound(booking_id)
                        return False
        await self._announce("accepted", booking_id)
        return True

    async def ping(self) -> None:
        async with _round_trip("ping"):
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            await self._redis.ping()

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[AsyncIterator[list[Booking]]]:
        """Hold a subscription for the duration of the ``async with`` block.

        The yielded iterator produces the current list first, then a fresh
        list after every announced write.
        """
        pubsub = self._redis.pubsub()
        async with _round_trip("subscribe"):
            await pubsub.subscribe(self.channel)
        try:
            yield self._snapshots(pubsub)
        finally:
            try:
                await pubsub.unsubscribe(self.channel)
            finally:
                await pubsub.aclose()

    async def _snapshots(self, pubsub) -> AsyncIterator[list[Booking]]:
        yield await self.list()
        async for message in pubsub.listen():
            if message["type"] != "message":
                continue
            logger.debug("Booking change announced: %s", message["data"])
            yield await self.list()

    async def _announce(self, action: str, booking_id: str) -> None:
        # The write is already committed; a lost announcement only delays live views.
        try:
            await self._redis.publish(self.channel, json.dumps({"action": action, "id": booking_id}))
        except (RedisError, OSError):
            logger.exception("Could not announce %s of booking %s", action, booking_id)

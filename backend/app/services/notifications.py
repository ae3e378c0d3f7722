from __future__ import annotations

import asyncio
import logging

import httpx

from backend.app.core.config import Settings
from backend.app.services import locale
from backend.app.services.models import Booking


logger = logging.getLogger(__name__)

EMAILJS_SEND_URL = "https://api.emailjs.com/api/v1.0/email/send"


def template_params(booking: Booking) -> dict[str, str]:
    return {
        "booking_name": booking.name,
        "start_date": locale.format_day(booking.start_date),
        "end_date": locale.format_day(booking.end_date),
        "date_range": locale.format_range(booking.range),
        "booking_type": locale.TYPE_LABELS[booking.type],
        "note": booking.note or "",
    }


class EmailNotifier:
    """Fire-and-forget EmailJS sender. Failures are logged, never raised."""

    def __init__(
        self,
        service_id: str | None,
        template_id: str | None,
        public_key: str | None,
        url: str = EMAILJS_SEND_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.service_id = service_id
        self.template_id = template_id
        self.public_key = public_key
        self.url = url
        self.timeout = timeout
        self._transport = transport
        self._pending: set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> EmailNotifier:
        return cls(
            settings.EMAILJS_SERVICE_ID,
            settings.EMAILJS_TEMPLATE_ID,
            settings.EMAILJS_PUBLIC_KEY,
            url=settings.EMAILJS_URL,
            timeout=settings.NOTIFY_TIMEOUT_SECONDS,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.service_id and self.template_id and self.public_key)

    async def send(self, booking: Booking) -> None:
        if not self.enabled:
            logger.debug("EmailJS not configured, skipping notification for %s", booking.id)
            return

        payload = {
            "service_id": self.service_id,
            "template_id": self.template_id,
            "user_id": self.public_key,
            "template_params": template_params(booking),
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Error sending email for booking %s: %s", booking.id, exc)
            return
        logger.info("Email sent for booking %s", booking.id)

    def schedule(self, booking: Booking) -> asyncio.Task:
        task = asyncio.create_task(self.send(booking))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

import json
import logging
from datetime import date, datetime, timezone

import httpx
import pytest

from backend.app.services.models import Booking, BookingType
from backend.app.services.notifications import EmailNotifier, template_params


pytestmark = pytest.mark.asyncio


WISH = Booking(
    id="w1",
    name="Bob",
    start_date=date(2024, 7, 1),
    end_date=date(2024, 7, 1),
    created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    type=BookingType.WISH,
    note="Hvis det passer",
)


async def test_template_params_use_danish_dates():
    params = template_params(WISH)
    assert params == {
        "booking_name": "Bob",
        "start_date": "1. juli 2024",
        "end_date": "1. juli 2024",
        "date_range": "1. juli 2024",
        "booking_type": "ønsket",
        "note": "Hvis det passer",
    }


async def test_send_posts_emailjs_payload(notifier, sent_emails):
    await notifier.send(WISH)

    [request] = sent_emails
    assert request.method == "POST"
    body = json.loads(request.content)
    assert body["service_id"] == "service_test"
    assert body["template_id"] == "template_test"
    assert body["user_id"] == "public_test"
    assert body["template_params"]["booking_name"] == "Bob"


async def test_send_failure_is_logged_not_raised(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text="The template ID is invalid")

    notifier = EmailNotifier("s", "t", "k", transport=httpx.MockTransport(handler))
    with caplog.at_level(logging.ERROR):
        await notifier.send(WISH)
    assert "Error sending email" in caplog.text


async def test_unconfigured_notifier_sends_nothing(sent_emails):
    notifier = EmailNotifier(None, None, None)
    assert not notifier.enabled
    await notifier.send(WISH)
    assert sent_emails == []

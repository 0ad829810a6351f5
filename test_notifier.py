"""Tests for the reminder notifiers."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from config import Settings
from notifier import LoggingNotifier, Notifier, WebhookNotifier, build_notifier, format_reminder_message

SCHEDULED = datetime(2026, 10, 20, 14, 5, tzinfo=timezone.utc)


def test_message_uses_subject_name_and_local_time(make_appointment):
    appointment = make_appointment(SCHEDULED)

    assert format_reminder_message(appointment) == (
        "Reminder: appointment with Dr. Lee on October 20, 2026 at 14:05"
    )
    assert format_reminder_message(appointment, "Asia/Kolkata") == (
        "Reminder: appointment with Dr. Lee on October 20, 2026 at 19:35"
    )


@pytest.mark.asyncio
async def test_logging_notifier_always_succeeds(make_appointment):
    appointment = make_appointment(SCHEDULED)

    assert await LoggingNotifier().send(appointment, "hello") is True


@pytest.mark.asyncio
async def test_webhook_posts_reminder_payload(make_appointment):
    appointment = make_appointment(SCHEDULED)
    received = []

    def handler(request):
        received.append(json.loads(request.content))
        return httpx.Response(202)

    notifier = WebhookNotifier("https://push.example.test/notify", transport=httpx.MockTransport(handler))

    assert await notifier.send(appointment, "see you tomorrow") is True
    assert received == [{
        "appointment_id": appointment.id,
        "user_id": "user-1",
        "pediatrician": "Dr. Lee",
        "scheduled_at": "2026-10-20T14:05:00+00:00",
        "message": "see you tomorrow",
    }]


@pytest.mark.asyncio
async def test_webhook_error_status_is_failure(make_appointment):
    appointment = make_appointment(SCHEDULED)
    notifier = WebhookNotifier(
        "https://push.example.test/notify",
        transport=httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable"))
    )

    assert await notifier.send(appointment, "msg") is False


@pytest.mark.asyncio
async def test_webhook_timeout_is_failure(make_appointment):
    appointment = make_appointment(SCHEDULED)

    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    notifier = WebhookNotifier("https://push.example.test/notify", transport=httpx.MockTransport(handler))

    assert await notifier.send(appointment, "msg") is False


def test_build_notifier_follows_settings():
    assert isinstance(build_notifier(Settings(NOTIFIER_WEBHOOK_URL=None)), LoggingNotifier)

    webhook = build_notifier(Settings(NOTIFIER_WEBHOOK_URL="https://push.example.test", NOTIFIER_TIMEOUT=3))
    assert isinstance(webhook, WebhookNotifier)
    assert webhook.timeout == 3


def test_notifier_without_send_cannot_be_instantiated():
    class Incomplete(Notifier):
        pass

    with pytest.raises(TypeError):
        Incomplete()

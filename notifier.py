"""Notification adapters for appointment reminders.

The reminder dispatcher only needs `send(appointment, message) -> bool`.
Delivery transport lives here:
- LoggingNotifier: writes the reminder to the log (default)
- WebhookNotifier: POSTs the reminder to an HTTP endpoint

A notifier reports failure by returning False; it must not raise for
transport problems.
"""

from abc import ABC, abstractmethod
from typing import Optional
from zoneinfo import ZoneInfo

import httpx

from database import Appointment, as_utc
from logger_config import setup_logger

logger = setup_logger(__name__, 'notifier.log')


def format_reminder_message(appointment: Appointment, tz_name: str = "UTC") -> str:
    """Compose the reminder text, e.g. 'Reminder: appointment with Dr. Lee on October 20, 2026 at 09:30'."""
    local = as_utc(appointment.scheduled_at).astimezone(ZoneInfo(tz_name))
    return (
        f"Reminder: appointment with {appointment.subject_name} "
        f"on {local:%B} {local.day}, {local.year} at {local:%H:%M}"
    )


class Notifier(ABC):
    """Delivers one reminder; returns False instead of raising on transport failure."""

    @abstractmethod
    async def send(self, appointment: Appointment, message: str) -> bool:
        ...


class LoggingNotifier(Notifier):
    """Records the reminder in the log and reports success."""

    async def send(self, appointment: Appointment, message: str) -> bool:
        logger.info(f"Sending reminder for appointment {appointment.id} (user {appointment.user_id}): {message}")
        return True


class WebhookNotifier(Notifier):
    """Delivers reminders by POSTing JSON to a webhook."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def send(self, appointment: Appointment, message: str) -> bool:
        """POST the reminder.

        Returns:
            bool: True on a 2xx response, False on timeout, network error or other status
        """
        payload = {
            "appointment_id": appointment.id,
            "user_id": appointment.user_id,
            "pediatrician": appointment.subject_name,
            "scheduled_at": as_utc(appointment.scheduled_at).isoformat(),
            "message": message,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)

            if response.is_success:
                logger.info(f"Reminder delivered for appointment {appointment.id}")
                return True

            logger.error(
                f"Failed to deliver reminder for appointment {appointment.id}. "
                f"Status: {response.status_code}, Response: {response.text}"
            )
            return False

        except httpx.TimeoutException:
            logger.error(f"Timeout while delivering reminder for appointment {appointment.id}")
            return False
        except httpx.RequestError as e:
            logger.error(f"Network error while delivering reminder for appointment {appointment.id}: {str(e)}")
            return False


def build_notifier(settings) -> Notifier:
    """Pick the notifier configured in settings."""
    if settings.NOTIFIER_WEBHOOK_URL:
        return WebhookNotifier(settings.NOTIFIER_WEBHOOK_URL, timeout=settings.NOTIFIER_TIMEOUT)
    return LoggingNotifier()

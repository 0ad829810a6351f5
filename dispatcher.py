"""Appointment reminder dispatcher.

One pass:
1. Compute the reminder window: the calendar day `lead_days` after today,
   as a half-open [start, end) range in the configured timezone
2. Load appointments in that window whose reminder is still unsent
3. For each one, in turn: notify, then mark reminder_sent with a
   compare-and-set update

A failed notification leaves the appointment unmarked so the next pass
picks it up again. A failed mark after a successful notification is logged;
that appointment may be notified twice.

Store reads and writes run in a worker thread via asyncio.to_thread.
"""

import asyncio
from datetime import datetime, time, timedelta, timezone
from typing import Tuple
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

import crud
from errors import PersistenceError
from logger_config import setup_logger
from notifier import Notifier, format_reminder_message
from schemas import DispatchResult

logger = setup_logger(__name__, 'dispatcher.log')


def compute_reminder_window(
    now: datetime,
    lead_days: int = 1,
    tz_name: str = "UTC"
) -> Tuple[datetime, datetime]:
    """Return the [start, end) bounds, in UTC, of the day `lead_days` after `now`.

    Day boundaries are local midnights in `tz_name`; a naive `now` is taken as UTC.
    """
    tz = ZoneInfo(tz_name)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    target_day = now.astimezone(tz).date() + timedelta(days=lead_days)
    start = datetime.combine(target_day, time.min, tzinfo=tz)
    end = datetime.combine(target_day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


class ReminderDispatcher:
    """Sends one reminder per upcoming appointment."""

    def __init__(self, db: Session, notifier: Notifier, lead_days: int = 1, tz_name: str = "UTC"):
        self.db = db
        self.notifier = notifier
        self.lead_days = lead_days
        self.tz_name = tz_name

    async def run(self, now: datetime) -> DispatchResult:
        """Run a single dispatch pass.

        Raises:
            PersistenceError: If appointments cannot be loaded (nothing is sent)
        """
        window_start, window_end = compute_reminder_window(now, self.lead_days, self.tz_name)
        appointments = await asyncio.to_thread(
            crud.get_appointments_needing_reminder, self.db, window_start, window_end
        )
        result = DispatchResult()

        if not appointments:
            logger.info(f"No reminders due for window {window_start.isoformat()} - {window_end.isoformat()}")
            return result

        logger.info(
            f"Found {len(appointments)} appointment(s) needing a reminder "
            f"in window {window_start.isoformat()} - {window_end.isoformat()}"
        )

        # Snapshot before the loop: each commit expires loaded instances
        pending = [(appointment.id, appointment, format_reminder_message(appointment, self.tz_name))
                   for appointment in appointments]

        for appointment_id, appointment, message in pending:
            try:
                delivered = await self.notifier.send(appointment, message)
            except Exception as e:
                logger.error(f"Notifier raised for appointment {appointment_id}: {e!r}")
                delivered = False

            if not delivered:
                logger.warning(f"Reminder not delivered for appointment {appointment_id}; will retry next run")
                result.failures.append(appointment_id)
                continue

            result.notified += 1

            try:
                marked = await asyncio.to_thread(crud.mark_reminder_sent, self.db, appointment_id)
            except PersistenceError as e:
                logger.error(
                    f"Reminder delivered but not marked for appointment {appointment_id}; "
                    f"it may be sent again: {e.message}"
                )
                result.unmarked.append(appointment_id)
                continue

            if marked:
                logger.info(f"Reminder sent for appointment {appointment_id}")
            else:
                logger.warning(f"Appointment {appointment_id} was already marked by a concurrent run")
                result.already_handled.append(appointment_id)

        logger.info(
            f"Dispatch pass complete: notified={result.notified}, failures={len(result.failures)}, "
            f"already_handled={len(result.already_handled)}, unmarked={len(result.unmarked)}"
        )
        return result

"""Appointment health summary.

Builds the plain-text summary a pediatrician receives ahead of an
appointment: last week's sleep, the latest growth measurements, recent
health events and the appointment notes.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

import crud
from database import Activity, GrowthMeasurement, SleepRecord, as_utc
from errors import NotFoundError, ValidationError
from logger_config import setup_logger
from schemas import AppointmentSummary

logger = setup_logger(__name__, 'summary.log')

LOOKBACK_DAYS = 7


def _long_date(value: datetime) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def _short_date(value: datetime) -> str:
    return f"{value:%b} {value.day}"


def _format_measure(value: float, unit: Optional[str]) -> str:
    number = f"{value:g}"
    return f"{number}{unit or ''}"


def _sleep_section(records: List[SleepRecord]) -> str:
    total = sum(record.duration or 0 for record in records)
    hours, minutes = divmod(round(total / len(records)), 60)
    naps = sum(1 for record in records if record.type == "nap")
    nights = sum(1 for record in records if record.type == "night")
    return (
        f"Sleep Patterns (Last {LOOKBACK_DAYS} Days):\n"
        f"- Average sleep duration: {hours}h {minutes}m\n"
        f"- Number of naps: {naps}\n"
        f"- Night sleep sessions: {nights}\n\n"
    )


def _growth_section(growth: GrowthMeasurement) -> str:
    section = "Latest Growth Measurements:\n"
    if growth.weight:
        section += f"- Weight: {_format_measure(growth.weight, growth.weight_unit)}\n"
    if growth.height:
        section += f"- Height: {_format_measure(growth.height, growth.height_unit)}\n"
    if growth.head_circumference:
        section += f"- Head Circumference: {_format_measure(growth.head_circumference, growth.head_unit)}\n"
    return section + "\n"


def _health_events_section(events: List[Activity], tz: ZoneInfo) -> str:
    section = "Recent Health Events:\n"
    for event in events:
        label = event.type[:1].upper() + event.type[1:]
        notes = f" - {event.notes}" if event.notes else ""
        section += f"- {_short_date(as_utc(event.start_time).astimezone(tz))}: {label}{notes}\n"
    return section + "\n"


def build_appointment_summary(
    db: Session,
    appointment_id: Optional[str],
    now: Optional[datetime] = None,
    tz_name: str = "UTC"
) -> AppointmentSummary:
    """Compose the health summary for an appointment.

    Args:
        db: Database session
        appointment_id: Appointment to summarize
        now: Reference time for the 7-day lookback (default: current UTC time)
        tz_name: Timezone the appointment and event dates are shown in

    Raises:
        ValidationError: If appointment_id is missing
        NotFoundError: If the appointment does not exist
    """
    if not appointment_id:
        raise ValidationError("Appointment ID is required")

    appointment = crud.get_appointment(db, appointment_id)
    if appointment is None:
        raise NotFoundError("Appointment not found")

    tz = ZoneInfo(tz_name)
    now = now or datetime.now(timezone.utc)
    since = as_utc(now) - timedelta(days=LOOKBACK_DAYS)

    sleep_records = crud.get_sleep_records_since(db, appointment.user_id, since)
    health_events = crud.get_health_events_since(db, appointment.user_id, since)
    growth = crud.get_latest_growth_measurement(db, appointment.user_id)

    subject = f"Health Summary for Appointment on {_long_date(as_utc(appointment.scheduled_at).astimezone(tz))}"
    content = f"{subject}\n\n"

    if sleep_records:
        content += _sleep_section(sleep_records)
    if growth is not None:
        content += _growth_section(growth)
    if health_events:
        content += _health_events_section(health_events, tz)
    if appointment.notes:
        content += f"Appointment Notes:\n{appointment.notes}\n\n"

    recipient = appointment.pediatrician.email if appointment.pediatrician else None
    logger.info(
        f"Built summary for appointment {appointment_id}: {len(sleep_records)} sleep record(s), "
        f"{len(health_events)} health event(s), growth={'yes' if growth else 'no'}"
    )
    return AppointmentSummary(recipient=recipient, subject=subject, content=content)

"""CRUD operations for the Baby Care backend services.

This module provides the database reads and writes the services need.
IMPORTANT: All datetime parameters and return values are datetime objects, NOT strings.
"""

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime

from database import Appointment, SleepRecord, Activity, GrowthMeasurement, as_utc
from errors import PersistenceError
from logger_config import setup_logger

logger = setup_logger(__name__, 'crud.log')

HEALTH_EVENT_TYPES = ("temperature", "medication", "milestone")


def get_appointments_needing_reminder(
    db: Session,
    window_start: datetime,
    window_end: datetime
) -> List[Appointment]:
    """Get appointments inside [window_start, window_end) whose reminder is unsent.

    The reminder_sent filter is what makes repeated dispatch runs safe:
    appointments already handled are never selected again.

    Args:
        db: Database session
        window_start: Inclusive lower bound (timezone-aware)
        window_end: Exclusive upper bound (timezone-aware)

    Returns:
        List[Appointment]: Matching appointments, earliest first

    Raises:
        PersistenceError: If the query fails
    """
    stmt = (
        select(Appointment)
        .where(
            Appointment.scheduled_at >= as_utc(window_start),
            Appointment.scheduled_at < as_utc(window_end),
            Appointment.reminder_sent.is_(False),
        )
        .order_by(Appointment.scheduled_at)
    )
    try:
        return list(db.execute(stmt).unique().scalars())
    except SQLAlchemyError as e:
        logger.error(f"Failed to query appointments needing reminder: {str(e)}")
        raise PersistenceError(f"Could not load appointments: {str(e)}") from e


def mark_reminder_sent(db: Session, appointment_id: str) -> bool:
    """Flip reminder_sent to True, only if it is still False.

    This is a compare-and-set: a concurrent run that already marked the
    appointment leaves zero rows to update.

    Args:
        db: Database session
        appointment_id: Appointment ID

    Returns:
        bool: True if this call marked the appointment, False if it was already marked

    Raises:
        PersistenceError: If the update fails
    """
    stmt = (
        update(Appointment)
        .where(Appointment.id == appointment_id, Appointment.reminder_sent.is_(False))
        .values(reminder_sent=True)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.execute(stmt)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not mark reminder sent for {appointment_id}: {str(e)}") from e
    return result.rowcount == 1


def get_appointment(db: Session, appointment_id: str) -> Optional[Appointment]:
    """Get an appointment (with its pediatrician) by ID."""
    try:
        return db.get(Appointment, appointment_id)
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not load appointment {appointment_id}: {str(e)}") from e


def get_sleep_records_since(db: Session, user_id: str, since: datetime) -> List[SleepRecord]:
    """Sleep records for a user starting at or after `since`, newest first."""
    stmt = (
        select(SleepRecord)
        .where(SleepRecord.user_id == user_id, SleepRecord.start_time >= as_utc(since))
        .order_by(SleepRecord.start_time.desc())
    )
    try:
        return list(db.execute(stmt).scalars())
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not load sleep records: {str(e)}") from e


def get_health_events_since(db: Session, user_id: str, since: datetime) -> List[Activity]:
    """Temperature, medication and milestone activities since `since`, newest first."""
    stmt = (
        select(Activity)
        .where(
            Activity.user_id == user_id,
            Activity.type.in_(HEALTH_EVENT_TYPES),
            Activity.start_time >= as_utc(since),
        )
        .order_by(Activity.start_time.desc())
    )
    try:
        return list(db.execute(stmt).scalars())
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not load health events: {str(e)}") from e


def get_latest_growth_measurement(db: Session, user_id: str) -> Optional[GrowthMeasurement]:
    """Most recent growth measurement for a user, if any."""
    stmt = (
        select(GrowthMeasurement)
        .where(GrowthMeasurement.user_id == user_id)
        .order_by(GrowthMeasurement.date.desc())
        .limit(1)
    )
    try:
        return db.execute(stmt).scalars().first()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not load growth measurements: {str(e)}") from e

"""Database module for the Baby Care backend services.

This module defines SQLAlchemy models and database session management.
IMPORTANT: all timestamps are stored in UTC as DateTime objects, NOT strings.
"""

from sqlalchemy import (
    create_engine, Column, String, Integer, Float, Boolean, DateTime, Text, ForeignKey, Index
)
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from datetime import datetime, timezone
import uuid

from config import settings

# SQLAlchemy Base
Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return a timezone-aware UTC datetime.

    Naive values are taken as already being UTC and are tagged rather than converted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware DateTime normalized to UTC on the way in and out.

    SQLite drops the offset of an aware datetime when writing, so values are
    converted to UTC before they reach the driver. Naive inputs are taken as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)


class Pediatrician(Base):
    """A care provider that appointments are booked with."""

    __tablename__ = "pediatricians"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, nullable=False, doc="Display name used in reminders")
    email = Column(String, nullable=True, doc="Recipient for appointment health summaries")
    address = Column(String, nullable=True)

    appointments = relationship("Appointment", back_populates="pediatrician")

    def __repr__(self):
        return f"<Pediatrician(id={self.id}, name={self.name})>"


class Appointment(Base):
    """Scheduled appointment - the event the reminder dispatcher notifies about.

    CRITICAL: reminder_sent goes from False to True at most once and is never
    reset by the dispatcher.
    """

    __tablename__ = "appointments"

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True, doc="Owner of the appointment")
    pediatrician_id = Column(String, ForeignKey("pediatricians.id"), nullable=True)

    scheduled_at = Column(
        UTCDateTime(),
        nullable=False,
        doc="When the appointment takes place (UTC)"
    )
    notes = Column(Text, nullable=True)
    reminder_sent = Column(Boolean, nullable=False, default=False, doc="Reminder already delivered")

    created_at = Column(UTCDateTime(), nullable=False, default=_utcnow)

    pediatrician = relationship("Pediatrician", back_populates="appointments", lazy="joined")

    __table_args__ = (
        Index('idx_appointment_reminder', 'scheduled_at', 'reminder_sent'),
    )

    @property
    def subject_name(self) -> str:
        """Display name of the party the appointment is with."""
        if self.pediatrician is not None and self.pediatrician.name:
            return self.pediatrician.name
        return "your pediatrician"

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, user={self.user_id}, "
            f"scheduled_at={self.scheduled_at}, reminder_sent={self.reminder_sent})>"
        )


class SleepRecord(Base):
    """A single sleep session (nap or night)."""

    __tablename__ = "sleep_records"

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True)
    start_time = Column(UTCDateTime(), nullable=False)
    duration = Column(Integer, nullable=True, doc="Duration in minutes")
    type = Column(String, nullable=False, default="nap", doc="nap or night")


class Activity(Base):
    """Logged activity such as a temperature reading, medication or milestone."""

    __tablename__ = "activities"

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)
    start_time = Column(UTCDateTime(), nullable=False)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index('idx_activity_user_type_time', 'user_id', 'type', 'start_time'),
    )


class GrowthMeasurement(Base):
    """Weight, height and head circumference taken on a given date."""

    __tablename__ = "growth_measurements"

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True)
    date = Column(UTCDateTime(), nullable=False)
    weight = Column(Float, nullable=True)
    weight_unit = Column(String, nullable=True)
    height = Column(Float, nullable=True)
    height_unit = Column(String, nullable=True)
    head_circumference = Column(Float, nullable=True)
    head_unit = Column(String, nullable=True)


# Database Engine Setup
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {},
    echo=False  # Set to True for SQL debugging
)

# Session Factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Database session dependency for FastAPI.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Create all tables
Base.metadata.create_all(bind=engine)

"""Pytest configuration and shared fixtures."""

import os

# Keep tests off the on-disk database; must run before `database` is imported
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, Appointment, Pediatrician

# Fixed reference time: Monday 2026-10-19 10:00 UTC, so "tomorrow" is 2026-10-20
NOW = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    """Shared in-memory SQLite engine, one per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def pediatrician(db):
    doctor = Pediatrician(name="Dr. Lee", email="lee@clinic.example", address="1 Main St")
    db.add(doctor)
    db.commit()
    db.refresh(doctor)
    return doctor


@pytest.fixture
def make_appointment(db, pediatrician):
    """Factory that stores an appointment with the default pediatrician."""

    def _make(scheduled_at, reminder_sent=False, user_id="user-1", notes=None):
        appointment = Appointment(
            user_id=user_id,
            pediatrician_id=pediatrician.id,
            scheduled_at=scheduled_at,
            reminder_sent=reminder_sent,
            notes=notes,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make

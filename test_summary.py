"""Tests for the appointment health summary."""

from datetime import datetime, timedelta, timezone

import pytest

from conftest import NOW
from database import Activity, GrowthMeasurement, SleepRecord
from errors import NotFoundError, ValidationError
from summary import build_appointment_summary

APPOINTMENT_AT = datetime(2026, 10, 22, 15, 0, tzinfo=timezone.utc)


def test_minimal_summary_has_subject_only(db, make_appointment):
    appointment = make_appointment(APPOINTMENT_AT)

    summary = build_appointment_summary(db, appointment.id, now=NOW)

    assert summary.recipient == "lee@clinic.example"
    assert summary.subject == "Health Summary for Appointment on October 22, 2026"
    assert summary.content == "Health Summary for Appointment on October 22, 2026\n\n"


def test_full_summary_sections(db, make_appointment):
    appointment = make_appointment(APPOINTMENT_AT, notes="Ask about rash")
    db.add_all([
        SleepRecord(user_id="user-1", start_time=NOW - timedelta(days=1), duration=90, type="nap"),
        SleepRecord(user_id="user-1", start_time=NOW - timedelta(days=2), duration=600, type="night"),
        SleepRecord(user_id="user-1", start_time=NOW - timedelta(days=3), duration=45, type="nap"),
        # Outside the 7-day lookback and another user's record
        SleepRecord(user_id="user-1", start_time=NOW - timedelta(days=9), duration=999, type="night"),
        SleepRecord(user_id="user-2", start_time=NOW - timedelta(days=1), duration=999, type="night"),
        GrowthMeasurement(user_id="user-1", date=NOW - timedelta(days=30), weight=5.0, weight_unit="kg"),
        GrowthMeasurement(
            user_id="user-1", date=NOW - timedelta(days=2),
            weight=6.2, weight_unit="kg", height=61.5, height_unit="cm"
        ),
        Activity(user_id="user-1", type="temperature", start_time=NOW - timedelta(days=4), notes="38.1C"),
        Activity(user_id="user-1", type="milestone", start_time=NOW - timedelta(days=1)),
        Activity(user_id="user-1", type="feeding", start_time=NOW - timedelta(days=1), notes="bottle"),
    ])
    db.commit()

    summary = build_appointment_summary(db, appointment.id, now=NOW)

    # (90 + 600 + 45) / 3 = 245 minutes
    assert summary.content == (
        "Health Summary for Appointment on October 22, 2026\n\n"
        "Sleep Patterns (Last 7 Days):\n"
        "- Average sleep duration: 4h 5m\n"
        "- Number of naps: 2\n"
        "- Night sleep sessions: 1\n\n"
        "Latest Growth Measurements:\n"
        "- Weight: 6.2kg\n"
        "- Height: 61.5cm\n\n"
        "Recent Health Events:\n"
        "- Oct 18: Milestone\n"
        "- Oct 15: Temperature - 38.1C\n\n"
        "Appointment Notes:\n"
        "Ask about rash\n\n"
    )


@pytest.mark.parametrize("appointment_id", [None, ""])
def test_missing_appointment_id_is_rejected(db, appointment_id):
    with pytest.raises(ValidationError, match="Appointment ID is required"):
        build_appointment_summary(db, appointment_id, now=NOW)


def test_unknown_appointment_is_not_found(db):
    with pytest.raises(NotFoundError, match="Appointment not found"):
        build_appointment_summary(db, "does-not-exist", now=NOW)


def test_dates_follow_reminder_timezone(db, make_appointment):
    # 02:00 UTC is still the previous evening in New York (UTC-4 in October)
    appointment = make_appointment(datetime(2026, 10, 23, 2, 0, tzinfo=timezone.utc))
    db.add(Activity(user_id="user-1", type="medication", start_time=datetime(2026, 10, 18, 2, 0, tzinfo=timezone.utc)))
    db.commit()

    utc_summary = build_appointment_summary(db, appointment.id, now=NOW)
    local_summary = build_appointment_summary(db, appointment.id, now=NOW, tz_name="America/New_York")

    assert utc_summary.subject == "Health Summary for Appointment on October 23, 2026"
    assert local_summary.subject == "Health Summary for Appointment on October 22, 2026"
    assert "- Oct 17: Medication\n" in local_summary.content

"""Tests for the REST API trigger surface."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import api_server
import crud
import database
from advisory import AdvisoryAggregator
from dispatcher import compute_reminder_window
from errors import PersistenceError
from providers import Content, Provider, Unavailable
from test_dispatcher import RecordingNotifier


class StaticProvider(Provider):
    def __init__(self, name, outcome):
        self.name = name
        self.outcome = outcome

    async def search(self, query):
        return self.outcome


class ExplodingAggregator(AdvisoryAggregator):
    async def answer(self, query):
        raise RuntimeError("aggregator crashed")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(session_factory, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    aggregator = AdvisoryAggregator([
        StaticProvider("WebMD", Content("Monitor temperature.")),
        StaticProvider("BabyCenter", Unavailable("timeout")),
    ])

    api_server.app.dependency_overrides[database.get_db] = override_get_db
    api_server.app.dependency_overrides[api_server.get_aggregator] = lambda: aggregator
    api_server.app.dependency_overrides[api_server.get_notifier] = lambda: notifier
    yield TestClient(api_server.app, raise_server_exceptions=False)
    api_server.app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_ask_returns_merged_answer(client):
    response = client.post("/ask", json={"query": "fever"})

    assert response.status_code == 200
    body = response.json()
    assert body["sources"] == ["WebMD"]
    assert body["response"].startswith("According to WebMD:\nMonitor temperature.\n\n\nPlease note:")
    assert set(body) == {"response", "sources"}


@pytest.mark.parametrize("payload", [{}, {"query": ""}, {"query": None}])
def test_ask_without_query_is_400(client, payload):
    response = client.post("/ask", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Query is required"}


def test_ask_without_body_is_400(client):
    response = client.post("/ask")

    assert response.status_code == 400
    assert response.json() == {"error": "Query is required"}


def test_ask_with_malformed_json_is_400(client):
    response = client.post("/ask", content="{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert "error" in response.json()


def test_unexpected_error_is_500_with_message(client):
    api_server.app.dependency_overrides[api_server.get_aggregator] = lambda: ExplodingAggregator([])

    response = client.post("/ask", json={"query": "fever"})

    assert response.status_code == 500
    assert response.json() == {"error": "aggregator crashed"}


def test_dispatch_reminders_counts_and_is_idempotent(client, make_appointment, notifier):
    window_start, _ = compute_reminder_window(datetime.now(timezone.utc))
    make_appointment(window_start + timedelta(hours=10))
    make_appointment(window_start + timedelta(hours=14))
    make_appointment(window_start + timedelta(days=3))

    first = client.post("/reminders/dispatch")
    second = client.post("/reminders/dispatch")

    assert first.status_code == 200
    assert first.json() == {"success": True, "count": 2}
    assert second.json() == {"success": True, "count": 0}
    assert len(notifier.sent) == 2


def test_dispatch_reminders_partial_failure_is_still_200(client, make_appointment, notifier):
    window_start, _ = compute_reminder_window(datetime.now(timezone.utc))
    failing = make_appointment(window_start + timedelta(hours=10))
    make_appointment(window_start + timedelta(hours=11))
    notifier.fail_ids.add(failing.id)

    response = client.post("/reminders/dispatch")

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 1}


def test_dispatch_reminders_store_failure_is_500(client, monkeypatch):
    def broken_query(db, start, end):
        raise PersistenceError("Could not load appointments: database is locked")

    monkeypatch.setattr(crud, "get_appointments_needing_reminder", broken_query)

    response = client.post("/reminders/dispatch")

    assert response.status_code == 500
    assert response.json() == {"error": "Could not load appointments: database is locked"}


def test_appointment_summary(client, make_appointment):
    appointment = make_appointment(datetime(2026, 10, 22, 15, 0, tzinfo=timezone.utc), notes="Bring vaccine card")

    response = client.post("/appointments/summary", json={"appointmentId": appointment.id})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["recipient"] == "lee@clinic.example"
    assert body["subject"] == "Health Summary for Appointment on October 22, 2026"
    assert body["content"].endswith("Appointment Notes:\nBring vaccine card\n\n")


def test_appointment_summary_errors(client):
    missing = client.post("/appointments/summary", json={})
    unknown = client.post("/appointments/summary", json={"appointmentId": "nope"})

    assert missing.status_code == 400
    assert missing.json() == {"error": "Appointment ID is required"}
    assert unknown.status_code == 404
    assert unknown.json() == {"error": "Appointment not found"}

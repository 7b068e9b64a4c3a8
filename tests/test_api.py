# tests/test_api.py
from datetime import datetime
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_payment_service, get_store
from app.core.clock import get_clock
from app.main import app
from tests.conftest import MONDAY, make_booking, make_rule, utc


@pytest.fixture
def client(store, payments, clock):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_payment_service] = lambda: payments
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _booking_body(coach_id, client_id, start="2024-01-08T09:00:00Z", end="2024-01-08T10:00:00Z", **extra):
    body = {
        "coach_id": str(coach_id),
        "client_id": str(client_id),
        "start_time": start,
        "end_time": end,
        "duration_minutes": 60,
    }
    body.update(extra)
    return body


def _parse(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_health(client):
    response = client.get("/health/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestSlots:

    def test_lists_slots(self, client, store, coach_id):
        store.rules.append(make_rule(coach_id))

        response = client.get(
            f"/api/v1/coaches/{coach_id}/available-slots",
            params={"start_date": MONDAY.isoformat(), "end_date": MONDAY.isoformat(), "duration": 60}
        )

        assert response.status_code == 200
        slots = response.json()["slots"]
        assert [_parse(s["start_time"]) for s in slots] == [utc(MONDAY, 9), utc(MONDAY, 9, 30), utc(MONDAY, 10)]
        assert slots[0]["id"] == f"{coach_id}-2024-01-08T09:00:00+00:00"
        assert all(s["is_available"] for s in slots)

    def test_no_rules_is_empty_list(self, client, coach_id):
        response = client.get(
            f"/api/v1/coaches/{coach_id}/available-slots",
            params={"start_date": "2024-01-08", "end_date": "2024-01-14"}
        )
        assert response.status_code == 200
        assert response.json() == {"slots": []}

    def test_bad_date_is_invalid_input(self, client, coach_id):
        response = client.get(
            f"/api/v1/coaches/{coach_id}/available-slots",
            params={"start_date": "next monday", "end_date": "2024-01-14"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_INPUT"

    def test_zero_duration_is_invalid_input(self, client, coach_id):
        response = client.get(
            f"/api/v1/coaches/{coach_id}/available-slots",
            params={"start_date": "2024-01-08", "end_date": "2024-01-08", "duration": 0}
        )
        assert response.status_code == 400


class TestBooking:

    def test_books_session(self, client, store, coach_id, client_id):
        response = client.post("/api/v1/sessions/book", json=_booking_body(coach_id, client_id, notes="Intro"))

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Session booked successfully"
        assert body["session"]["status"] == "scheduled"
        assert body["session"]["client_notes"] == "Intro"
        assert len(store.bookings) == 1

    def test_taken_slot_is_conflict(self, client, store, coach_id, client_id):
        store.bookings.append(make_booking(coach_id, utc(MONDAY, 9), utc(MONDAY, 10)))

        response = client.post("/api/v1/sessions/book", json=_booking_body(coach_id, client_id))

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "SLOT_UNAVAILABLE"
        assert body["details"]["action"] == "refresh_slots"

    def test_inverted_times_are_invalid(self, client, store, coach_id, client_id):
        response = client.post(
            "/api/v1/sessions/book",
            json=_booking_body(coach_id, client_id, start="2024-01-08T10:00:00Z", end="2024-01-08T09:00:00Z")
        )

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_INPUT"
        assert store.calls == []

    def test_missing_fields_are_invalid(self, client, store, coach_id):
        response = client.post("/api/v1/sessions/book", json={"coach_id": str(coach_id)})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "INVALID_INPUT"
        assert body["details"]["errors"]
        assert store.calls == []

    def test_unknown_package_is_not_found(self, client, coach_id, client_id):
        response = client.post(
            "/api/v1/sessions/book",
            json=_booking_body(coach_id, client_id, package_id=str(uuid4()))
        )
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_priced_package_emits_payment(self, client, payments, package_factory, coach_id, client_id):
        package = package_factory(coach_id)

        response = client.post(
            "/api/v1/sessions/book",
            json=_booking_body(coach_id, client_id, package_id=str(package.id))
        )

        assert response.status_code == 201
        assert response.json()["session"]["price_paid"] == 100.0
        assert len(payments.emitted) == 1


class TestAvailabilityRules:

    def test_create_and_list(self, client, coach_id):
        response = client.post(
            f"/api/v1/coaches/{coach_id}/availability",
            json={
                "day_of_week": 1,
                "start_time": "09:00",
                "end_time": "11:00",
                "timezone": "America/New_York",
                "effective_date": "2024-01-01",
            }
        )
        assert response.status_code == 201
        assert response.json()["availability"]["timezone"] == "America/New_York"

        listed = client.get(f"/api/v1/coaches/{coach_id}/availability").json()["availability"]
        assert len(listed) == 1

    def test_create_inverted_rule_is_invalid(self, client, store, coach_id):
        response = client.post(
            f"/api/v1/coaches/{coach_id}/availability",
            json={"day_of_week": 1, "start_time": "11:00", "end_time": "09:00", "effective_date": "2024-01-01"}
        )
        assert response.status_code == 400
        assert store.rules == []

    def test_update_and_delete(self, client, store, coach_id):
        rule = make_rule(coach_id)
        store.rules.append(rule)

        response = client.put(f"/api/v1/coaches/{coach_id}/availability/{rule.id}", json={"end_time": "12:00"})
        assert response.status_code == 200
        assert response.json()["availability"]["end_time"] == "12:00:00"

        response = client.delete(f"/api/v1/coaches/{coach_id}/availability/{rule.id}")
        assert response.status_code == 200
        assert store.rules == []

    def test_delete_unknown_rule_is_not_found(self, client, coach_id):
        response = client.delete(f"/api/v1/coaches/{coach_id}/availability/{uuid4()}")
        assert response.status_code == 404


def test_lists_packages(client, package_factory, coach_id):
    package_factory(coach_id, price="150.00")
    package_factory(coach_id, price="80.00")
    package_factory(coach_id, is_active=False)

    packages = client.get(f"/api/v1/coaches/{coach_id}/packages").json()["packages"]

    assert [p["price"] for p in packages] == [80.0, 150.0]


def test_oversized_slot_duration_is_invalid_input(client, store, coach_id):
    store.rules.append(make_rule(coach_id))

    response = client.get(
        f"/api/v1/coaches/{coach_id}/available-slots",
        params={"start_date": "2024-01-08", "end_date": "2024-01-08", "duration": 10_000_000_000}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_INPUT"
    assert store.calls == []


def test_oversized_booking_duration_is_invalid_input(client, store, coach_id, client_id):
    body = _booking_body(coach_id, client_id)
    body["duration_minutes"] = 10 ** 16

    response = client.post("/api/v1/sessions/book", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_INPUT"
    assert store.calls == []

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from streak_tracker.api_app import build_api_app
from streak_tracker.db import Database
from streak_tracker.service import StreakTracker
from streak_tracker.time_utils import FixedClock

DAY0 = date(2026, 2, 10)


@pytest.fixture()
def tracker(tmp_path) -> StreakTracker:
    return StreakTracker(Database(tmp_path / "app.db"), FixedClock.on(DAY0))


@pytest.fixture()
def client(tracker: StreakTracker) -> TestClient:
    return TestClient(build_api_app(tracker, api_token=None))


def test_log_activity_and_status(client: TestClient) -> None:
    resp = client.post("/api/activities", json={"activity_type": "running", "minutes": 35})
    assert resp.status_code == 200
    body = resp.json()
    assert body["entry"]["day"] == "2026-02-10"
    assert body["status"]["streak"] == 1
    assert body["status"]["state"] == "live_complete"

    status = client.get("/api/status").json()
    assert status["progress"] == {
        "total_minutes": 35,
        "goal_minutes": 30,
        "remaining_minutes": 0,
        "completed": True,
    }
    assert client.get("/api/streak").json() == {"streak": 1, "at_risk": False}


def test_unknown_activity_type_is_bad_request(client: TestClient) -> None:
    resp = client.post("/api/activities", json={"activity_type": "cycling", "minutes": 20})
    assert resp.status_code == 400


def test_non_positive_minutes_rejected_by_schema(client: TestClient) -> None:
    resp = client.post("/api/activities", json={"activity_type": "running", "minutes": 0})
    assert resp.status_code == 422


def test_goal_update_and_invalid_goal(client: TestClient) -> None:
    client.post("/api/activities", json={"activity_type": "swimming", "minutes": 40})
    resp = client.put("/api/settings/goal", json={"daily_goal_minutes": 60})
    assert resp.status_code == 200
    assert resp.json()["progress"]["remaining_minutes"] == 20

    bad = client.put("/api/settings/goal", json={"daily_goal_minutes": 0})
    assert bad.status_code == 422
    assert client.get("/api/settings").json()["settings"]["daily_goal_minutes"] == 60


def test_settings_lists_options(client: TestClient) -> None:
    body = client.get("/api/settings").json()
    assert body["goal_options"] == [15, 30, 60, 90, 120]
    assert body["activity_types"] == ["running", "aerobic", "swimming"]
    resp = client.put("/api/settings/reminder", json={"hour": 21, "minute": 30})
    assert resp.json()["settings"]["reminder_hour"] == 21


def test_history_and_finalize(client: TestClient, tracker: StreakTracker) -> None:
    client.post("/api/activities", json={"activity_type": "aerobic", "minutes": 30})
    tracker.clock.advance(days=2)

    assert client.post("/api/finalize").json() == {"ok": True, "finalized": 2}
    body = client.get("/api/history", params={"start": "2026-02-10", "end": "2026-02-12"}).json()
    assert [(d["day"], d["completed"], d["finalized"]) for d in body["days"]] == [
        ("2026-02-10", True, True),
        ("2026-02-11", False, True),
    ]
    assert len(body["activities"]) == 1

    too_long = client.get("/api/history", params={"start": "2024-01-01", "end": "2026-02-12"})
    assert too_long.status_code == 400


def test_delete_day_and_list_activities(client: TestClient) -> None:
    client.post("/api/activities", json={"activity_type": "running", "minutes": 10})
    client.post("/api/activities", json={"activity_type": "running", "minutes": 15})
    assert len(client.get("/api/activities").json()["activities"]) == 2

    assert client.delete("/api/days/2026-02-10").json() == {"ok": True, "deleted": 2}
    assert client.get("/api/activities", params={"day": "2026-02-10"}).json() == {"activities": []}
    assert client.get("/api/progress").json()["total_minutes"] == 0


def test_logging_against_finalized_day_is_conflict(tmp_path) -> None:
    db = Database(tmp_path / "app.db")
    clock = FixedClock.on(DAY0)
    tracker = StreakTracker(db, clock)
    tracker.log_activity("running", 30)
    tracker.clock.advance(days=1)
    tracker.finalize_past_days()
    # A stale clock, e.g. a second process that never noticed midnight.
    stale = StreakTracker(db, FixedClock.on(DAY0))
    client = TestClient(build_api_app(stale, api_token=None))

    resp = client.post("/api/activities", json={"activity_type": "running", "minutes": 5})
    assert resp.status_code == 409


def test_storage_failure_is_service_unavailable(tracker: StreakTracker, tmp_path) -> None:
    client = TestClient(build_api_app(tracker, api_token=None))
    tracker.db.path = tmp_path
    resp = client.get("/api/streak")
    assert resp.status_code == 503
    assert resp.json() == {"detail": "Storage unavailable"}


def test_token_required_when_configured(tracker: StreakTracker) -> None:
    client = TestClient(build_api_app(tracker, api_token="secret"))
    assert client.get("/api/status").status_code == 401
    assert client.get("/api/status", headers={"x-api-token": "secret"}).status_code == 200
    assert client.get("/api/status", params={"token": "secret"}).status_code == 200

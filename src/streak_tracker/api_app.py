from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date, timedelta
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from streak_tracker.config import load_settings
from streak_tracker.db import Database
from streak_tracker.db_constants import ACTIVITY_TYPES, GOAL_OPTIONS
from streak_tracker.db_models import ActivityEntry, DayStatus, TodayProgress
from streak_tracker.errors import InvalidGoal, InvariantViolation, StorageUnavailable
from streak_tracker.logging_setup import setup_logging
from streak_tracker.service import StreakTracker, TrackerStatus
from streak_tracker.time_utils import SystemClock

logger = logging.getLogger(__name__)

HISTORY_MAX_DAYS = 366


def _require_auth(request: Request, token: str | None) -> None:
    if not token:
        return
    header = request.headers.get("x-api-token")
    query = request.query_params.get("token")
    if header == token or query == token:
        return
    raise HTTPException(status_code=401, detail="Unauthorized")


class LogActivityRequest(BaseModel):
    activity_type: str
    minutes: int = Field(gt=0)


class GoalUpdateRequest(BaseModel):
    daily_goal_minutes: int


class ReminderUpdateRequest(BaseModel):
    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)


def _progress_json(progress: TodayProgress) -> dict[str, Any]:
    return {
        "total_minutes": progress.total_minutes,
        "goal_minutes": progress.goal_minutes,
        "remaining_minutes": progress.remaining_minutes,
        "completed": progress.completed,
    }


def _status_json(view: TrackerStatus) -> dict[str, Any]:
    return {
        "today": view.today.isoformat(),
        "progress": _progress_json(view.progress),
        "streak": view.streak,
        "at_risk": view.at_risk,
        "state": view.state.value,
    }


def _entry_json(entry: ActivityEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "day": entry.day.isoformat(),
        "activity_type": entry.activity_type,
        "minutes": entry.minutes,
        "created_at": entry.created_at.isoformat(),
    }


def _day_status_json(status: DayStatus) -> dict[str, Any]:
    data = asdict(status)
    data["day"] = status.day.isoformat()
    return data


def build_api_app(tracker: StreakTracker, api_token: str | None) -> FastAPI:
    app = FastAPI(title="Streak Tracker", version="1.0.0")

    @app.exception_handler(StorageUnavailable)
    async def storage_unavailable(request: Request, exc: StorageUnavailable) -> JSONResponse:
        logger.error("storage unavailable: %s", exc)
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})

    @app.exception_handler(InvariantViolation)
    async def invariant_violation(request: Request, exc: InvariantViolation) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(InvalidGoal)
    async def invalid_goal(request: Request, exc: InvalidGoal) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def bad_value(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/api/status")
    async def api_status(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return _status_json(tracker.status())

    @app.get("/api/progress")
    async def api_progress(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return _progress_json(tracker.get_today_progress())

    @app.get("/api/streak")
    async def api_streak(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {"streak": tracker.calculate_streak(), "at_risk": tracker.is_streak_at_risk()}

    @app.post("/api/activities")
    async def api_log_activity(request: Request, payload: LogActivityRequest) -> dict[str, Any]:
        _require_auth(request, api_token)
        outcome = tracker.log_activity(payload.activity_type, payload.minutes)
        return {"entry": _entry_json(outcome.entry), "status": _status_json(outcome.status)}

    @app.get("/api/activities")
    async def api_activities(request: Request, day: date | None = None) -> dict[str, Any]:
        _require_auth(request, api_token)
        entries = tracker.activities_for_day(day)
        return {"activities": [_entry_json(e) for e in entries]}

    @app.delete("/api/days/{day}")
    async def api_delete_day(day: date, request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {"ok": True, "deleted": tracker.delete_day(day)}

    @app.post("/api/finalize")
    async def api_finalize(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {"ok": True, "finalized": tracker.finalize_past_days()}

    @app.get("/api/history")
    async def api_history(request: Request, start: date, end: date) -> dict[str, Any]:
        _require_auth(request, api_token)
        if end - start > timedelta(days=HISTORY_MAX_DAYS):
            raise HTTPException(status_code=400, detail=f"Range is limited to {HISTORY_MAX_DAYS} days")
        history = tracker.history(start, end)
        return {
            "start": history.start.isoformat(),
            "end": history.end.isoformat(),
            "days": [_day_status_json(s) for s in history.statuses],
            "activities": [_entry_json(e) for e in history.activities],
        }

    @app.get("/api/settings")
    async def api_settings(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        cfg = tracker.settings()
        return {
            "settings": asdict(cfg),
            "goal_options": list(GOAL_OPTIONS),
            "activity_types": list(ACTIVITY_TYPES),
        }

    @app.put("/api/settings/goal")
    async def api_set_goal(request: Request, payload: GoalUpdateRequest) -> dict[str, Any]:
        _require_auth(request, api_token)
        progress = tracker.set_daily_goal(payload.daily_goal_minutes)
        return {"ok": True, "progress": _progress_json(progress)}

    @app.put("/api/settings/reminder")
    async def api_set_reminder(request: Request, payload: ReminderUpdateRequest) -> dict[str, Any]:
        _require_auth(request, api_token)
        cfg = tracker.set_reminder_time(payload.hour, payload.minute)
        return {"ok": True, "settings": asdict(cfg)}

    return app


def run_api() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)
    db = Database(settings.database_path)
    tracker = StreakTracker(db, SystemClock(settings.tz))
    app = build_api_app(tracker, settings.api_token)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)

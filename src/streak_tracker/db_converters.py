from __future__ import annotations

import sqlite3
from datetime import date, datetime

from streak_tracker.db_models import ActivityEntry, DayStatus, TrackerSettings


def _row_to_activity(row: sqlite3.Row) -> ActivityEntry:
    return ActivityEntry(
        id=int(row["id"]),
        day=date.fromisoformat(row["day"]),
        activity_type=str(row["activity_type"]),
        minutes=int(row["minutes"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _row_to_day_status(row: sqlite3.Row) -> DayStatus:
    return DayStatus(
        day=date.fromisoformat(row["day"]),
        total_minutes=int(row["total_minutes"]),
        daily_goal=int(row["daily_goal"]),
        completed=bool(row["completed"]),
        finalized=bool(row["finalized"]),
    )


def _row_to_settings(row: sqlite3.Row) -> TrackerSettings:
    return TrackerSettings(
        daily_goal_minutes=int(row["daily_goal_minutes"]),
        reminder_hour=int(row["reminder_hour"]),
        reminder_minute=int(row["reminder_minute"]),
    )

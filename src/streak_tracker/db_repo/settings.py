from __future__ import annotations

import sqlite3
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Protocol

from streak_tracker.db_converters import _row_to_settings
from streak_tracker.db_models import TrackerSettings
from streak_tracker.errors import require_valid_goal


class DbProtocol(Protocol):
    def _connect(self) -> AbstractContextManager[sqlite3.Connection]: ...


class SettingsMixin:
    def get_settings(self: DbProtocol) -> TrackerSettings:
        with self._connect() as conn:
            conn.execute("INSERT OR IGNORE INTO settings(id) VALUES (1)")
            row = conn.execute(
                "SELECT daily_goal_minutes, reminder_hour, reminder_minute FROM settings WHERE id = 1"
            ).fetchone()
        assert row is not None
        return _row_to_settings(row)

    def current_goal_minutes(self) -> int:
        return self.get_settings().daily_goal_minutes

    def update_daily_goal(self: DbProtocol, minutes: int) -> None:
        require_valid_goal(minutes)
        with self._connect() as conn:
            conn.execute("INSERT OR IGNORE INTO settings(id) VALUES (1)")
            conn.execute("UPDATE settings SET daily_goal_minutes = ? WHERE id = 1", (minutes,))

    def update_reminder_time(self: DbProtocol, hour: int, minute: int) -> None:
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError("reminder time must be a valid HH:MM")
        with self._connect() as conn:
            conn.execute("INSERT OR IGNORE INTO settings(id) VALUES (1)")
            conn.execute(
                "UPDATE settings SET reminder_hour = ?, reminder_minute = ? WHERE id = 1",
                (hour, minute),
            )

    def was_event_sent(self: DbProtocol, event_key: str) -> bool:
        with self._connect() as conn:
            row = conn.execute("SELECT 1 FROM reminder_events WHERE event_key = ?", (event_key,)).fetchone()
        return row is not None

    def mark_event_sent(self: DbProtocol, event_key: str, sent_at: datetime) -> bool:
        with self._connect() as conn:
            cur = conn.execute(
                "INSERT OR IGNORE INTO reminder_events(event_key, sent_at) VALUES (?, ?)",
                (event_key, sent_at.isoformat()),
            )
        return cur.rowcount > 0

from __future__ import annotations

import sqlite3
from contextlib import AbstractContextManager
from datetime import date, datetime
from typing import Protocol

from streak_tracker.db_converters import _row_to_activity
from streak_tracker.db_models import ActivityEntry


class DbProtocol(Protocol):
    def _connect(self) -> AbstractContextManager[sqlite3.Connection]: ...


class ActivityMixin:
    def add_activity(
        self: DbProtocol,
        day: date,
        activity_type: str,
        minutes: int,
        created_at: datetime,
    ) -> ActivityEntry:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO activities(day, activity_type, minutes, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (day.isoformat(), activity_type, minutes, created_at.isoformat()),
            )
            row = conn.execute("SELECT * FROM activities WHERE id = ?", (cursor.lastrowid,)).fetchone()
        assert row is not None
        return _row_to_activity(row)

    def sum_minutes_for_day(self: DbProtocol, day: date) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COALESCE(SUM(minutes), 0) AS total FROM activities WHERE day = ?",
                (day.isoformat(),),
            ).fetchone()
        return int(row["total"]) if row else 0

    def earliest_activity_day(self: DbProtocol) -> date | None:
        with self._connect() as conn:
            row = conn.execute("SELECT MIN(day) AS d FROM activities").fetchone()
        if row is None or row["d"] is None:
            return None
        return date.fromisoformat(row["d"])

    def list_activities_for_day(self: DbProtocol, day: date) -> list[ActivityEntry]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM activities WHERE day = ? ORDER BY created_at ASC, id ASC",
                (day.isoformat(),),
            ).fetchall()
        return [_row_to_activity(r) for r in rows]

    def list_activities_between(self: DbProtocol, start: date, end: date) -> list[ActivityEntry]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM activities
                WHERE day BETWEEN ? AND ?
                ORDER BY day ASC, created_at ASC, id ASC
                """,
                (start.isoformat(), end.isoformat()),
            ).fetchall()
        return [_row_to_activity(r) for r in rows]

    def delete_activities_for_day(self: DbProtocol, day: date) -> int:
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM activities WHERE day = ?", (day.isoformat(),))
        return cur.rowcount

from __future__ import annotations

import sqlite3
from contextlib import AbstractContextManager
from datetime import date, datetime
from typing import Protocol

from streak_tracker.db_converters import _row_to_activity, _row_to_day_status
from streak_tracker.db_models import ActivityEntry, DayStatus


class DbProtocol(Protocol):
    def _connect(self) -> AbstractContextManager[sqlite3.Connection]: ...
    def _transaction(self) -> AbstractContextManager[sqlite3.Connection]: ...


def _day_status(day: date, total_minutes: int, daily_goal: int, finalized: bool) -> DayStatus:
    return DayStatus(
        day=day,
        total_minutes=total_minutes,
        daily_goal=daily_goal,
        completed=total_minutes >= daily_goal,
        finalized=finalized,
    )


def _read_status(conn: sqlite3.Connection, day: date) -> DayStatus | None:
    row = conn.execute("SELECT * FROM day_status WHERE day = ?", (day.isoformat(),)).fetchone()
    return _row_to_day_status(row) if row else None


def _sum_minutes(conn: sqlite3.Connection, day: date) -> int:
    row = conn.execute(
        "SELECT COALESCE(SUM(minutes), 0) AS total FROM activities WHERE day = ?",
        (day.isoformat(),),
    ).fetchone()
    return int(row["total"]) if row else 0


def _write_status(conn: sqlite3.Connection, status: DayStatus) -> bool:
    cur = conn.execute(
        """
        INSERT INTO day_status(day, total_minutes, daily_goal, completed, finalized)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(day) DO UPDATE SET
            total_minutes=excluded.total_minutes,
            daily_goal=excluded.daily_goal,
            completed=excluded.completed,
            finalized=excluded.finalized
        WHERE day_status.finalized = 0
        """,
        (
            status.day.isoformat(),
            status.total_minutes,
            status.daily_goal,
            1 if status.completed else 0,
            1 if status.finalized else 0,
        ),
    )
    return cur.rowcount > 0


class DayStatusMixin:
    def get_day_status(self: DbProtocol, day: date) -> DayStatus | None:
        with self._connect() as conn:
            return _read_status(conn, day)

    def upsert_day_status(self: DbProtocol, status: DayStatus) -> bool:
        """Replace the row for `status.day` unless the stored row is finalized.

        Returns False when a finalized row blocked the write. The check and the
        write are a single statement, so concurrent finalizers cannot both win.
        """
        with self._connect() as conn:
            return _write_status(conn, status)

    def record_activity_for_day(
        self: DbProtocol,
        day: date,
        activity_type: str,
        minutes: int,
        created_at: datetime,
        daily_goal: int,
    ) -> tuple[ActivityEntry, DayStatus] | None:
        """Append an entry and rewrite the day's live row in one transaction.

        Returns None, having written nothing, when the day is already finalized.
        """
        with self._transaction() as conn:
            existing = _read_status(conn, day)
            if existing is not None and existing.finalized:
                return None
            cursor = conn.execute(
                """
                INSERT INTO activities(day, activity_type, minutes, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (day.isoformat(), activity_type, minutes, created_at.isoformat()),
            )
            row = conn.execute("SELECT * FROM activities WHERE id = ?", (cursor.lastrowid,)).fetchone()
            status = _day_status(day, _sum_minutes(conn, day), daily_goal, finalized=False)
            _write_status(conn, status)
        assert row is not None
        return _row_to_activity(row), status

    def refresh_day_status(self: DbProtocol, day: date, daily_goal: int) -> DayStatus | None:
        """Recompute a live row from its entries in one transaction.

        A finalized row comes back untouched. A day with neither row nor entries
        stays absent and returns None.
        """
        with self._transaction() as conn:
            existing = _read_status(conn, day)
            if existing is not None and existing.finalized:
                return existing
            total = _sum_minutes(conn, day)
            if existing is None and total == 0:
                return None
            status = _day_status(day, total, daily_goal, finalized=False)
            _write_status(conn, status)
        return status

    def finalize_day(self: DbProtocol, day: date, fallback_goal: int) -> DayStatus | None:
        """Close `day` with its entry total in one transaction.

        A live row keeps its goal snapshot; a missing row takes `fallback_goal`.
        Returns None when the day was already finalized.
        """
        with self._transaction() as conn:
            existing = _read_status(conn, day)
            if existing is not None and existing.finalized:
                return None
            goal = existing.daily_goal if existing is not None else fallback_goal
            status = _day_status(day, _sum_minutes(conn, day), goal, finalized=True)
            _write_status(conn, status)
        return status

    def earliest_status_day(self: DbProtocol) -> date | None:
        with self._connect() as conn:
            row = conn.execute("SELECT MIN(day) AS d FROM day_status").fetchone()
        if row is None or row["d"] is None:
            return None
        return date.fromisoformat(row["d"])

    def list_unfinalized_before(self: DbProtocol, day: date) -> list[DayStatus]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM day_status WHERE finalized = 0 AND day < ? ORDER BY day ASC",
                (day.isoformat(),),
            ).fetchall()
        return [_row_to_day_status(r) for r in rows]

    def list_statuses_between(self: DbProtocol, start: date, end: date) -> list[DayStatus]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM day_status WHERE day BETWEEN ? AND ? ORDER BY day ASC",
                (start.isoformat(), end.isoformat()),
            ).fetchall()
        return [_row_to_day_status(r) for r in rows]

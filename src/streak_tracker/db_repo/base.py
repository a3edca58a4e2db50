from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from streak_tracker.db_constants import (
    DEFAULT_DAILY_GOAL_MINUTES,
    DEFAULT_REMINDER_HOUR,
    DEFAULT_REMINDER_MINUTE,
)
from streak_tracker.errors import StorageUnavailable


class BaseDatabase:
    def __init__(self, path: Path) -> None:
        self.path = path
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailable(f"cannot create database directory {self.path.parent}") from exc
        self._init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection for one unit of work.

        Commits on success and rolls back on error. Any sqlite failure, including
        failing to open the file, surfaces as StorageUnavailable.
        """
        try:
            conn = sqlite3.connect(self.path, timeout=10)
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"cannot open database {self.path}") from exc
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"database operation failed: {exc}") from exc
        finally:
            conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """`_connect` with the write lock taken up front.

        BEGIN IMMEDIATE makes every read inside the block part of the same write
        transaction, so other connections and processes wait until it commits.
        """
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            yield conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """
            )
            current = {row["version"] for row in conn.execute("SELECT version FROM schema_migrations")}

            migrations: dict[int, str] = {
                1: """
                    CREATE TABLE activities (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        day TEXT NOT NULL,
                        activity_type TEXT NOT NULL,
                        minutes INTEGER NOT NULL CHECK(minutes > 0),
                        created_at TEXT NOT NULL
                    );

                    CREATE INDEX idx_activities_day ON activities(day, created_at);

                    CREATE TABLE day_status (
                        day TEXT PRIMARY KEY,
                        total_minutes INTEGER NOT NULL,
                        daily_goal INTEGER NOT NULL CHECK(daily_goal > 0),
                        completed INTEGER NOT NULL,
                        finalized INTEGER NOT NULL DEFAULT 0
                    );

                    CREATE INDEX idx_day_status_finalized ON day_status(finalized, day);
                """,
                2: f"""
                    CREATE TABLE settings (
                        id INTEGER PRIMARY KEY CHECK(id = 1),
                        daily_goal_minutes INTEGER NOT NULL DEFAULT {DEFAULT_DAILY_GOAL_MINUTES},
                        reminder_hour INTEGER NOT NULL DEFAULT {DEFAULT_REMINDER_HOUR},
                        reminder_minute INTEGER NOT NULL DEFAULT {DEFAULT_REMINDER_MINUTE}
                    );

                    INSERT OR IGNORE INTO settings(id) VALUES (1);
                """,
                3: """
                    CREATE TABLE reminder_events (
                        event_key TEXT PRIMARY KEY,
                        sent_at TEXT NOT NULL
                    );
                """,
            }
            now = datetime.now().isoformat(timespec="seconds")
            for version in sorted(migrations):
                if version in current:
                    continue
                conn.executescript(migrations[version])
                conn.execute(
                    "INSERT INTO schema_migrations(version, applied_at) VALUES (?, ?)",
                    (version, now),
                )

    def schema_version(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COALESCE(MAX(version), 0) AS v FROM schema_migrations").fetchone()
        return int(row["v"]) if row else 0

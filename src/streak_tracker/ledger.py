"""Per-day goal ledger.

Each calendar day with activity gets one DayStatus row holding the day's total,
the goal that applied to it and whether the goal was met. Today's row is live
and rewritten on every log; once a day is in the past, finalization closes it
and the row never changes again.

Every change to a day is one storage transaction (read the row, touch the
entries, write the row), which serializes writers across threads and processes.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Protocol

from streak_tracker.db_constants import ACTIVITY_TYPES, MAX_ENTRY_MINUTES
from streak_tracker.db_models import ActivityEntry, DayStatus
from streak_tracker.errors import InvariantViolation, require_valid_goal
from streak_tracker.time_utils import iter_days

logger = logging.getLogger(__name__)


class EntryStore(Protocol):
    def earliest_activity_day(self) -> date | None: ...


class StatusStore(Protocol):
    def get_day_status(self, day: date) -> DayStatus | None: ...
    def upsert_day_status(self, status: DayStatus) -> bool: ...
    def earliest_status_day(self) -> date | None: ...
    def list_statuses_between(self, start: date, end: date) -> list[DayStatus]: ...
    def record_activity_for_day(
        self,
        day: date,
        activity_type: str,
        minutes: int,
        created_at: datetime,
        daily_goal: int,
    ) -> tuple[ActivityEntry, DayStatus] | None: ...
    def refresh_day_status(self, day: date, daily_goal: int) -> DayStatus | None: ...
    def finalize_day(self, day: date, fallback_goal: int) -> DayStatus | None: ...


class GoalProvider(Protocol):
    def current_goal_minutes(self) -> int: ...


class DayStatusLedger:
    def __init__(self, entries: EntryStore, statuses: StatusStore, goals: GoalProvider) -> None:
        self.entries = entries
        self.statuses = statuses
        self.goals = goals

    def current_goal(self) -> int:
        return require_valid_goal(self.goals.current_goal_minutes())

    def record_activity(
        self,
        day: date,
        activity_type: str,
        minutes: int,
        created_at: datetime,
    ) -> ActivityEntry:
        if activity_type not in ACTIVITY_TYPES:
            raise ValueError(f"activity_type must be one of: {', '.join(ACTIVITY_TYPES)}")
        if minutes <= 0 or minutes > MAX_ENTRY_MINUTES:
            raise ValueError(f"minutes must be between 1 and {MAX_ENTRY_MINUTES}")

        recorded = self.statuses.record_activity_for_day(day, activity_type, minutes, created_at, self.current_goal())
        if recorded is None:
            logger.error("rejected activity for finalized day=%s minutes=%s", day, minutes)
            raise InvariantViolation(f"{day.isoformat()} is finalized; activity can only be logged for today")
        entry, status = recorded
        logger.info(
            "recorded activity day=%s type=%s minutes=%s total=%s",
            day,
            activity_type,
            minutes,
            status.total_minutes,
        )
        return entry

    def refresh_live_status(self, day: date) -> DayStatus | None:
        """Recompute a live row from its entries and the current goal.

        Days with neither entries nor a row stay unmaterialized; finalized rows
        are returned untouched.
        """
        return self.statuses.refresh_day_status(day, self.current_goal())

    def finalize_past_days(self, today: date) -> int:
        """Close every day before `today` that has no row or a live row.

        Walks forward one day at a time from the earliest day seen in either
        store, so any number of skipped midnights is covered. Returns the number
        of rows written; a second run with no new data writes nothing.
        """
        candidates = [d for d in (self.entries.earliest_activity_day(), self.statuses.earliest_status_day()) if d]
        if not candidates:
            return 0
        start = min(candidates)
        if start >= today:
            return 0

        fallback_goal = self.current_goal()
        written = 0
        for day in iter_days(start, today):
            if self.statuses.finalize_day(day, fallback_goal) is not None:
                written += 1
        if written:
            logger.info("finalized %s day(s) from %s to %s", written, start, today)
        return written

    def get_status(self, day: date) -> DayStatus | None:
        return self.statuses.get_day_status(day)

    def upsert(self, status: DayStatus) -> DayStatus:
        require_valid_goal(status.daily_goal)
        if not self.statuses.upsert_day_status(status):
            logger.error("rejected overwrite of finalized day=%s", status.day)
            raise InvariantViolation(f"{status.day.isoformat()} is finalized and cannot be overwritten")
        return status

    def statuses_between(self, start: date, end: date) -> list[DayStatus]:
        return self.statuses.list_statuses_between(start, end)

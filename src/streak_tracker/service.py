from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date
from typing import Callable

from streak_tracker.db import Database
from streak_tracker.db_models import ActivityEntry, DayState, DayStatus, TodayProgress, TrackerSettings
from streak_tracker.errors import require_valid_goal
from streak_tracker.ledger import DayStatusLedger
from streak_tracker.streaks import StreakCalculator
from streak_tracker.time_utils import Clock, month_range

logger = logging.getLogger(__name__)

ProgressListener = Callable[[TodayProgress], None]


@dataclass(frozen=True)
class TrackerStatus:
    today: date
    progress: TodayProgress
    streak: int
    at_risk: bool
    state: DayState


@dataclass(frozen=True)
class LogOutcome:
    entry: ActivityEntry
    status: TrackerStatus


@dataclass(frozen=True)
class History:
    start: date
    end: date
    statuses: list[DayStatus]
    activities: list[ActivityEntry]


class StreakTracker:
    """Entry point for the API, CLI and jobs.

    Every "today" comes from the injected clock.
    """

    def __init__(self, db: Database, clock: Clock) -> None:
        self.db = db
        self.clock = clock
        self.ledger = DayStatusLedger(entries=db, statuses=db, goals=db)
        self.calculator = StreakCalculator(self.ledger, live=db)
        self._listeners: list[ProgressListener] = []
        self._listeners_guard = threading.Lock()

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        with self._listeners_guard:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._listeners_guard:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, progress: TodayProgress) -> None:
        with self._listeners_guard:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(progress)
            except Exception:
                logger.exception("progress listener failed")

    def log_activity(self, activity_type: str, minutes: int) -> LogOutcome:
        now = self.clock.now()
        entry = self.ledger.record_activity(now.date(), activity_type, minutes, created_at=now)
        status = self.status()
        self._notify(status.progress)
        return LogOutcome(entry=entry, status=status)

    def calculate_streak(self) -> int:
        return self.calculator.calculate_streak(self.clock.today())

    def is_streak_at_risk(self) -> bool:
        return self.calculator.is_streak_at_risk(self.clock.today())

    def finalize_past_days(self) -> int:
        return self.ledger.finalize_past_days(self.clock.today())

    def get_today_progress(self) -> TodayProgress:
        return self.calculator.today_progress(self.clock.today())

    def status(self) -> TrackerStatus:
        today = self.clock.today()
        streak = self.calculator.calculate_streak(today)
        progress = self.calculator.today_progress(today)
        return TrackerStatus(
            today=today,
            progress=progress,
            streak=streak,
            at_risk=not progress.completed,
            state=self.calculator.day_state(today, today),
        )

    def settings(self) -> TrackerSettings:
        return self.db.get_settings()

    def set_daily_goal(self, minutes: int) -> TodayProgress:
        require_valid_goal(minutes)
        self.db.update_daily_goal(minutes)
        today = self.clock.today()
        self.ledger.refresh_live_status(today)
        progress = self.calculator.today_progress(today)
        logger.info("daily goal set to %s minutes", minutes)
        self._notify(progress)
        return progress

    def set_reminder_time(self, hour: int, minute: int) -> TrackerSettings:
        self.db.update_reminder_time(hour, minute)
        return self.db.get_settings()

    def delete_day(self, day: date) -> int:
        """Remove all of a day's entries. Finalized rows keep their values."""
        removed = self.db.delete_activities_for_day(day)
        logger.info("deleted %s activities for day=%s", removed, day)
        if day == self.clock.today():
            self.ledger.refresh_live_status(day)
            self._notify(self.get_today_progress())
        return removed

    def day_state(self, day: date) -> DayState:
        return self.calculator.day_state(day, self.clock.today())

    def activities_for_day(self, day: date | None = None) -> list[ActivityEntry]:
        return self.db.list_activities_for_day(day or self.clock.today())

    def history(self, start: date, end: date) -> History:
        if end < start:
            raise ValueError("end must not be before start")
        self.ledger.finalize_past_days(self.clock.today())
        return History(
            start=start,
            end=end,
            statuses=self.ledger.statuses_between(start, end),
            activities=self.db.list_activities_between(start, end),
        )

    def month_history(self, year: int, month: int) -> History:
        rng = month_range(year, month)
        return self.history(rng.start, rng.end)

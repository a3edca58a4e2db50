from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Protocol

from streak_tracker.db_models import DayState, TodayProgress
from streak_tracker.ledger import DayStatusLedger

logger = logging.getLogger(__name__)


class LiveAggregate(Protocol):
    def sum_minutes_for_day(self, day: date) -> int: ...


class StreakCalculator:
    """Streak length from today's live total plus finalized earlier days.

    Today is read from the entries aggregate so a just-logged session counts
    immediately. Earlier days come from finalized ledger rows, which keep the
    goal that applied on that day.
    """

    def __init__(self, ledger: DayStatusLedger, live: LiveAggregate) -> None:
        self.ledger = ledger
        self.live = live

    def today_progress(self, today: date) -> TodayProgress:
        return TodayProgress(
            total_minutes=self.live.sum_minutes_for_day(today),
            goal_minutes=self.ledger.current_goal(),
        )

    def calculate_streak(self, today: date) -> int:
        self.ledger.finalize_past_days(today)

        # An unfinished today adds nothing but leaves yesterday's chain intact.
        streak = 1 if self.today_progress(today).completed else 0
        day = today - timedelta(days=1)
        while True:
            status = self.ledger.get_status(day)
            if status is None or not status.completed:
                break
            streak += 1
            day -= timedelta(days=1)
        logger.debug("streak today=%s value=%s", today, streak)
        return streak

    def is_streak_at_risk(self, today: date) -> bool:
        self.ledger.finalize_past_days(today)
        return not self.today_progress(today).completed

    def day_state(self, day: date, today: date) -> DayState:
        if day > today:
            return DayState.UNSTARTED
        if day == today:
            progress = self.today_progress(today)
            if progress.total_minutes == 0:
                return DayState.UNSTARTED
            return DayState.LIVE_COMPLETE if progress.completed else DayState.LIVE_PARTIAL

        status = self.ledger.get_status(day)
        if status is None:
            return DayState.UNSTARTED
        if not status.finalized:
            return DayState.LIVE_COMPLETE if status.completed else DayState.LIVE_PARTIAL
        return DayState.FINALIZED_COMPLETE if status.completed else DayState.FINALIZED_INCOMPLETE

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


@dataclass(frozen=True)
class ActivityEntry:
    id: int
    day: date
    activity_type: str
    minutes: int
    created_at: datetime


@dataclass(frozen=True)
class DayStatus:
    day: date
    total_minutes: int
    daily_goal: int
    completed: bool
    finalized: bool


@dataclass(frozen=True)
class TrackerSettings:
    daily_goal_minutes: int
    reminder_hour: int
    reminder_minute: int


@dataclass(frozen=True)
class TodayProgress:
    total_minutes: int
    goal_minutes: int

    @property
    def completed(self) -> bool:
        return self.total_minutes >= self.goal_minutes

    @property
    def remaining_minutes(self) -> int:
        return max(self.goal_minutes - self.total_minutes, 0)

    @property
    def ratio(self) -> float:
        if self.goal_minutes <= 0:
            return 0.0
        return min(self.total_minutes / self.goal_minutes, 1.0)


class DayState(str, Enum):
    UNSTARTED = "unstarted"
    LIVE_PARTIAL = "live_partial"
    LIVE_COMPLETE = "live_complete"
    FINALIZED_COMPLETE = "finalized_complete"
    FINALIZED_INCOMPLETE = "finalized_incomplete"

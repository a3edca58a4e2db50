from datetime import date, datetime
from zoneinfo import ZoneInfo

from streak_tracker.db_models import ActivityEntry, DayState, TodayProgress
from streak_tracker.messages import activity_line, format_minutes_hm, status_message
from streak_tracker.service import TrackerStatus


def _view(total: int, goal: int, streak: int, state: DayState) -> TrackerStatus:
    progress = TodayProgress(total_minutes=total, goal_minutes=goal)
    return TrackerStatus(
        today=date(2026, 2, 10),
        progress=progress,
        streak=streak,
        at_risk=not progress.completed,
        state=state,
    )


def test_format_minutes_hm() -> None:
    assert format_minutes_hm(0) == "0m"
    assert format_minutes_hm(45) == "45m"
    assert format_minutes_hm(60) == "1h"
    assert format_minutes_hm(95) == "1h 35m"


def test_status_message_at_risk() -> None:
    text = status_message(_view(10, 30, 4, DayState.LIVE_PARTIAL))
    assert "2026-02-10 — in progress" in text
    assert "10m / 30m" in text
    assert "Streak: 4 days" in text
    assert "20m left" in text


def test_status_message_goal_met() -> None:
    text = status_message(_view(60, 30, 1, DayState.LIVE_COMPLETE))
    assert "Streak: 1 day" in text
    assert "left" not in text
    assert "█" * 20 in text


def test_activity_line() -> None:
    entry = ActivityEntry(
        id=1,
        day=date(2026, 2, 10),
        activity_type="swimming",
        minutes=50,
        created_at=datetime(2026, 2, 10, 7, 5, tzinfo=ZoneInfo("Europe/Oslo")),
    )
    assert activity_line(entry) == "07:05 🏊 Swimming 50m"

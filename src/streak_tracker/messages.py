from __future__ import annotations

from streak_tracker.db_constants import ACTIVITY_LABELS
from streak_tracker.db_models import ActivityEntry, DayState
from streak_tracker.service import TrackerStatus

STATE_LABELS = {
    DayState.UNSTARTED: "not started",
    DayState.LIVE_PARTIAL: "in progress",
    DayState.LIVE_COMPLETE: "goal met",
    DayState.FINALIZED_COMPLETE: "goal met",
    DayState.FINALIZED_INCOMPLETE: "missed",
}


def format_minutes_hm(minutes: int) -> str:
    sign = "-" if minutes < 0 else ""
    total = abs(minutes)
    h, m = divmod(total, 60)
    if m == 0 and h > 0:
        return f"{sign}{h}h"
    if h == 0:
        return f"{sign}{m}m"
    return f"{sign}{h}h {m}m"


def _bar(ratio: float, width: int = 20) -> str:
    filled = max(0, min(width, int(round(ratio * width))))
    return "█" * filled + "░" * (width - filled)


def _days(n: int) -> str:
    return "1 day" if n == 1 else f"{n} days"


def status_message(view: TrackerStatus) -> str:
    progress = view.progress
    lines = [
        f"📅 {view.today.isoformat()} — {STATE_LABELS[view.state]}",
        f"{_bar(progress.ratio)} {format_minutes_hm(progress.total_minutes)} / {format_minutes_hm(progress.goal_minutes)}",
        f"🔥 Streak: {_days(view.streak)}",
    ]
    if view.at_risk:
        lines.append(f"⚠️ {format_minutes_hm(progress.remaining_minutes)} left to keep the streak going")
    return "\n".join(lines)


def activity_line(entry: ActivityEntry) -> str:
    label = ACTIVITY_LABELS.get(entry.activity_type, entry.activity_type)
    return f"{entry.created_at.strftime('%H:%M')} {label} {format_minutes_hm(entry.minutes)}"

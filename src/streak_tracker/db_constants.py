from __future__ import annotations

ACTIVITY_TYPES: tuple[str, ...] = ("running", "aerobic", "swimming")

ACTIVITY_LABELS = {
    "running": "🏃 Running",
    "aerobic": "🏋️ Aerobic",
    "swimming": "🏊 Swimming",
}

DEFAULT_DAILY_GOAL_MINUTES = 30
GOAL_OPTIONS: tuple[int, ...] = (15, 30, 60, 90, 120)

DEFAULT_REMINDER_HOUR = 20
DEFAULT_REMINDER_MINUTE = 0

MAX_ENTRY_MINUTES = 24 * 60

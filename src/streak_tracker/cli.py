from __future__ import annotations

import argparse
import sys
from datetime import date, time, timedelta

from streak_tracker.config import load_settings
from streak_tracker.db import Database
from streak_tracker.db_constants import ACTIVITY_TYPES
from streak_tracker.duration import DurationParseError, parse_duration_to_minutes
from streak_tracker.errors import StreakTrackerError
from streak_tracker.logging_setup import setup_logging
from streak_tracker.messages import STATE_LABELS, activity_line, format_minutes_hm, status_message
from streak_tracker.service import StreakTracker
from streak_tracker.time_utils import SystemClock, parse_hhmm


def cmd_log(tracker: StreakTracker, args: argparse.Namespace) -> None:
    try:
        minutes = parse_duration_to_minutes(args.duration)
    except DurationParseError as exc:
        print(exc)
        sys.exit(2)
    outcome = tracker.log_activity(args.activity_type, minutes)
    print(f"Logged {format_minutes_hm(minutes)} {args.activity_type}.\n")
    print(status_message(outcome.status))


def cmd_status(tracker: StreakTracker, args: argparse.Namespace) -> None:
    print(status_message(tracker.status()))
    entries = tracker.activities_for_day()
    if entries:
        print("\nToday:")
        for entry in entries:
            print(f"  {activity_line(entry)}")


def cmd_goal(tracker: StreakTracker, args: argparse.Namespace) -> None:
    progress = tracker.set_daily_goal(args.minutes)
    print(f"Daily goal set to {format_minutes_hm(progress.goal_minutes)}.")


def cmd_reminder(tracker: StreakTracker, args: argparse.Namespace) -> None:
    cfg = tracker.set_reminder_time(args.at.hour, args.at.minute)
    print(f"Reminder time set to {cfg.reminder_hour:02d}:{cfg.reminder_minute:02d}.")


def cmd_finalize(tracker: StreakTracker, args: argparse.Namespace) -> None:
    written = tracker.finalize_past_days()
    print(f"Finalized {written} day(s). Streak: {tracker.calculate_streak()}")


def cmd_history(tracker: StreakTracker, args: argparse.Namespace) -> None:
    today = tracker.clock.today()
    start = today - timedelta(days=max(args.days, 1) - 1)
    history = tracker.history(start, today)
    by_day = {s.day: s for s in history.statuses}
    day = today
    while day >= start:
        status = by_day.get(day)
        state = STATE_LABELS[tracker.day_state(day)]
        if status is None:
            print(f"{day.isoformat()}  {'-':>8}  {state}")
        else:
            print(
                f"{day.isoformat()}  {format_minutes_hm(status.total_minutes):>8}"
                f" / {format_minutes_hm(status.daily_goal)}  {state}"
            )
        day -= timedelta(days=1)


def cmd_delete_day(tracker: StreakTracker, args: argparse.Namespace) -> None:
    removed = tracker.delete_day(args.day)
    print(f"Deleted {removed} activit{'y' if removed == 1 else 'ies'} for {args.day.isoformat()}.")


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def _parse_time(value: str) -> time:
    try:
        return parse_hhmm(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected HH:MM, got {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="track", description="Daily exercise streak tracker")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("log", help="Log an exercise session for today")
    p.add_argument("activity_type", choices=ACTIVITY_TYPES)
    p.add_argument("duration", help="e.g. 30, 45m, 1h20m")
    p.set_defaults(func=cmd_log)

    p = sub.add_parser("status", help="Show today's progress and the current streak")
    p.set_defaults(func=cmd_status)

    p = sub.add_parser("goal", help="Set the daily goal in minutes")
    p.add_argument("minutes", type=int)
    p.set_defaults(func=cmd_goal)

    p = sub.add_parser("reminder", help="Set the daily reminder time")
    p.add_argument("at", type=_parse_time, help="HH:MM")
    p.set_defaults(func=cmd_reminder)

    p = sub.add_parser("finalize", help="Close out past days")
    p.set_defaults(func=cmd_finalize)

    p = sub.add_parser("history", help="Show recent days")
    p.add_argument("--days", type=int, default=14)
    p.set_defaults(func=cmd_history)

    p = sub.add_parser("delete-day", help="Delete all sessions logged on a day")
    p.add_argument("day", type=_parse_day)
    p.set_defaults(func=cmd_delete_day)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(settings.log_level)
    try:
        tracker = StreakTracker(Database(settings.database_path), SystemClock(settings.tz))
        args.func(tracker, args)
    except StreakTrackerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

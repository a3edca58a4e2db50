from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Awaitable, Callable

from streak_tracker.config import Settings
from streak_tracker.db import Database
from streak_tracker.messages import format_minutes_hm
from streak_tracker.service import StreakTracker
from streak_tracker.time_utils import SystemClock, next_local_midnight, seconds_until

logger = logging.getLogger(__name__)

JOB_NAMES = ("finalize", "reminders", "midnight")

# Wake slightly after midnight so the new day is unambiguous.
MIDNIGHT_GRACE_SECONDS = 1.0


@dataclass(frozen=True)
class ReminderDecision:
    due: bool
    remaining_minutes: int


def evaluate_reminder(now: datetime, reminder_at: time, at_risk: bool, remaining_minutes: int) -> ReminderDecision:
    due = at_risk and now.time() >= reminder_at
    return ReminderDecision(due=due, remaining_minutes=remaining_minutes if due else 0)


def run_finalize(tracker: StreakTracker) -> int:
    written = tracker.finalize_past_days()
    streak = tracker.calculate_streak()
    logger.info("finalize job: rows=%s streak=%s", written, streak)
    return written


def run_reminders(tracker: StreakTracker) -> ReminderDecision:
    """Decide whether today's streak reminder is due and record it once per day.

    Delivery is left to whoever reads the log or the reminder_events table.
    """
    now = tracker.clock.now()
    tracker.finalize_past_days()
    cfg = tracker.settings()
    progress = tracker.get_today_progress()
    decision = evaluate_reminder(
        now=now,
        reminder_at=time(hour=cfg.reminder_hour, minute=cfg.reminder_minute),
        at_risk=tracker.is_streak_at_risk(),
        remaining_minutes=progress.remaining_minutes,
    )
    if not decision.due:
        logger.info("reminder not due at %s", now.isoformat(timespec="minutes"))
        return decision

    event_key = f"streak-risk:{now.date().isoformat()}"
    if tracker.db.mark_event_sent(event_key, now):
        logger.warning(
            "streak at risk: %s left to reach the %s goal (streak %s)",
            format_minutes_hm(decision.remaining_minutes),
            format_minutes_hm(progress.goal_minutes),
            tracker.calculate_streak(),
        )
    else:
        logger.info("reminder already recorded for %s", now.date())
    return decision


async def run_midnight_loop(
    tracker: StreakTracker,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    max_runs: int | None = None,
) -> int:
    """Finalize at every local midnight until cancelled (or `max_runs` passes).

    A suspended process may wake several days late; finalization rescans from
    the earliest open day, so the pass after a long sleep catches up fully.
    """
    runs = 0
    tracker.finalize_past_days()
    while max_runs is None or runs < max_runs:
        now = tracker.clock.now()
        delay = seconds_until(next_local_midnight(now), now) + MIDNIGHT_GRACE_SECONDS
        logger.info("next finalization in %.0fs", delay)
        await sleep(delay)
        written = tracker.finalize_past_days()
        logger.info("midnight pass: rows=%s streak=%s", written, tracker.calculate_streak())
        runs += 1
    return runs


def run_job(job_name: str, db: Database, settings: Settings) -> None:
    tracker = StreakTracker(db, SystemClock(settings.tz))
    if job_name == "finalize":
        run_finalize(tracker)
    elif job_name == "reminders":
        run_reminders(tracker)
    elif job_name == "midnight":
        asyncio.run(run_midnight_loop(tracker))
    else:
        raise SystemExit(f"Unknown job '{job_name}'. Expected one of: {', '.join(JOB_NAMES)}")

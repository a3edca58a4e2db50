from __future__ import annotations


class StreakTrackerError(Exception):
    pass


class StorageUnavailable(StreakTrackerError):
    """A read or write against the activity or status store failed.

    Never interpreted as "no activity": a storage failure that was read as zero
    minutes would break the streak for good once the day is finalized.
    """


class InvariantViolation(StreakTrackerError):
    """A finalized day was about to be rewritten, or logged against."""


class InvalidGoal(StreakTrackerError, ValueError):
    def __init__(self, goal: object) -> None:
        super().__init__(f"Daily goal must be a positive number of minutes, got {goal!r}")
        self.goal = goal


def require_valid_goal(goal: int) -> int:
    if isinstance(goal, bool) or not isinstance(goal, int) or goal <= 0:
        raise InvalidGoal(goal)
    return goal

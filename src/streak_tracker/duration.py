from __future__ import annotations

import re

from streak_tracker.db_constants import MAX_ENTRY_MINUTES

DURATION_PATTERN = re.compile(r"^(?:(?P<hours>\d+(?:\.\d+)?)h)?(?:(?P<minutes>\d+)m(?:in)?)?$")


class DurationParseError(ValueError):
    pass


def parse_duration_to_minutes(raw: str) -> int:
    """Parse `45`, `45m`, `45min`, `1h`, `1.5h` or `1h20m` into whole minutes."""
    value = raw.strip().lower().replace(" ", "")
    if not value:
        raise DurationParseError("Duration is required")

    if value.isdigit():
        total = int(value)
    else:
        match = DURATION_PATTERN.fullmatch(value)
        if not match or not (match.group("hours") or match.group("minutes")):
            raise DurationParseError("Invalid duration. Examples: 30, 45m, 1h, 1.5h, 1h20m")
        hours = float(match.group("hours")) if match.group("hours") else 0.0
        minutes = int(match.group("minutes")) if match.group("minutes") else 0
        total = int(round(hours * 60)) + minutes

    if total <= 0:
        raise DurationParseError("Duration must be positive")
    if total > MAX_ENTRY_MINUTES:
        raise DurationParseError("A single session cannot be longer than a day")
    return total

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Protocol
from zoneinfo import ZoneInfo


DEFAULT_TZ = "Europe/Oslo"


def now_local(tz_name: str = DEFAULT_TZ) -> datetime:
    return datetime.now(tz=ZoneInfo(tz_name))


def next_local_midnight(now: datetime) -> datetime:
    return datetime.combine(now.date() + timedelta(days=1), time.min, tzinfo=now.tzinfo)


def seconds_until(target: datetime, now: datetime) -> float:
    # Aware datetimes sharing a tzinfo subtract as wall-clock time, so go through UTC to count DST shifts.
    delta = target.astimezone(timezone.utc) - now.astimezone(timezone.utc)
    return max(delta.total_seconds(), 0.0)


def parse_hhmm(value: str) -> time:
    hour_str, minute_str = value.split(":", maxsplit=1)
    hour = int(hour_str)
    minute = int(minute_str)
    return time(hour=hour, minute=minute)


def iter_days(start: date, end_exclusive: date) -> Iterator[date]:
    day = start
    while day < end_exclusive:
        yield day
        day += timedelta(days=1)


@dataclass(frozen=True)
class DayRange:
    start: date
    end: date


def month_range(year: int, month: int) -> DayRange:
    start = date(year, month, 1)
    if month == 12:
        next_start = date(year + 1, 1, 1)
    else:
        next_start = date(year, month + 1, 1)
    return DayRange(start=start, end=next_start - timedelta(days=1))


class Clock(Protocol):
    def now(self) -> datetime: ...
    def today(self) -> date: ...


class SystemClock:
    def __init__(self, tz_name: str = DEFAULT_TZ) -> None:
        self.tz_name = tz_name

    def now(self) -> datetime:
        return now_local(self.tz_name)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a given instant; `advance` moves it forward."""

    def __init__(self, current: datetime) -> None:
        self.current = current

    @classmethod
    def on(cls, day: date, hour: int = 12, tz_name: str = DEFAULT_TZ) -> FixedClock:
        return cls(datetime.combine(day, time(hour=hour), tzinfo=ZoneInfo(tz_name)))

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def advance(self, days: int = 0, hours: int = 0, minutes: int = 0) -> None:
        self.current = self.current + timedelta(days=days, hours=hours, minutes=minutes)

import pytest

from streak_tracker.duration import DurationParseError, parse_duration_to_minutes


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("30", 30),
        ("45m", 45),
        ("45min", 45),
        ("1.5h", 90),
        ("1h20m", 80),
        ("1h 20m", 80),
        ("2h", 120),
        ("24h", 1440),
    ],
)
def test_parse_duration_valid(raw: str, expected: int) -> None:
    assert parse_duration_to_minutes(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "0", "0m", "-10", "1m20h", "h", "25h"])
def test_parse_duration_invalid(raw: str) -> None:
    with pytest.raises(DurationParseError):
        parse_duration_to_minutes(raw)

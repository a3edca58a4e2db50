from __future__ import annotations

import pytest

from streak_tracker.cli import main


@pytest.fixture(autouse=True)
def _env(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "cli.db"))
    monkeypatch.setenv("TZ", "Europe/Oslo")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")


def test_log_then_status(capsys) -> None:
    main(["log", "running", "35m"])
    out = capsys.readouterr().out
    assert "Logged 35m running." in out
    assert "Streak: 1 day" in out

    main(["status"])
    out = capsys.readouterr().out
    assert "35m / 30m" in out
    assert "🏃 Running 35m" in out


def test_goal_command(capsys) -> None:
    main(["goal", "60"])
    assert "Daily goal set to 1h." in capsys.readouterr().out


def test_invalid_goal_exits_non_zero(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["goal", "0"])
    assert excinfo.value.code == 1
    assert "Daily goal must be a positive number" in capsys.readouterr().err


def test_bad_duration_exits(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["log", "swimming", "soon"])
    assert excinfo.value.code == 2
    assert "Invalid duration" in capsys.readouterr().out


def test_unknown_activity_type_rejected_by_parser() -> None:
    with pytest.raises(SystemExit):
        main(["log", "cycling", "30"])


def test_finalize_history_and_delete(capsys) -> None:
    main(["log", "aerobic", "10"])
    main(["finalize"])
    assert "Finalized 0 day(s)" in capsys.readouterr().out

    main(["history", "--days", "3"])
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 3
    assert "10m / 30m  in progress" in lines[0]

    day = lines[0].split()[0]
    main(["delete-day", day])
    assert f"Deleted 1 activity for {day}." in capsys.readouterr().out


def test_reminder_command(capsys) -> None:
    main(["reminder", "21:45"])
    assert "Reminder time set to 21:45." in capsys.readouterr().out
    with pytest.raises(SystemExit):
        main(["reminder", "quarter past"])

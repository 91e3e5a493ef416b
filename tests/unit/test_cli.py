"""Tests for the community_calendar command-line entry point."""

import json
from pathlib import Path
from typing import Any

import pytest

from community_calendar.__main__ import run

pytestmark = pytest.mark.integration


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, raw_records: list[dict[str, Any]]) -> Path:
    """Point the CLI at a temporary payload with a frozen clock in Central time."""
    events_path = tmp_path / "events.json"
    events_path.write_text(json.dumps(raw_records), encoding="utf-8")
    listings_path = tmp_path / "listings.json"
    listings_path.write_text(
        json.dumps(
            [
                {"name": "Clinic", "short": "Walk-in care", "category": "health", "area": "peoria"},
                {"name": "Legal Aid", "category": "legal", "area": "virtual"},
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("COMMUNITYCAL_EVENTS_SOURCE", str(events_path))
    monkeypatch.setenv("COMMUNITYCAL_LISTINGS_SOURCE", str(listings_path))
    monkeypatch.setenv("COMMUNITYCAL_TIMEZONE", "America/Chicago")
    monkeypatch.setenv("COMMUNITYCAL_TEST_TIME", "2024-01-10T09:00:00-06:00")
    return tmp_path


def _run(cli_env: Path, *argv: str) -> int:
    return run(["--config", str(cli_env / "absent.yaml"), *argv])


def test_events_lists_current_month_without_past(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(cli_env, "events") == 0
    out = capsys.readouterr().out.splitlines()
    assert out[-1] == "3 events shown"
    assert "Board Meeting" in out[0]
    assert "Support Group" in out[1]
    assert "Open Mic Night" in out[2]


def test_events_include_past_and_query(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(cli_env, "events", "--include-past", "-q", "community center") == 0
    out = capsys.readouterr().out.splitlines()
    assert out[-1] == "2 events shown"
    assert "Fri, Jan 5, 2024" in out[0]


def test_export_ics_writes_crlf_file(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = cli_env / "out.ics"
    assert _run(cli_env, "export", "--index", "2", "--output", str(target)) == 0
    data = target.read_bytes()
    assert b"\r\nSUMMARY:Support Group\r\n" in data
    assert b"DTSTART:20240120T000000Z" in data
    assert "support-group-2024-01-19.ics" in capsys.readouterr().out


def test_export_google_link(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(cli_env, "export", "--index", "1", "--format", "google") == 0
    out = capsys.readouterr().out.strip()
    assert out.startswith("https://calendar.google.com/calendar/render?action=TEMPLATE")
    assert "dates=20240118T180000Z/20240118T190000Z" in out


def test_export_without_start_time_reports_not_exportable(
    cli_env: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "no_time.json"
    path.write_text(json.dumps([{"name": "Potluck", "date": "2024-01-20"}]), encoding="utf-8")
    monkeypatch.setenv("COMMUNITYCAL_EVENTS_SOURCE", str(path))

    assert _run(cli_env, "export", "--index", "1") == 1
    assert "No exportable calendar entry" in capsys.readouterr().out


def test_load_failure_is_terminal(cli_env: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("COMMUNITYCAL_EVENTS_SOURCE", str(cli_env / "missing.json"))
    assert _run(cli_env, "events") == 1
    assert capsys.readouterr().out.strip() == "Could not load events."


def test_years(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(cli_env, "years") == 0
    out = capsys.readouterr().out.splitlines()
    # Open-ended weekly rule extends the range to the upper bound
    assert out[0] == "2024 2025 2026 2027 2028 2029"
    assert out[1] == "Default selection: month=1 year=2024"


def test_directory(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(cli_env, "directory", "--category", "health") == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Clinic [Health / Peoria]"
    assert out[-1] == "1 listing shown"

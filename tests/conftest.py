"""Shared fixtures for community_calendar tests."""

from collections.abc import Generator
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from community_calendar.models import BaseEvent


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: Tests crossing module or I/O boundaries")


@pytest.fixture
def local_tz() -> ZoneInfo:
    """Deterministic viewer timezone.

    Central time observes DST, so conversions in tests exercise both the
    standard and the daylight offsets.
    """
    return ZoneInfo("America/Chicago")


@pytest.fixture
def fixed_now(local_tz: ZoneInfo) -> datetime:
    """A fixed "current instant" for past-event checks."""
    return datetime(2024, 1, 10, 9, 0, tzinfo=local_tz)


@pytest.fixture
def raw_records() -> list[dict[str, Any]]:
    """Raw event records as they appear in the events payload."""
    return [
        {
            "name": "Open Mic Night",
            "date": "2024-01-20",
            "time": "7-10 PM",
            "start_time": "19:00",
            "end_time": "22:00",
            "location": "Riverfront Cafe",
            "description": "Music, poetry and comedy.",
            "tags": ["music", "all-ages"],
            "website": "https://example.org/open-mic",
        },
        {
            "name": "Support Group",
            "start_date": "2024-01-05",
            "start_time": "18:00",
            "end_time": "19:30",
            "location": "Community Center",
            "tags": ["support"],
            "recurrence": {"freq": "weekly", "byweekday": ["FR"], "interval": 2},
        },
        {
            "name": "Board Meeting",
            "start_time": "12:00",
            "recurrence": {"freq": "monthly", "weekday": "TH", "nth": 3},
        },
        {
            "name": "Undated Announcement",
            "description": "Date to be announced",
        },
    ]


@pytest.fixture
def raw_events(raw_records: list[dict[str, Any]]) -> list[BaseEvent]:
    return [BaseEvent.model_validate(record) for record in raw_records]


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear environment overrides so host settings never leak into tests."""
    for name in (
        "COMMUNITYCAL_TEST_TIME",
        "COMMUNITYCAL_TIMEZONE",
        "COMMUNITYCAL_EVENTS_SOURCE",
        "COMMUNITYCAL_LISTINGS_SOURCE",
        "COMMUNITYCAL_LOG_LEVEL",
        "COMMUNITYCAL_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    yield

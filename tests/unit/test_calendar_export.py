"""Unit tests for community_calendar.calendar_export."""

from datetime import datetime, timezone
from typing import Any
from urllib.parse import parse_qs, urlsplit
from zoneinfo import ZoneInfo

import pytest

from community_calendar.calendar_export import (
    GOOGLE_CALENDAR_URL,
    build_google_calendar_link,
    build_ics,
    ics_filename,
    occurrence_uid,
    occurrence_window,
    slugify,
    to_utc_stamp,
)
from community_calendar.date_utils import DateOnly, TimeOfDay
from community_calendar.materializer import explicit_occurrence, materialize
from community_calendar.models import BaseEvent, Occurrence

pytestmark = pytest.mark.unit

GENERATED_AT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _occurrence(day: DateOnly = DateOnly(2024, 1, 5), **fields: Any) -> Occurrence:
    record: dict[str, Any] = {"name": "Jazz Night", "start_time": "18:00", "end_time": "19:30"}
    record.update(fields)
    return explicit_occurrence(BaseEvent.model_validate(record), day)


def test_to_utc_stamp_winter_offset(local_tz: ZoneInfo) -> None:
    """18:00 CST (UTC-6) is midnight UTC the next day."""
    assert to_utc_stamp(DateOnly(2024, 1, 5), TimeOfDay(18, 0), local_tz) == "20240106T000000Z"


def test_to_utc_stamp_summer_offset(local_tz: ZoneInfo) -> None:
    assert to_utc_stamp(DateOnly(2024, 7, 5), TimeOfDay(18, 0), local_tz) == "20240705T230000Z"


def test_to_utc_stamp_without_time_is_none(local_tz: ZoneInfo) -> None:
    assert to_utc_stamp(DateOnly(2024, 7, 5), None, local_tz) is None


def test_occurrence_window_uses_end_time(local_tz: ZoneInfo) -> None:
    start, end = occurrence_window(_occurrence(), local_tz)
    assert start == datetime(2024, 1, 6, 0, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 1, 6, 1, 30, tzinfo=timezone.utc)


def test_occurrence_window_defaults_to_sixty_minutes(local_tz: ZoneInfo) -> None:
    start, end = occurrence_window(_occurrence(end_time=None), local_tz)
    assert (end - start).total_seconds() == 3600


def test_default_duration_is_wall_clock_on_dst_end_day(local_tz: ZoneInfo) -> None:
    """On 2024-11-03 clocks fall back at 02:00; 00:30 + 60 wall-clock minutes is 01:30 CDT."""
    occurrence = _occurrence(DateOnly(2024, 11, 3), start_time="00:30", end_time=None)
    start, end = occurrence_window(occurrence, local_tz)
    assert start == datetime(2024, 11, 3, 5, 30, tzinfo=timezone.utc)
    assert end == datetime(2024, 11, 3, 6, 30, tzinfo=timezone.utc)


def test_end_before_start_rolls_to_next_day(local_tz: ZoneInfo) -> None:
    start, end = occurrence_window(_occurrence(start_time="22:00", end_time="01:00"), local_tz)
    assert (end - start).total_seconds() == 3 * 3600


def test_invalid_start_time_means_not_exportable(local_tz: ZoneInfo) -> None:
    assert occurrence_window(_occurrence(start_time="7pm"), local_tz) is None


def test_google_link_contains_utc_pair_and_fields(local_tz: ZoneInfo) -> None:
    occurrence = _occurrence(location="Riverfront Cafe", description="Live music / open jam")
    link = build_google_calendar_link(occurrence, local_tz)

    assert link is not None
    assert link.startswith(GOOGLE_CALENDAR_URL + "?")
    params = parse_qs(urlsplit(link).query)
    assert params["action"] == ["TEMPLATE"]
    assert params["text"] == ["Jazz Night"]
    assert params["details"] == ["Live music / open jam"]
    assert params["location"] == ["Riverfront Cafe"]
    assert params["dates"] == ["20240106T000000Z/20240106T013000Z"]
    assert "&dates=20240106T000000Z/20240106T013000Z" in link


def test_google_link_none_without_start_time(local_tz: ZoneInfo) -> None:
    assert build_google_calendar_link(_occurrence(start_time=None), local_tz) is None


def test_ics_none_without_start_time(local_tz: ZoneInfo) -> None:
    assert build_ics(_occurrence(start_time=None), local_tz) is None


def test_ics_document_structure(local_tz: ZoneInfo) -> None:
    occurrence = _occurrence(
        location="Riverfront Cafe",
        description="Live music",
        website="https://example.org/jazz",
    )
    text = build_ics(occurrence, local_tz, generated_at=GENERATED_AT)

    assert text is not None
    lines = text.split("\r\n")
    assert lines[0] == "BEGIN:VCALENDAR"
    for expected in (
        "VERSION:2.0",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        "DTSTART:20240106T000000Z",
        "DTEND:20240106T013000Z",
        "DTSTAMP:20240101T120000Z",
        "SUMMARY:Jazz Night",
        "LOCATION:Riverfront Cafe",
        "DESCRIPTION:Live music",
        "URL:https://example.org/jazz",
        "END:VEVENT",
        "END:VCALENDAR",
    ):
        assert expected in lines
    assert any(line.startswith("PRODID:") for line in lines)
    assert any(line.startswith("UID:") for line in lines)


def test_ics_uses_crlf_line_endings_only(local_tz: ZoneInfo) -> None:
    text = build_ics(_occurrence(description="One line"), local_tz, generated_at=GENERATED_AT)
    assert text is not None
    assert "\r\n" in text
    assert "\n" not in text.replace("\r\n", "")


def test_ics_omits_blank_optional_lines(local_tz: ZoneInfo) -> None:
    text = build_ics(_occurrence(location="   ", description=""), local_tz, generated_at=GENERATED_AT)
    assert text is not None
    assert "LOCATION" not in text
    assert "DESCRIPTION" not in text
    assert "URL" not in text


def test_ics_falls_back_to_ticket_url(local_tz: ZoneInfo) -> None:
    text = build_ics(_occurrence(tickets="https://tickets.example.org/1"), local_tz, generated_at=GENERATED_AT)
    assert text is not None
    assert "URL:https://tickets.example.org/1" in text.split("\r\n")


def test_uid_is_deterministic_and_unique_per_occurrence() -> None:
    base = BaseEvent.model_validate({"name": "Support  Group", "start_time": "18:00"})
    first = materialize(base, DateOnly(2024, 1, 5))
    again = materialize(base, DateOnly(2024, 1, 5))
    second = materialize(base, DateOnly(2024, 1, 19))

    assert occurrence_uid(first) == occurrence_uid(again)
    assert occurrence_uid(first) != occurrence_uid(second)
    assert occurrence_uid(first).startswith("support-group-20240105-")


def test_uid_differs_for_records_sharing_name_date_time_and_place() -> None:
    day = DateOnly(2024, 1, 5)
    short = _occurrence(day, location="Main Hall", end_time="19:00", description="Beginners")
    long = _occurrence(day, location="Main Hall", end_time="21:00", description="Beginners")
    advanced = _occurrence(day, location="Main Hall", end_time="19:00", description="Advanced")

    uids = {occurrence_uid(short), occurrence_uid(long), occurrence_uid(advanced)}
    assert len(uids) == 3


def test_slugify_and_filename() -> None:
    assert slugify("Open Mic: Night #3!") == "open-mic-night-3"
    assert slugify("***") == "event"
    assert ics_filename(_occurrence()) == "jazz-night-2024-01-05.ics"

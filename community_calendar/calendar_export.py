"""Export occurrences to external calendar tools.

Produces a single-event ICS document and a Google Calendar deep link. Both
need a start time: an occurrence without one has no exportable entry and the
builders return None.
"""

from __future__ import annotations

import datetime
import hashlib
import logging
import re
from typing import Optional
from urllib.parse import quote, urlencode

from icalendar import Calendar, Event as ICalEvent

from .date_utils import DateOnly, TimeOfDay, try_parse_time
from .models import Occurrence
from .timezone_utils import get_local_timezone, now_utc

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"
DEFAULT_PRODID = "-//Community Calendar//Events//EN"
DEFAULT_DURATION_MINUTES = 60
UID_DOMAIN = "community-calendar"

UTC_STAMP_FORMAT = "%Y%m%dT%H%M%SZ"

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lower-case ``text`` and join its alphanumeric runs with hyphens."""
    slug = _SLUG_RE.sub("-", (text or "").lower()).strip("-")
    return slug or "event"


def _local_instant(day: DateOnly, time: TimeOfDay) -> datetime.datetime:
    # Naive wall-clock value; minutes are added before the zone is attached
    return datetime.datetime.combine(day.to_date(), time.to_time())


def _to_utc(local: datetime.datetime, tz: datetime.tzinfo) -> datetime.datetime:
    return local.replace(tzinfo=tz).astimezone(datetime.timezone.utc)


def to_utc_stamp(
    day: DateOnly,
    time: Optional[TimeOfDay],
    tz: Optional[datetime.tzinfo] = None,
) -> Optional[str]:
    """Format a local wall-clock date and time as a UTC ``YYYYMMDDTHHMMSSZ`` stamp.

    Args:
        day: Calendar day
        time: Local start time; None means there is nothing to export
        tz: Viewer's local timezone (resolved from config/host when omitted)

    Returns:
        The UTC stamp, or None when ``time`` is absent
    """
    if time is None:
        return None
    zone = tz or get_local_timezone()
    return _to_utc(_local_instant(day, time), zone).strftime(UTC_STAMP_FORMAT)


def occurrence_window(
    occurrence: Occurrence,
    tz: Optional[datetime.tzinfo] = None,
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
) -> Optional[tuple[datetime.datetime, datetime.datetime]]:
    """Return the UTC (start, end) instants of an occurrence.

    A missing end time means ``default_duration_minutes`` of wall-clock time
    after the start. An end at or before the start is taken to fall on the
    next day.

    Returns:
        (start, end) in UTC, or None when the occurrence has no valid start time
    """
    start_time = try_parse_time(occurrence.start_time)
    if start_time is None:
        return None

    zone = tz or get_local_timezone()
    local_start = _local_instant(occurrence.day, start_time)

    end_time = try_parse_time(occurrence.end_time)
    if end_time is None:
        local_end = local_start + datetime.timedelta(minutes=default_duration_minutes)
    else:
        local_end = _local_instant(occurrence.day, end_time)
        if local_end <= local_start:
            local_end += datetime.timedelta(days=1)

    return _to_utc(local_start, zone), _to_utc(local_end, zone)


def build_google_calendar_link(
    occurrence: Occurrence,
    tz: Optional[datetime.tzinfo] = None,
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
) -> Optional[str]:
    """Build a Google Calendar "add event" deep link for an occurrence.

    Returns:
        The URL, or None when the occurrence has no start time
    """
    window = occurrence_window(occurrence, tz, default_duration_minutes)
    if window is None:
        logger.debug("No start time for %r on %s; no calendar link", occurrence.name, occurrence.day)
        return None

    start, end = window
    params = {
        "action": "TEMPLATE",
        "text": occurrence.name,
        "details": occurrence.description or "",
        "location": occurrence.location or "",
        "dates": f"{start.strftime(UTC_STAMP_FORMAT)}/{end.strftime(UTC_STAMP_FORMAT)}",
    }
    # "/" stays literal in the dates pair
    query = urlencode(params, quote_via=quote, safe="/")
    return f"{GOOGLE_CALENDAR_URL}?{query}"


def occurrence_uid(occurrence: Occurrence) -> str:
    """Deterministic UID for an occurrence.

    Derived from the event identity and its date, so re-exporting the same
    occurrence yields the same UID while distinct occurrences differ.
    """
    identity = "|".join(
        [
            " ".join(occurrence.name.lower().split()),
            occurrence.day.isoformat(),
            occurrence.start_time or "",
            occurrence.end_time or "",
            " ".join((occurrence.location or "").lower().split()),
            " ".join((occurrence.description or "").split()),
        ]
    )
    digest = hashlib.sha1(identity.encode("utf-8")).hexdigest()[:12]  # noqa: S324
    return f"{slugify(occurrence.name)}-{occurrence.day.compact()}-{digest}@{UID_DOMAIN}"


def build_ics(
    occurrence: Occurrence,
    tz: Optional[datetime.tzinfo] = None,
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
    prodid: str = DEFAULT_PRODID,
    generated_at: Optional[datetime.datetime] = None,
) -> Optional[str]:
    """Build a single-VEVENT ICS document for an occurrence.

    Optional LOCATION, DESCRIPTION and URL lines are omitted when blank.
    Lines are CRLF-terminated as RFC 5545 requires.

    Args:
        occurrence: Occurrence to export
        tz: Viewer's local timezone
        default_duration_minutes: Length used when no end time is given
        prodid: PRODID of the generated calendar
        generated_at: DTSTAMP value (defaults to now)

    Returns:
        The ICS text, or None when the occurrence has no start time
    """
    window = occurrence_window(occurrence, tz, default_duration_minutes)
    if window is None:
        logger.debug("No start time for %r on %s; no ICS export", occurrence.name, occurrence.day)
        return None

    start, end = window
    stamp = (generated_at or now_utc()).astimezone(datetime.timezone.utc)

    cal = Calendar()
    cal.add("prodid", prodid)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")

    event = ICalEvent()
    event.add("uid", occurrence_uid(occurrence))
    event.add("dtstamp", stamp.replace(microsecond=0))
    event.add("dtstart", start)
    event.add("dtend", end)
    event.add("summary", occurrence.name)

    if occurrence.location and occurrence.location.strip():
        event.add("location", occurrence.location)
    if occurrence.description and occurrence.description.strip():
        event.add("description", occurrence.description)
    url = occurrence.website or occurrence.tickets
    if url and url.strip():
        event.add("url", url)

    cal.add_component(event)
    return cal.to_ical().decode("utf-8")


def ics_filename(occurrence: Occurrence) -> str:
    """Download file name for an occurrence's ICS document."""
    return f"{slugify(occurrence.name)}-{occurrence.day.isoformat()}.ics"

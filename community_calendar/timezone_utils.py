"""Timezone resolution and clock access for community_calendar.

All calendar arithmetic happens in the viewer's local wall-clock day. The
local zone is either configured by IANA name or taken from the host.
"""

from __future__ import annotations

import datetime
import logging
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser
from dateutil import tz as dateutil_tz

logger = logging.getLogger(__name__)

TEST_TIME_ENV = "COMMUNITYCAL_TEST_TIME"
TIMEZONE_ENV = "COMMUNITYCAL_TIMEZONE"


def get_local_timezone(name: str | None = None) -> datetime.tzinfo:
    """Resolve the viewer's local timezone.

    Args:
        name: IANA timezone name (e.g. "America/Chicago"). When omitted the
            COMMUNITYCAL_TIMEZONE environment variable is consulted, then the
            host's local zone.

    Returns:
        A tzinfo usable for wall-clock conversions.
    """
    tz_name = name or os.environ.get(TIMEZONE_ENV)
    if tz_name:
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r; falling back to host local time", tz_name)

    # DST-aware host zone, not a fixed offset captured from the current instant
    return dateutil_tz.tzlocal()


def now_utc() -> datetime.datetime:
    """Return the current UTC time with tzinfo.

    Can be overridden for testing via the COMMUNITYCAL_TEST_TIME environment
    variable (ISO 8601, e.g. "2024-01-05T18:00:00-06:00"). A naive override is
    taken as UTC.
    """
    test_time = os.environ.get(TEST_TIME_ENV)
    if test_time:
        try:
            dt = date_parser.isoparse(test_time)
        except (ValueError, OverflowError) as e:
            logger.warning("Failed to parse %s=%r: %s", TEST_TIME_ENV, test_time, e)
        else:
            if dt.tzinfo is None:
                return dt.replace(tzinfo=datetime.timezone.utc)
            return dt.astimezone(datetime.timezone.utc)

    return datetime.datetime.now(datetime.timezone.utc)


def now_local(tz: datetime.tzinfo | None = None) -> datetime.datetime:
    """Return the current time converted to the viewer's local zone."""
    return now_utc().astimezone(tz or get_local_timezone())

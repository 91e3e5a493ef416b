"""Calendar date and clock time value types.

Dates are handled as plain calendar days (year, month, day). When an instant
is needed the day is pinned to local noon, so day-level comparisons never
shift across a daylight-saving transition or a UTC offset boundary.
"""

from __future__ import annotations

import calendar
import datetime
import logging
import re
from dataclasses import dataclass
from typing import Optional

from .exceptions import InvalidDateError, InvalidTimeError

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

# Indexed by datetime.date.weekday() (Monday == 0)
WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")

MIDDAY = datetime.time(12, 0)


@dataclass(frozen=True, order=True)
class DateOnly:
    """A calendar day with no time-of-day component.

    Ordering and equality are by calendar day only. Construction validates the
    day against the real calendar and raises InvalidDateError instead of
    rolling over (2024-02-30 is rejected, not turned into March 1).
    """

    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        try:
            datetime.date(self.year, self.month, self.day)
        except (TypeError, ValueError) as e:
            raise InvalidDateError(
                f"Invalid calendar date: {self.year}-{self.month}-{self.day}"
            ) from e

    @classmethod
    def from_date(cls, value: datetime.date) -> DateOnly:
        return cls(value.year, value.month, value.day)

    def to_date(self) -> datetime.date:
        return datetime.date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def compact(self) -> str:
        """Return the basic ISO form (YYYYMMDD) used in ICS identifiers."""
        return f"{self.year:04d}{self.month:02d}{self.day:02d}"

    def __str__(self) -> str:
        return self.isoformat()

    @property
    def weekday_code(self) -> str:
        return WEEKDAY_CODES[self.to_date().weekday()]

    def add_days(self, days: int) -> DateOnly:
        return DateOnly.from_date(self.to_date() + datetime.timedelta(days=days))

    def days_until(self, other: DateOnly) -> int:
        """Signed number of calendar days from this date to ``other``."""
        return (other.to_date() - self.to_date()).days

    def midday(self, tz: Optional[datetime.tzinfo] = None) -> datetime.datetime:
        """Return the normalized mid-day instant for this day in ``tz``."""
        return datetime.datetime.combine(self.to_date(), MIDDAY, tzinfo=tz)


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """A 24-hour wall-clock time with minute precision."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not (0 <= self.hour <= 23 and 0 <= self.minute <= 59):
            raise InvalidTimeError(f"Invalid time of day: {self.hour}:{self.minute}")

    def to_time(self) -> datetime.time:
        return datetime.time(self.hour, self.minute)

    def isoformat(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return self.isoformat()


def parse_date(text: object) -> DateOnly:
    """Parse a strict ``YYYY-MM-DD`` literal.

    Args:
        text: Candidate date literal

    Returns:
        The parsed DateOnly

    Raises:
        InvalidDateError: If the literal does not match the pattern or names
            a day that does not exist
    """
    if not isinstance(text, str):
        raise InvalidDateError(f"Expected a YYYY-MM-DD string, got {text!r}")
    match = _DATE_RE.match(text)
    if not match:
        raise InvalidDateError(f"Expected a YYYY-MM-DD string, got {text!r}")
    year, month, day = (int(part) for part in match.groups())
    return DateOnly(year, month, day)


def parse_time(text: object) -> TimeOfDay:
    """Parse a strict 24-hour ``H:MM`` or ``HH:MM`` literal.

    Raises:
        InvalidTimeError: If the literal is malformed or out of range
    """
    if not isinstance(text, str):
        raise InvalidTimeError(f"Expected an HH:MM string, got {text!r}")
    match = _TIME_RE.match(text)
    if not match:
        raise InvalidTimeError(f"Expected an HH:MM string, got {text!r}")
    return TimeOfDay(int(match.group(1)), int(match.group(2)))


def try_parse_date(text: object) -> Optional[DateOnly]:
    """Non-raising variant of parse_date; returns None for any invalid input."""
    if text is None or text == "":
        return None
    try:
        return parse_date(text)
    except InvalidDateError:
        logger.debug("Ignoring invalid date literal %r", text)
        return None


def try_parse_time(text: object) -> Optional[TimeOfDay]:
    """Non-raising variant of parse_time; returns None for any invalid input."""
    if text is None or text == "":
        return None
    try:
        return parse_time(text)
    except InvalidTimeError:
        logger.debug("Ignoring invalid time literal %r", text)
        return None


def compare(a: DateOnly, b: DateOnly) -> int:
    """Three-way comparison by calendar day: -1, 0 or 1."""
    return (a > b) - (a < b)


def end_of_day_instant(d: DateOnly, tz: Optional[datetime.tzinfo] = None) -> datetime.datetime:
    """Return the latest representable instant of ``d`` in ``tz``."""
    return datetime.datetime.combine(d.to_date(), datetime.time.max, tzinfo=tz)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_start(year: int, month: int) -> DateOnly:
    return DateOnly(year, month, 1)


def month_end(year: int, month: int) -> DateOnly:
    return DateOnly(year, month, days_in_month(year, month))


def format_display_date(d: DateOnly) -> str:
    """Format a date for listing cards, e.g. "Fri, Jan 5, 2024"."""
    value = d.to_date()
    return f"{value:%a}, {value:%b} {value.day}, {value.year}"

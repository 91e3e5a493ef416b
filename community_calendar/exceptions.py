"""Exception hierarchy for community_calendar.

Parsers raise these; the list-building and export stages catch the
date/time errors and drop the affected item instead of failing the view.
"""

from __future__ import annotations


class CommunityCalendarError(Exception):
    """Base exception for all community_calendar errors."""


class InvalidDateError(CommunityCalendarError, ValueError):
    """A date literal is not ``YYYY-MM-DD`` or names an impossible calendar day.

    Raised when:
    - The text does not match the literal pattern (``2024-1-5``, ``05/01/2024``)
    - The month or day is out of range (month 13, February 30)
    """


class InvalidTimeError(CommunityCalendarError, ValueError):
    """A time literal is not ``H:MM``/``HH:MM`` or is outside 00:00..23:59."""


class EventsLoadError(CommunityCalendarError):
    """The event or listing payload could not be loaded.

    This is the only terminal error of a view: the caller shows a
    "could not load" state and no partial data.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigError(CommunityCalendarError, ValueError):
    """Configuration file parsed but is not a mapping."""

"""community_calendar - recurring event expansion, filtering and calendar export.

Turns a community event payload into the concrete occurrence list shown for a
year/month selection, and hands single occurrences off to calendar tools
(ICS documents and Google Calendar links).
"""

from .calendar_export import build_google_calendar_link, build_ics, to_utc_stamp
from .date_utils import DateOnly, TimeOfDay, compare, end_of_day_instant, parse_date, parse_time
from .event_filter import FilterEngine
from .event_list import EventListBuilder, build_event_list
from .exceptions import (
    CommunityCalendarError,
    EventsLoadError,
    InvalidDateError,
    InvalidTimeError,
)
from .materializer import materialize
from .models import BaseEvent, DirectoryListing, Frequency, Occurrence, RecurrenceRule
from .rrule_expander import RecurrenceExpander, expand
from .year_range import derive_year_range

__version__ = "1.0.0"

__all__ = [
    "BaseEvent",
    "CommunityCalendarError",
    "DateOnly",
    "DirectoryListing",
    "EventListBuilder",
    "EventsLoadError",
    "FilterEngine",
    "Frequency",
    "InvalidDateError",
    "InvalidTimeError",
    "Occurrence",
    "RecurrenceExpander",
    "RecurrenceRule",
    "TimeOfDay",
    "build_event_list",
    "build_google_calendar_link",
    "build_ics",
    "compare",
    "derive_year_range",
    "end_of_day_instant",
    "expand",
    "materialize",
    "parse_date",
    "parse_time",
    "to_utc_stamp",
]

"""Filtering of built occurrence lists by text, month, year and past status."""

from __future__ import annotations

import datetime
import logging
import re
from collections.abc import Iterable
from typing import Optional, Union

from .date_utils import end_of_day_instant
from .models import Occurrence
from .rrule_expander import ALL, resolve_target_months
from .timezone_utils import get_local_timezone, now_utc

logger = logging.getLogger(__name__)

SelectionValue = Union[str, int]

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_query(text: Optional[str]) -> str:
    """Lower-case ``text``, collapse whitespace runs and trim."""
    return _WHITESPACE_RE.sub(" ", str(text or "").lower()).strip()


def search_haystack(occurrence: Occurrence) -> str:
    """Normalized text an occurrence is searched against."""
    return normalize_query(
        " ".join(
            [
                occurrence.name or "",
                occurrence.day.isoformat(),
                occurrence.display_time,
                occurrence.location or "",
                occurrence.description or "",
                " ".join(occurrence.tags),
                occurrence.website or "",
                occurrence.tickets or "",
            ]
        )
    )


def _selection_matches(selection: SelectionValue, value: int) -> bool:
    if isinstance(selection, str):
        text = selection.strip().lower()
        if text == ALL:
            return True
        # numeric strings compare by value
        return text.isdigit() and int(text) == value
    return selection == value


def _month_matches(selection: SelectionValue, month: int) -> bool:
    return month in resolve_target_months(selection)


def count_label(count: int, noun: str = "event") -> str:
    """Human-readable result count, e.g. "1 event shown" / "3 events shown"."""
    return f"{count} {noun}{'' if count == 1 else 's'} shown"


class FilterEngine:
    """Apply the listing filters to occurrences.

    Past-event checks compare the end of the occurrence's local day against
    the current instant, so an event stays visible for the whole of its day.
    """

    def __init__(self, tz: Optional[datetime.tzinfo] = None) -> None:
        """Initialize the filter.

        Args:
            tz: Viewer's local timezone; resolved from config/host when omitted
        """
        self.tz = tz or get_local_timezone()

    def is_past(self, occurrence: Occurrence, now: Optional[datetime.datetime] = None) -> bool:
        current = now or now_utc()
        return end_of_day_instant(occurrence.day, self.tz) < current

    def matches(
        self,
        occurrence: Occurrence,
        query: str = "",
        month_filter: SelectionValue = ALL,
        year_filter: SelectionValue = ALL,
        include_past: bool = False,
        now: Optional[datetime.datetime] = None,
    ) -> bool:
        """Check whether an occurrence passes every filter.

        Args:
            occurrence: Occurrence to test
            query: Free-text query; normalized before matching, empty matches all
            month_filter: "all" or a month 1-12
            year_filter: "all" or a year
            include_past: Keep occurrences whose day has already ended
            now: Current instant (timezone-aware); defaults to the clock

        Returns:
            True if the occurrence should be shown
        """
        if not include_past and self.is_past(occurrence, now):
            return False

        if not _selection_matches(year_filter, occurrence.year):
            return False
        if not _month_matches(month_filter, occurrence.month):
            return False

        needle = normalize_query(query)
        if not needle:
            return True
        return needle in search_haystack(occurrence)

    def filter_occurrences(
        self,
        occurrences: Iterable[Occurrence],
        query: str = "",
        month_filter: SelectionValue = ALL,
        year_filter: SelectionValue = ALL,
        include_past: bool = False,
        now: Optional[datetime.datetime] = None,
    ) -> list[Occurrence]:
        """Return the occurrences that pass ``matches``, preserving order."""
        current = now or now_utc()
        items = list(occurrences)
        kept = [
            occurrence
            for occurrence in items
            if self.matches(occurrence, query, month_filter, year_filter, include_past, current)
        ]
        logger.debug("Filter kept %d of %d occurrence(s)", len(kept), len(items))
        return kept

"""Build the occurrence list shown for a year/month selection."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Optional, TypeVar, Union

from .date_utils import DateOnly, try_parse_date
from .materializer import explicit_occurrence, materialize
from .models import BaseEvent, Occurrence
from .rrule_expander import ALL, MonthFilter, RecurrenceExpander

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseEvent)

_EPOCH = DateOnly(1, 1, 1)


def _sort_key(item: BaseEvent) -> tuple[bool, DateOnly]:
    day = item.day if isinstance(item, Occurrence) else try_parse_date(item.date)
    # Undated items sort after all dated ones
    return (day is None, day or _EPOCH)


def sort_by_date(items: Iterable[T]) -> list[T]:
    """Sort events or occurrences ascending by date.

    Items whose date is missing or unparseable go last. The sort is stable, so
    undated items and same-day items keep their original relative order.
    """
    return sorted(items, key=_sort_key)


class EventListBuilder:
    """Combine explicitly dated events and recurrence expansions into one list."""

    def __init__(self, expander: Optional[RecurrenceExpander] = None) -> None:
        self.expander = expander or RecurrenceExpander()

    def build(
        self,
        raw_events: Sequence[BaseEvent],
        year: Union[int, str],
        month_filter: MonthFilter = ALL,
    ) -> list[Occurrence]:
        """Build the sorted occurrence list for a selection.

        An event with an explicit date contributes that date as-is. An event
        with a recurrence rule contributes every expanded date for the
        selection. An event with both contributes both, without deduplication.
        Explicit dates that cannot be parsed are dropped.

        Args:
            raw_events: Events in source order
            year: Year used for recurrence expansion
            month_filter: "all" or a month 1-12 used for recurrence expansion

        Returns:
            Occurrences sorted ascending by date
        """
        occurrences: list[Occurrence] = []
        dropped = 0

        for event in raw_events:
            if event.date:
                day = try_parse_date(event.date)
                if day is None:
                    dropped += 1
                else:
                    occurrences.append(explicit_occurrence(event, day))

            if event.recurrence is not None:
                for day in self.expander.expand(event, year, month_filter):
                    occurrences.append(materialize(event, day))

        if dropped:
            logger.debug("Dropped %d event(s) with unparseable dates", dropped)

        logger.debug(
            "Built %d occurrence(s) from %d event(s) for year=%s month=%s",
            len(occurrences),
            len(raw_events),
            year,
            month_filter,
        )
        return sort_by_date(occurrences)


def build_event_list(
    raw_events: Sequence[BaseEvent],
    year: Union[int, str],
    month_filter: MonthFilter = ALL,
) -> list[Occurrence]:
    """Convenience wrapper around EventListBuilder.build."""
    return EventListBuilder().build(raw_events, year, month_filter)

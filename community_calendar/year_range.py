"""Selectable year range and default selection for the event view."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Sequence
from typing import Optional

from .date_utils import try_parse_date
from .models import BaseEvent
from .rrule_expander import ALL
from .timezone_utils import now_local

logger = logging.getLogger(__name__)

DEFAULT_YEARS_BACK = 1
DEFAULT_YEARS_AHEAD = 5


def derive_year_range(
    raw_events: Iterable[BaseEvent],
    current_year: Optional[int] = None,
    years_back: int = DEFAULT_YEARS_BACK,
    years_ahead: int = DEFAULT_YEARS_AHEAD,
) -> list[int]:
    """Compute the years offered in the year selector.

    Collects every year referenced by explicit dates, recurrence anchors and
    ``until`` bounds, plus the current year. A rule without ``until`` runs
    open-ended and extends the range to its upper limit. The result is clamped
    to ``[current_year - years_back, current_year + years_ahead]``.

    Args:
        raw_events: Events as loaded from the data source
        current_year: Year treated as "now" (defaults to the local clock)
        years_back: Years before the current one that may be offered
        years_ahead: Years after the current one that may be offered

    Returns:
        Ascending list of selectable years
    """
    year_now = current_year if current_year is not None else now_local().year
    lower = year_now - years_back
    upper = year_now + years_ahead

    years = {year_now}
    open_ended = False
    for event in raw_events:
        for literal in (event.date, event.start_date):
            day = try_parse_date(literal)
            if day is not None:
                years.add(day.year)
        rule = event.recurrence
        if rule is None:
            continue
        until = try_parse_date(rule.until)
        if until is not None:
            years.add(until.year)
        elif rule.until is None:
            open_ended = True

    first = max(min(years), lower)
    last = upper if open_ended else min(max(years), upper)
    logger.debug("Year range %d..%d (data %d..%d)", first, last, min(years), max(years))
    return list(range(first, last + 1))


def default_selection(
    years: Sequence[int],
    now: Optional[datetime.datetime] = None,
) -> tuple[str, str]:
    """Initial (month, year) selection for the event view.

    The current month is always selectable; the current year is preselected
    when it is offered, otherwise the year selector starts at "all".
    """
    current = now or now_local()
    year = str(current.year) if current.year in years else ALL
    return str(current.month), year

"""Recurrence rule expansion for community calendar events.

Expands a base event's recurrence rule into the concrete calendar days it
occurs on within a target year, optionally restricted to a single month.
Every call is independent: no state is kept between expansions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Optional, Union

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from .date_utils import DateOnly, days_in_month, month_end, month_start, try_parse_date
from .models import BaseEvent, Frequency, RecurrenceRule

logger = logging.getLogger(__name__)

MonthFilter = Union[str, int]

ALL = "all"

WEEKDAYS = {"MO": MO, "TU": TU, "WE": WE, "TH": TH, "FR": FR, "SA": SA, "SU": SU}

MAX_ORDINAL = 5


def resolve_target_months(month_filter: MonthFilter) -> list[int]:
    """Return the months a filter selects.

    Args:
        month_filter: "all", a month number, or a numeric string

    Returns:
        Ascending month numbers; empty for an unusable filter
    """
    if isinstance(month_filter, str):
        value = month_filter.strip().lower()
        if value == ALL:
            return list(range(1, 13))
        if not value.isdigit():
            return []
        month = int(value)
    elif isinstance(month_filter, int) and not isinstance(month_filter, bool):
        month = month_filter
    else:
        return []
    return [month] if 1 <= month <= 12 else []


def _months_between(origin: DateOnly, year: int, month: int) -> int:
    return (year - origin.year) * 12 + (month - origin.month)


class RecurrenceExpander:
    """Expand recurrence rules into occurrence dates.

    Interval counting is measured from the event's anchor (``start_date``).
    Without an anchor it falls back to the start of the expansion window:
    weekly rules count from the first day of the first target month, monthly
    rules from January of the target year. This fallback is weaker than an
    anchor since the qualifying slots move with the viewed window.
    """

    def expand(
        self,
        base: BaseEvent,
        year: Union[int, str],
        month_filter: MonthFilter = ALL,
    ) -> Iterator[DateOnly]:
        """Yield the dates ``base`` occurs on in ``year``.

        Args:
            base: Event carrying the recurrence rule
            year: Target year
            month_filter: "all" or a single month 1-12

        Yields:
            Occurrence dates, ascending within each month, months ascending
        """
        rule = base.recurrence
        if rule is None:
            return

        try:
            target_year = int(year)
        except (TypeError, ValueError):
            logger.debug("Ignoring expansion for non-numeric year %r", year)
            return

        months = resolve_target_months(month_filter)
        if not months:
            return

        frequency = rule.frequency
        if frequency is None:
            logger.debug("Event %r has unknown recurrence freq %r", base.name, rule.freq)
            return

        if rule.interval < 1:
            logger.debug("Event %r has invalid recurrence interval %r", base.name, rule.interval)
            return

        until: Optional[DateOnly] = None
        if rule.until is not None:
            until = try_parse_date(rule.until)
            if until is None:
                logger.warning("Event %r has malformed until %r; skipping rule", base.name, rule.until)
                return

        anchor: Optional[DateOnly] = None
        if base.start_date:
            anchor = try_parse_date(base.start_date)
            if anchor is None:
                logger.warning(
                    "Event %r has malformed start_date %r; skipping rule", base.name, base.start_date
                )
                return

        if frequency is Frequency.WEEKLY:
            origin = anchor or month_start(target_year, months[0])
        else:
            origin = anchor or month_start(target_year, 1)

        for month in months:
            first = month_start(target_year, month)
            last = month_end(target_year, month)
            if until is not None:
                if until < first:
                    continue
                last = min(last, until)

            if frequency is Frequency.WEEKLY:
                yield from self._expand_weekly(rule, origin, first, last)
            elif frequency is Frequency.MONTHLY_BY_DATE:
                yield from self._expand_monthly_by_date(rule, origin, first, last)
            else:
                yield from self._expand_monthly_by_ordinal(rule, origin, first, last)

    def _expand_weekly(
        self, rule: RecurrenceRule, origin: DateOnly, first: DateOnly, last: DateOnly
    ) -> Iterator[DateOnly]:
        weekdays = {code for code in rule.byweekday if code in WEEKDAYS}
        if not weekdays:
            logger.debug("Weekly rule has no valid weekday codes: %r", rule.byweekday)
            return

        for offset in range(first.days_until(last) + 1):
            candidate = first.add_days(offset)
            if candidate.weekday_code not in weekdays:
                continue
            elapsed = origin.days_until(candidate)
            if elapsed < 0:
                continue
            # Whole 7-day spans since the origin, independent of month boundaries
            if (elapsed // 7) % rule.interval == 0:
                yield candidate

    def _month_qualifies(self, rule: RecurrenceRule, origin: DateOnly, year: int, month: int) -> bool:
        elapsed = _months_between(origin, year, month)
        return elapsed >= 0 and elapsed % rule.interval == 0

    def _expand_monthly_by_date(
        self, rule: RecurrenceRule, origin: DateOnly, first: DateOnly, last: DateOnly
    ) -> Iterator[DateOnly]:
        day = rule.bymonthday
        if day is None or not 1 <= day <= 31:
            logger.debug("Monthly rule has invalid bymonthday %r", day)
            return
        if not self._month_qualifies(rule, origin, first.year, first.month):
            return
        # No roll-over: day 31 does not exist in April
        if day > days_in_month(first.year, first.month):
            return

        candidate = DateOnly(first.year, first.month, day)
        if candidate <= last:
            yield candidate

    def _expand_monthly_by_ordinal(
        self, rule: RecurrenceRule, origin: DateOnly, first: DateOnly, last: DateOnly
    ) -> Iterator[DateOnly]:
        weekday = WEEKDAYS.get(rule.weekday or "")
        nth = rule.nth
        if weekday is None or nth is None or not 1 <= nth <= MAX_ORDINAL:
            logger.debug("Ordinal rule has invalid weekday/nth %r/%r", rule.weekday, nth)
            return
        if not self._month_qualifies(rule, origin, first.year, first.month):
            return

        # nth matching weekday on or after the 1st, i.e. first match + (nth-1) weeks
        candidate_date = first.to_date() + relativedelta(weekday=weekday(+nth))
        if candidate_date.month != first.month:
            # No clamping: a month without a 5th Friday has no occurrence
            return

        candidate = DateOnly.from_date(candidate_date)
        if candidate <= last:
            yield candidate


_default_expander = RecurrenceExpander()


def expand(base: BaseEvent, year: Union[int, str], month_filter: MonthFilter = ALL) -> Iterator[DateOnly]:
    """Expand ``base`` with a shared, stateless expander."""
    return _default_expander.expand(base, year, month_filter)

"""Bind expanded dates back onto their base event."""

from __future__ import annotations

from typing import Any

from .date_utils import DateOnly
from .models import BaseEvent, Occurrence


def _base_fields(base: BaseEvent) -> dict[str, Any]:
    # Shallow: nested values (tags, recurrence) are shared with the base event
    return {name: getattr(base, name) for name in BaseEvent.model_fields}


def materialize(base: BaseEvent, day: DateOnly) -> Occurrence:
    """Create a rule-derived Occurrence of ``base`` on ``day``.

    Only the date changes; title, description and every other field are
    carried over unchanged.
    """
    fields = _base_fields(base)
    fields["date"] = day.isoformat()
    return Occurrence(**fields, day=day, is_expanded_instance=True)


def explicit_occurrence(base: BaseEvent, day: DateOnly) -> Occurrence:
    """Create the Occurrence for an event's explicit ``date``."""
    fields = _base_fields(base)
    fields["date"] = day.isoformat()
    return Occurrence(**fields, day=day, is_expanded_instance=False)

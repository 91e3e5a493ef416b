"""Data models for community calendar events and directory listings."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .date_utils import DateOnly, TimeOfDay, try_parse_date, try_parse_time


class Frequency(str, Enum):
    """Recurrence rule kinds."""

    WEEKLY = "weekly"
    MONTHLY_BY_DATE = "monthly_by_date"
    MONTHLY_BY_WEEKDAY_ORDINAL = "monthly_by_weekday_ordinal"


def _coerce_int(value: Any, invalid: int) -> int:
    # Rule values are never rejected at load time; an unusable value is mapped
    # to one the expander treats as out of range.
    if isinstance(value, bool):
        return invalid
    try:
        return int(value)
    except (TypeError, ValueError):
        return invalid


def _coerce_tag_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [str(tag) for tag in value]


class RecurrenceRule(BaseModel):
    """Recurrence rule as supplied by the data source.

    Values are kept as given and checked when the rule is evaluated, so an
    out-of-range weekday, ordinal or day-of-month yields no occurrences rather
    than failing the whole payload.
    """

    freq: str = Field(..., description="weekly | monthly (or an explicit monthly_* kind)")
    interval: int = Field(default=1, description="Weeks or months between qualifying slots")
    byweekday: list[str] = Field(default_factory=list, description="Weekday codes for weekly rules")
    bymonthday: Optional[int] = Field(default=None, description="Day of month for monthly rules")
    weekday: Optional[str] = Field(default=None, description="Weekday code for ordinal rules")
    nth: Optional[int] = Field(default=None, description="Ordinal 1-5 for ordinal rules")
    until: Optional[str] = Field(default=None, description="Inclusive last date, YYYY-MM-DD")

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("freq", mode="before")
    @classmethod
    def _normalize_freq(cls, value: Any) -> str:
        return str(value or "").strip().lower()

    @field_validator("interval", mode="before")
    @classmethod
    def _coerce_interval(cls, value: Any) -> int:
        if value is None:
            return 1
        return _coerce_int(value, 0)

    @field_validator("bymonthday", "nth", mode="before")
    @classmethod
    def _coerce_optional_int(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return _coerce_int(value, 0)

    @field_validator("byweekday", mode="before")
    @classmethod
    def _coerce_weekdays(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return []
        return [str(code).strip().upper() for code in value]

    @field_validator("weekday", mode="before")
    @classmethod
    def _coerce_weekday(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value).strip().upper()

    @field_validator("until", mode="before")
    @classmethod
    def _coerce_until(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @property
    def frequency(self) -> Optional[Frequency]:
        """Resolve the rule kind, or None for an unknown ``freq``."""
        if self.freq == Frequency.WEEKLY.value:
            return Frequency.WEEKLY
        if self.freq == "monthly":
            if self.weekday is not None or self.nth is not None:
                return Frequency.MONTHLY_BY_WEEKDAY_ORDINAL
            return Frequency.MONTHLY_BY_DATE
        if self.freq == Frequency.MONTHLY_BY_DATE.value:
            return Frequency.MONTHLY_BY_DATE
        if self.freq == Frequency.MONTHLY_BY_WEEKDAY_ORDINAL.value:
            return Frequency.MONTHLY_BY_WEEKDAY_ORDINAL
        return None


class BaseEvent(BaseModel):
    """An event record owned by the data source. Read-only to the core."""

    name: str = Field(default="", description="Event title")
    date: Optional[str] = Field(default=None, description="Explicit date, YYYY-MM-DD")
    start_date: Optional[str] = Field(default=None, description="Recurrence anchor, YYYY-MM-DD")
    time: Optional[str] = Field(default=None, description="Free-form display time")
    start_time: Optional[str] = Field(default=None, description="Start time, HH:MM")
    end_time: Optional[str] = Field(default=None, description="End time, HH:MM")
    location: Optional[str] = Field(default=None, description="Venue or address")
    description: Optional[str] = Field(default=None, description="Event description")
    website: Optional[str] = Field(default=None, description="Event website URL")
    tickets: Optional[str] = Field(default=None, description="Ticket purchase URL")
    tags: list[str] = Field(default_factory=list, description="Ordered tag labels")
    recurrence: Optional[RecurrenceRule] = Field(
        default=None,
        validation_alias=AliasChoices("recurrence", "rrule"),
        description="Recurrence rule",
    )

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        return _coerce_tag_list(value)

    @property
    def explicit_date(self) -> Optional[DateOnly]:
        return try_parse_date(self.date)

    @property
    def anchor(self) -> Optional[DateOnly]:
        return try_parse_date(self.start_date)

    @property
    def start(self) -> Optional[TimeOfDay]:
        return try_parse_time(self.start_time)

    @property
    def end(self) -> Optional[TimeOfDay]:
        return try_parse_time(self.end_time)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    @property
    def display_time(self) -> str:
        """Free-form time text, or the start/end clock times when none is given."""
        if self.time:
            return self.time
        if self.start_time and self.end_time:
            return f"{self.start_time}-{self.end_time}"
        return self.start_time or ""


class Occurrence(BaseEvent):
    """One concrete calendar-date instance of an event.

    Created fresh on every list build and never mutated afterwards.
    """

    day: DateOnly = Field(..., description="The resolved calendar day")
    is_expanded_instance: bool = Field(
        default=False, description="True if generated from a recurrence rule"
    )

    @property
    def year(self) -> int:
        return self.day.year

    @property
    def month(self) -> int:
        return self.day.month


class DirectoryListing(BaseModel):
    """A community directory entry."""

    name: str = Field(default="", description="Listing name")
    short: Optional[str] = Field(default=None, description="One-line summary")
    description: Optional[str] = Field(default=None, description="Long description")
    address: Optional[str] = Field(default=None, description="Street address or area")
    category: str = Field(default="", description="Category slug")
    area: str = Field(default="", description="Area slug")
    tags: list[str] = Field(default_factory=list, description="Tag labels")
    website: Optional[str] = Field(default=None, description="Website URL")
    notes: Optional[str] = Field(default=None, description="Additional notes")

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        return _coerce_tag_list(value)

"""Directory listing filters, labels and deep-link handling."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional
from urllib.parse import parse_qs

from .event_filter import normalize_query
from .models import DirectoryListing
from .rrule_expander import ALL

CATEGORY_LABELS = {
    "community": "Community",
    "support": "Support",
    "health": "Health",
    "legal": "Legal",
    "businesses": "Businesses",
    "events": "Events",
    "faith": "Faith & Spiritual",
}

AREA_LABELS = {
    "peoria": "Peoria",
    "central-il": "Central Illinois",
    "virtual": "Virtual",
}


def label_category(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def label_area(area: str) -> str:
    return AREA_LABELS.get(area, area)


def matches_listing(
    item: DirectoryListing,
    query: str = "",
    category: str = ALL,
    area: str = ALL,
) -> bool:
    """Check a listing against the category, area and text filters."""
    if category != ALL and item.category != category:
        return False
    if area != ALL and item.area != area:
        return False

    needle = normalize_query(query)
    if not needle:
        return True

    haystack = normalize_query(
        " ".join(
            [
                item.name,
                item.short or "",
                item.description or "",
                item.address or "",
                item.category,
                item.area,
                " ".join(item.tags),
            ]
        )
    )
    return needle in haystack


def filter_listings(
    listings: Iterable[DirectoryListing],
    query: str = "",
    category: str = ALL,
    area: str = ALL,
) -> list[DirectoryListing]:
    return [item for item in listings if matches_listing(item, query, category, area)]


def category_from_fragment(fragment: str, known: Iterable[str]) -> Optional[str]:
    """Read a preselected category from a URL fragment such as ``#cat=health``.

    Returns:
        The category when it is one of ``known``, otherwise None
    """
    params = parse_qs(fragment.lstrip("#"))
    values = params.get("cat")
    if not values:
        return None
    category = values[0]
    return category if category in set(known) else None


def _distinct(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(value for value in values if value))


def list_categories(listings: Iterable[DirectoryListing]) -> list[str]:
    """Distinct categories in first-seen order."""
    return _distinct(item.category for item in listings)


def list_areas(listings: Iterable[DirectoryListing]) -> list[str]:
    """Distinct areas in first-seen order."""
    return _distinct(item.area for item in listings)

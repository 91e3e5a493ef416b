"""Command-line entry for community_calendar.

Loads the event (or directory) payload once, builds and filters the listing
for the requested selection, and prints it or exports one occurrence.
"""

from __future__ import annotations

import argparse
import asyncio
import datetime
import logging
import sys
from pathlib import Path
from typing import Optional

from .calendar_export import build_google_calendar_link, build_ics, ics_filename
from .config_loader import Config, load_config
from .date_utils import format_display_date
from .directory_filter import filter_listings, label_area, label_category
from .event_filter import FilterEngine, count_label
from .event_list import EventListBuilder
from .exceptions import ConfigError, EventsLoadError
from .fetcher import load_events, load_listings
from .logging_config import configure_logging
from .models import Occurrence
from .rrule_expander import ALL
from .timezone_utils import get_local_timezone, now_local
from .year_range import default_selection, derive_year_range

logger = logging.getLogger(__name__)


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the community_calendar CLI."""
    parser = argparse.ArgumentParser(
        prog="community_calendar",
        description="Community calendar - recurring events, filtering and calendar export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m community_calendar events                       # Current month
  python -m community_calendar events --month all -q jazz   # Whole year, text search
  python -m community_calendar export --index 2 --output e.ics
  python -m community_calendar years
        """,
    )
    parser.add_argument("--config", metavar="PATH", help="Path to a YAML config file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    def add_selection(p: argparse.ArgumentParser) -> None:
        p.add_argument("--year", type=int, help="Year to show (default: current year)")
        p.add_argument("--month", help='Month 1-12 or "all" (default: current month)')
        p.add_argument("-q", "--query", default="", help="Free-text search")
        p.add_argument("--include-past", action="store_true", help="Show events that already ended")

    events = sub.add_parser("events", help="List occurrences for a selection")
    add_selection(events)

    export = sub.add_parser("export", help="Export one listed occurrence")
    add_selection(export)
    export.add_argument("--index", type=int, required=True, help="1-based position in the listing")
    export.add_argument("--format", choices=("ics", "google"), default="ics")
    export.add_argument("--output", metavar="FILE", help="Write the ICS document to FILE")

    sub.add_parser("years", help="Show the selectable year range")

    directory = sub.add_parser("directory", help="List directory entries")
    directory.add_argument("-q", "--query", default="", help="Free-text search")
    directory.add_argument("--category", default=ALL, help='Category slug or "all"')
    directory.add_argument("--area", default=ALL, help='Area slug or "all"')

    return parser


def _format_occurrence(position: int, occurrence: Occurrence) -> str:
    parts = [f"{position:>3}. {format_display_date(occurrence.day)}", occurrence.name or "Untitled event"]
    if occurrence.display_time:
        parts.append(occurrence.display_time)
    if occurrence.location:
        parts.append(occurrence.location)
    return " | ".join(parts)


def _select(args: argparse.Namespace, tz: datetime.tzinfo) -> tuple[int, str]:
    current = now_local(tz)
    year = args.year if args.year is not None else current.year
    month = args.month if args.month else str(current.month)
    return year, month


async def _load_occurrences(
    cfg: Config, args: argparse.Namespace, tz: datetime.tzinfo
) -> list[Occurrence]:
    raw_events = await load_events(cfg.events_source, timeout=cfg.request_timeout)
    year, month = _select(args, tz)
    built = EventListBuilder().build(raw_events, year, month)
    return FilterEngine(tz).filter_occurrences(
        built,
        query=args.query,
        month_filter=month,
        year_filter=year,
        include_past=args.include_past,
    )


async def _cmd_events(cfg: Config, args: argparse.Namespace, tz: datetime.tzinfo) -> int:
    occurrences = await _load_occurrences(cfg, args, tz)
    for position, occurrence in enumerate(occurrences, start=1):
        print(_format_occurrence(position, occurrence))
    print(count_label(len(occurrences)))
    return 0


async def _cmd_export(cfg: Config, args: argparse.Namespace, tz: datetime.tzinfo) -> int:
    occurrences = await _load_occurrences(cfg, args, tz)
    if not 1 <= args.index <= len(occurrences):
        print(f"No occurrence at position {args.index} ({count_label(len(occurrences))})")
        return 1

    occurrence = occurrences[args.index - 1]
    if args.format == "google":
        result = build_google_calendar_link(occurrence, tz, cfg.default_duration_minutes)
    else:
        result = build_ics(occurrence, tz, cfg.default_duration_minutes, cfg.prodid)

    if result is None:
        print("No exportable calendar entry (the event has no start time)")
        return 1

    if args.format == "ics" and args.output:
        target = Path(args.output)
        # newline="" keeps the CRLF line endings intact
        with target.open("w", encoding="utf-8", newline="") as fh:
            fh.write(result)
        print(f"Wrote {target} (suggested name: {ics_filename(occurrence)})")
    else:
        sys.stdout.write(result if result.endswith("\n") else result + "\n")
    return 0


async def _cmd_years(cfg: Config, args: argparse.Namespace, tz: datetime.tzinfo) -> int:
    raw_events = await load_events(cfg.events_source, timeout=cfg.request_timeout)
    current = now_local(tz)
    years = derive_year_range(raw_events, current.year, cfg.years_back, cfg.years_ahead)
    month, year = default_selection(years, current)
    print(" ".join(str(y) for y in years))
    print(f"Default selection: month={month} year={year}")
    return 0


async def _cmd_directory(cfg: Config, args: argparse.Namespace, tz: datetime.tzinfo) -> int:
    try:
        listings = await load_listings(cfg.listings_source, timeout=cfg.request_timeout)
    except EventsLoadError as e:
        logger.error("Could not load listings: %s", e)
        print("Could not load listings.")
        return 1

    shown = filter_listings(listings, args.query, args.category, args.area)
    for item in shown:
        print(f"{item.name} [{label_category(item.category)} / {label_area(item.area)}]")
        if item.short:
            print(f"    {item.short}")
    print(count_label(len(shown), noun="listing"))
    return 0


COMMANDS = {
    "events": _cmd_events,
    "export": _cmd_export,
    "years": _cmd_years,
    "directory": _cmd_directory,
}


def run(argv: Optional[list[str]] = None) -> int:
    """Run the CLI and return its exit status."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    configure_logging(debug_mode=args.debug)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        print(f"Invalid configuration: {e}")
        return 2
    if not args.debug and cfg.log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        logging.getLogger().setLevel(cfg.log_level)

    tz = get_local_timezone(cfg.timezone)
    try:
        return asyncio.run(COMMANDS[args.command](cfg, args, tz))
    except EventsLoadError as e:
        logger.error("Could not load events: %s", e)
        print("Could not load events.")
        return 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()

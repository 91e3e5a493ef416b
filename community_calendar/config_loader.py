"""community_calendar.config_loader

Config loader for community_calendar.

- Reads YAML (PyYAML); JSON files load too since JSON is valid YAML.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
- Environment variables override file values.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .calendar_export import DEFAULT_DURATION_MINUTES, DEFAULT_PRODID
from .exceptions import ConfigError
from .fetcher import DEFAULT_TIMEOUT_SECONDS
from .year_range import DEFAULT_YEARS_AHEAD, DEFAULT_YEARS_BACK

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("community_calendar.yaml")

ENV_OVERRIDES = {
    "COMMUNITYCAL_EVENTS_SOURCE": "events_source",
    "COMMUNITYCAL_LISTINGS_SOURCE": "listings_source",
    "COMMUNITYCAL_TIMEZONE": "timezone",
    "COMMUNITYCAL_LOG_LEVEL": "log_level",
}


@dataclass
class Config:
    """Typed configuration for community_calendar.

    Fields:
        events_source: path or URL of the events JSON payload
        listings_source: path or URL of the directory listings JSON payload
        timezone: IANA name of the viewer's zone; None uses the host zone
        log_level: logging level name
        request_timeout: HTTP timeout in seconds for remote payloads
        default_duration_minutes: exported event length when no end time is given
        years_back: selectable years before the current year
        years_ahead: selectable years after the current year
        prodid: PRODID written into ICS exports
    """

    events_source: str = "assets/events.json"
    listings_source: str = "assets/listings.json"
    timezone: str | None = None
    log_level: str = "INFO"
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES
    years_back: int = DEFAULT_YEARS_BACK
    years_ahead: int = DEFAULT_YEARS_AHEAD
    prodid: str = DEFAULT_PRODID

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and coercion.

        Numeric-like values are coerced; unusable values fall back to the
        default with a warning. Durations and year spans are kept non-negative.
        """
        if data is None:
            data = {}
        defaults = cls()

        def _coerce_int(key: str, default: int, minimum: int) -> int:
            raw = data.get(key, default)
            try:
                value = int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default
            if value < minimum:
                logger.warning("Config %s=%d below minimum; coercing to %d", key, value, minimum)
                return minimum
            return value

        def _coerce_str(key: str, default: str) -> str:
            raw = data.get(key)
            return str(raw) if raw not in (None, "") else default

        raw_timeout = data.get("request_timeout", defaults.request_timeout)
        try:
            timeout = float(raw_timeout)
        except (TypeError, ValueError):
            logger.warning("Config request_timeout=%r is not a number; using default", raw_timeout)
            timeout = defaults.request_timeout

        tz_name = data.get("timezone")

        return cls(
            events_source=_coerce_str("events_source", defaults.events_source),
            listings_source=_coerce_str("listings_source", defaults.listings_source),
            timezone=str(tz_name) if tz_name else None,
            log_level=_coerce_str("log_level", defaults.log_level).upper(),
            request_timeout=timeout,
            default_duration_minutes=_coerce_int(
                "default_duration_minutes", defaults.default_duration_minutes, 1
            ),
            years_back=_coerce_int("years_back", defaults.years_back, 0),
            years_ahead=_coerce_int("years_ahead", defaults.years_ahead, 0),
            prodid=_coerce_str("prodid", defaults.prodid),
        )


def _load_yaml(path: Path) -> Any:
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    # safe_load returns None for empty files
    return {} if loaded is None else loaded


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            logger.debug("Config %s overridden by %s", key, env_name)
            merged[key] = value
    return merged


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML file and return a Config instance.

    Args:
        path: Optional path to the config file. Defaults to
              ./community_calendar.yaml (relative to the working directory).

    Returns:
        Config dataclass instance with values from file, environment and defaults.

    Raises:
        ConfigError: If the file exists but its top level is not a mapping
    """
    p = Path(path) if path else Path.cwd() / DEFAULT_CONFIG_PATH
    logger.debug("Attempting to load config from %s", p)

    raw: Any = {}
    if p.exists():
        raw = _load_yaml(p)
        if not isinstance(raw, dict):
            logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
            raise ConfigError("Config file must contain a mapping at top level")
        logger.info("Loaded configuration from %s", p)
    else:
        logger.info("Config file %s not found; using defaults", p)

    cfg = Config.from_dict(_apply_env_overrides(raw))
    logger.debug("Configuration values: %s", cfg)
    return cfg

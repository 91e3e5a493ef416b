"""
Central logging configuration for community_calendar.

Keeps third-party libraries quiet while package modules log at INFO, or at
DEBUG when debugging is requested.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def configure_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for community_calendar.

    Args:
        debug_mode: Whether to enable debug logging for community_calendar modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        COMMUNITYCAL_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        COMMUNITYCAL_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("COMMUNITYCAL_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("COMMUNITYCAL_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in _VALID_LEVELS:
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add a handler if none exist (respect handlers installed by the host app)
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    logger_config: dict[str, int] = {
        "httpx": logging.WARNING,
        "httpcore": logging.WARNING,
        "asyncio": logging.WARNING,
        "icalendar": logging.WARNING,
    }
    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    package_level = logging.DEBUG if final_debug else logging.INFO
    logging.getLogger("community_calendar").setLevel(package_level)

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s debug=%s",
        logging.getLevelName(root_level),
        final_debug,
    )

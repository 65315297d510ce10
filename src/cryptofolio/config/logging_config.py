"""Logging configuration."""

import logging
import sys
from typing import Optional

from cryptofolio.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers and the level they are held at
_QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "urllib3": logging.WARNING,
    "asyncio": logging.WARNING,
    "uvicorn": logging.INFO,
}


def resolve_level(name: str) -> int:
    """Map a level name to its number; unknown names fall back to INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: Optional[str] = None) -> int:
    """
    Configure application logging.

    Uses level if given, otherwise Settings.log_level. The cryptofolio
    package logger is set explicitly so the level holds even when a server
    configured the root logger first. Returns the level applied.
    """
    settings = get_settings()
    numeric_level = resolve_level(level or settings.log_level)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("cryptofolio").setLevel(numeric_level)

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
    return numeric_level

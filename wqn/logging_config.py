"""Loguru sink setup shared by the API and the CLI."""
from __future__ import annotations

import sys

from loguru import logger

from config import get_settings

LOG_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {name}:{line} | {message}"


def configure_logging(level: str | None = None) -> None:
    """Replace the default sink with a stderr sink (plus an optional file sink)."""
    settings = get_settings()
    level = level or settings.log_level

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    if settings.log_file:
        logger.add(settings.log_file, level=level, rotation="10 MB", retention=5, encoding="utf-8")

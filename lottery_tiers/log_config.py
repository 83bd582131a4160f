"""Loguru sink configuration."""

import sys

from loguru import logger

from lottery_tiers.config import settings


def configure_logging() -> None:
    """Replace the default loguru sink with the configured ones."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL.upper())
    if settings.LOG_FILE is not None:
        settings.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        logger.add(str(settings.LOG_FILE), rotation="10 MB", retention="7 days", level="INFO")

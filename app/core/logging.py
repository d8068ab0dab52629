"""
Logging setup.

The application logs through loguru; this replaces the default sink with a
single stderr sink at the configured level.
"""

import sys

from loguru import logger

from core.config import LOG_LEVEL


def configure_logging(level: str = LOG_LEVEL):
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}",
        backtrace=False,
    )

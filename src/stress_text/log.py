"""Logging setup for command-line and application entry points.

Library modules log through loguru's global ``logger`` and never add
sinks themselves; entry points call :func:`configure_logging` once.
"""

from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"


def configure_logging(level: str = "WARNING") -> int:
    """Replace loguru's default sink with a single stderr sink.

    Args:
        level: Minimum level name (``DEBUG``, ``INFO``, ...).

    Returns:
        The loguru handler id of the new sink.
    """
    logger.remove()
    return logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT, backtrace=True)

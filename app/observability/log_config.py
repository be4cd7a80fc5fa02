"""Loguru sink configuration for the bridge runtime."""

from __future__ import annotations

import sys

from loguru import logger

_LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | {level} | {name} | {message} | {extra}"


def observability_configure_logging(level: str = "INFO", serialize: bool = False) -> int:
    """Replace default loguru sinks with one stderr sink.

    Args:
        level: Minimum level emitted by the sink.
        serialize: Whether records are written as JSON lines.

    Returns:
        int: Identifier of the added sink.

    Raises:
        ValueError: Raised when the level name is unknown to loguru.
    """

    logger.remove()
    return logger.add(
        sys.stderr,
        level=level,
        format=_LOG_FORMAT,
        serialize=serialize,
        enqueue=True,
        backtrace=False,
    )

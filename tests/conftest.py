"""Shared pytest fixtures."""

from __future__ import annotations

from typing import Any, Iterator

import pytest
from loguru import logger


@pytest.fixture
def captured_logs() -> Iterator[list[dict[str, Any]]]:
    """Capture loguru records emitted during one test.

    Returns:
        Iterator[list[dict[str, Any]]]: Mutable list of captured loguru records.

    Raises:
        RuntimeError: This fixture does not raise runtime errors.
    """

    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)

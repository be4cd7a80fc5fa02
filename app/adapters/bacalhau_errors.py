"""Project-native typed exceptions for Bacalhau adapter failures."""

from __future__ import annotations


class BacalhauAdapterError(Exception):
    """Base exception for adapter-level Bacalhau failures.

    Attributes:
        status_code: Optional upstream HTTP status code.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BacalhauAdapterConnectionError(BacalhauAdapterError, ConnectionError):
    """Transport-level connectivity failure or non-success HTTP status."""


class BacalhauAdapterTimeoutError(BacalhauAdapterError, TimeoutError):
    """Request exceeded its per-call deadline."""


class BacalhauRequestError(BacalhauAdapterError, ValueError):
    """Request contract failure detected before or by the upstream API."""


class BacalhauResponseError(BacalhauAdapterError, RuntimeError):
    """Upstream response did not match the expected payload contract."""

"""Adapter layer package for compute network integration boundaries."""

from .bacalhau_api import BacalhauApiAdapter
from .bacalhau_errors import (
	BacalhauAdapterConnectionError,
	BacalhauAdapterError,
	BacalhauAdapterTimeoutError,
	BacalhauRequestError,
	BacalhauResponseError,
)
from .in_memory import InMemoryBacalhauClient, InMemoryListCall
from .interfaces import BacalhauClientPort

__all__ = [
	"BacalhauAdapterConnectionError",
	"BacalhauAdapterError",
	"BacalhauAdapterTimeoutError",
	"BacalhauApiAdapter",
	"BacalhauClientPort",
	"BacalhauRequestError",
	"BacalhauResponseError",
	"InMemoryBacalhauClient",
	"InMemoryListCall",
]

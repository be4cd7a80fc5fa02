"""Application bootstrap wiring for runtime initialization and dependency assembly."""

from fastapi import FastAPI

from app.adapters import BacalhauApiAdapter, BacalhauClientPort
from app.api import create_api_application
from app.config import BridgeSettings
from app.jobs import BacalhauJobRunner, JobPollLoop, JobRunnerConfig
from app.observability import observability_configure_logging


def bootstrap_initialize_runtime(settings: BridgeSettings) -> None:
    """Run one-time process initialization before any component is built.

    Args:
        settings: Validated runtime settings.

    Returns:
        None: Configures process-wide logging as side effect.

    Raises:
        ValueError: Raised when the configured log level is rejected.
    """

    observability_configure_logging(level=settings.log_level, serialize=settings.log_json)


def bootstrap_create_client(settings: BridgeSettings) -> BacalhauApiAdapter:
    """Build the HTTP Bacalhau client from validated settings.

    Args:
        settings: Validated runtime settings.

    Returns:
        BacalhauApiAdapter: Client bound to the configured requester node.

    Raises:
        ValueError: Raised when client configuration is invalid.
    """

    return BacalhauApiAdapter(
        base_url=settings.settings_bacalhau_base_url(),
        client_id=settings.bacalhau_client_id,
        request_timeout_seconds=settings.bacalhau_request_timeout_seconds,
    )


def bootstrap_create_poll_loop(settings: BridgeSettings, client: BacalhauClientPort) -> JobPollLoop:
    """Build the job runner and poll loop around a Bacalhau client.

    Args:
        settings: Validated runtime settings.
        client: Bacalhau client variant to use.

    Returns:
        JobPollLoop: Poll loop with an empty tracked set.

    Raises:
        ValueError: Raised when polling configuration is invalid.
    """

    runner = BacalhauJobRunner(
        client=client,
        config=JobRunnerConfig(
            list_page_size=settings.job_list_page_size,
            list_timeout_seconds=settings.job_list_timeout_seconds,
        ),
    )
    return JobPollLoop(runner=runner, poll_interval_seconds=settings.poll_interval_seconds)


def bootstrap_create_application(settings: BridgeSettings, background_polling: bool = True) -> FastAPI:
    """Assemble the runtime application from validated settings.

    Args:
        settings: Validated runtime settings.
        background_polling: Whether the poll loop runs for the application lifetime.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        ValueError: Raised when component configuration is invalid.
    """

    client = bootstrap_create_client(settings)
    poll_loop = bootstrap_create_poll_loop(settings, client)
    return create_api_application(
        settings=settings,
        client=client,
        poll_loop=poll_loop,
        background_polling=background_polling,
    )

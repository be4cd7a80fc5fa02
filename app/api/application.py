"""FastAPI application factory for the bridge runtime.

This module defines API application composition and the optional background
poll thread bound to the application lifespan.
"""

import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.adapters import BacalhauClientPort
from app.config import BridgeSettings
from app.jobs import JobPollLoop

from .routers import api_create_health_router, api_create_jobs_router


def create_api_application(
    settings: BridgeSettings,
    client: BacalhauClientPort,
    poll_loop: JobPollLoop,
    background_polling: bool = False,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        client: Bacalhau client used by health endpoints.
        poll_loop: Poll loop owning tracked jobs.
        background_polling: Whether the poll loop runs on a thread for the
            application lifetime.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        RuntimeError: Raised if application initialization fails.
    """

    @asynccontextmanager
    async def _application_lifespan(_: FastAPI) -> AsyncIterator[None]:
        if not background_polling:
            yield
            return

        stop_event = threading.Event()
        poll_thread = threading.Thread(
            target=poll_loop.loop_run_forever,
            args=(stop_event,),
            name="job-poll-loop",
            daemon=True,
        )
        poll_thread.start()
        try:
            yield
        finally:
            stop_event.set()
            poll_thread.join(timeout=settings.job_list_timeout_seconds + 1)

    application = FastAPI(title="Lilypad Bacalhau Bridge", lifespan=_application_lifespan)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal service identification response.

        Returns:
            dict[str, str]: Service metadata.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        return {
            "service": "lilypad-bacalhau-bridge",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(client=client))
    application.include_router(api_create_jobs_router(poll_loop=poll_loop))

    return application

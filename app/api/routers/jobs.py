"""Order submission and job tracking API router composition."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.domain import ContractSubmittedEvent, JobSpec
from app.jobs import JobPollLoop, JobSubmissionError


class OrderJobSpecRequest(BaseModel):
    """Job specification body for a submitted order."""

    docker_image: str = Field(min_length=1)
    entrypoint: list[str] = Field(default_factory=list)
    environment: list[str] = Field(default_factory=list)
    concurrency: int = Field(default=1, ge=1)
    annotations: list[str] = Field(default_factory=list)


class OrderSubmitRequest(BaseModel):
    """Order submission body."""

    order_id: str = Field(min_length=1)
    job_spec: OrderJobSpecRequest


def api_create_jobs_router(poll_loop: JobPollLoop) -> APIRouter:
    """Create router for order submission, tracked job listing and reconcile trigger.

    Args:
        poll_loop: Poll loop owning the tracked job set.

    Returns:
        APIRouter: Router exposing `/orders` and `/jobs` APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if poll_loop is None:
        raise ValueError("poll_loop must not be None")

    router = APIRouter(tags=["jobs"])

    @router.post("/orders")
    def api_order_submit(request: OrderSubmitRequest) -> JSONResponse:
        """Submit one order as a Bacalhau job and start tracking it.

        Args:
            request: Order submission body.

        Returns:
            JSONResponse: Running handle payload, or submission error payload.

        Raises:
            RuntimeError: Raised when submission fails unexpectedly.
        """

        normalized_order_id = request.order_id.strip()
        if not normalized_order_id:
            payload = {"status": "error", "message": "order_id must not be blank"}
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        event = ContractSubmittedEvent(
            order_id=normalized_order_id,
            job_spec=JobSpec(
                docker_image=request.job_spec.docker_image,
                entrypoint=tuple(request.job_spec.entrypoint),
                environment=tuple(request.job_spec.environment),
                concurrency=request.job_spec.concurrency,
                annotations=tuple(request.job_spec.annotations),
            ),
        )
        try:
            running_event = poll_loop.loop_submit(event)
        except JobSubmissionError as error:
            payload = {"status": "error", "message": str(error)}
            return JSONResponse(content=payload, status_code=status.HTTP_502_BAD_GATEWAY)

        return JSONResponse(content=asdict(running_event), status_code=status.HTTP_201_CREATED)

    @router.get("/jobs")
    def api_jobs_list() -> JSONResponse:
        """Return running, completed and failed jobs known to this process."""

        tracker = poll_loop.tracker
        payload = {
            "running": [asdict(event) for event in tracker.tracker_running()],
            "completed": [asdict(event) for event in tracker.tracker_completed()],
            "failed": [asdict(event) for event in tracker.tracker_failed()],
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("/jobs/reconcile")
    def api_jobs_reconcile() -> JSONResponse:
        """Run one reconcile cycle and return the jobs it retired.

        Returns:
            JSONResponse: Cycle result payload.

        Raises:
            RuntimeError: Raised when reconciliation fails unexpectedly.
        """

        cycle_result = poll_loop.loop_run_cycle()
        payload = {
            "polled_jobs": cycle_result.polled_jobs,
            "completed": [asdict(event) for event in cycle_result.completed],
            "failed": [asdict(event) for event in cycle_result.failed],
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router

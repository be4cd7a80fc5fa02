"""Job runner that submits contract orders to Bacalhau and reconciles their outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Sequence

from loguru import logger

from app.adapters import BacalhauAdapterError, BacalhauClientPort
from app.domain import (
    BacalhauJobCompletedEvent,
    BacalhauJobFailedEvent,
    BacalhauJobRunningEvent,
    ContractSubmittedEvent,
    JobOutcome,
    JobSnapshot,
    domain_classify_job,
)

from .interfaces import JobRunnerPort, JobSubmissionError

LILYPAD_JOB_ANNOTATION: Final[str] = "lilypad-job"


def job_build_order_annotation(order_id: str) -> str:
    """Build the per-order discovery tag for a submitted job.

    Args:
        order_id: Contract order identifier.

    Returns:
        str: `lilypad-job-<order_id>` tag.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    # TODO: replace plain concatenation once order ids are encrypted before tagging.
    return f"{LILYPAD_JOB_ANNOTATION}-{order_id}"


@dataclass(frozen=True)
class JobRunnerConfig:
    """Configuration values for remote job polling.

    Attributes:
        list_page_size: Maximum jobs fetched per poll.
        list_timeout_seconds: Deadline for the single list call per poll.
        list_sort_by: Remote sort field.
        list_sort_reverse: Whether remote results are sorted newest first.
    """

    list_page_size: int = 100
    list_timeout_seconds: float = 5.0
    list_sort_by: str = "created_at"
    list_sort_reverse: bool = True


class BacalhauJobRunner(JobRunnerPort):
    """Concrete job runner backed by a Bacalhau client port."""

    def __init__(self, client: BacalhauClientPort, config: JobRunnerConfig | None = None):
        """Initialize job runner dependencies.

        Args:
            client: Remote compute client.
            config: Polling configuration; defaults apply when omitted.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        resolved_config = config or JobRunnerConfig()
        if client is None:
            raise ValueError("client must not be None")
        if resolved_config.list_page_size < 1:
            raise ValueError("config.list_page_size must be >= 1")
        if resolved_config.list_timeout_seconds <= 0:
            raise ValueError("config.list_timeout_seconds must be > 0")
        if not resolved_config.list_sort_by.strip():
            raise ValueError("config.list_sort_by must not be blank")

        self._client = client
        self._config = resolved_config

    def job_create(self, event: ContractSubmittedEvent) -> BacalhauJobRunningEvent:
        """Submit the order's job spec tagged for later discovery.

        Args:
            event: Order submission event.

        Returns:
            BacalhauJobRunningEvent: Handle wrapping the remote job id and order id.

        Raises:
            JobSubmissionError: Raised when the remote submission fails. The
                event is left untouched so the caller may resubmit it.
        """

        job_spec = event.spec().spec_with_annotations(
            LILYPAD_JOB_ANNOTATION,
            job_build_order_annotation(event.order_id),
        )
        try:
            submitted_job = self._client.adapter_submit(job_spec)
        except (BacalhauAdapterError, ConnectionError, TimeoutError, ValueError) as error:
            raise JobSubmissionError(f"error submitting job: {error}") from error

        running_event = event.job_created(submitted_job.job_id)
        logger.bind(order_id=event.order_id, job_id=running_event.job_id).info("Created Bacalhau job")
        return running_event

    def job_find_completed(
        self,
        jobs: Sequence[BacalhauJobRunningEvent],
    ) -> tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]]:
        """Query the network once and classify each tracked job.

        Jobs that are unmatched, still running or in an unknown terminal
        state are omitted from both result lists. A failed or timed-out
        query yields two empty lists.

        Args:
            jobs: Tracked running handles; never mutated.

        Returns:
            tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]]:
                Completed and failed events for the classified handles.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        logger.debug("Looking at job states for {} jobs", len(jobs))
        completed: list[BacalhauJobCompletedEvent] = []
        failed: list[BacalhauJobFailedEvent] = []

        try:
            snapshots = self._client.adapter_list(
                include_tags=(LILYPAD_JOB_ANNOTATION,),
                max_jobs=self._config.list_page_size,
                sort_by=self._config.list_sort_by,
                sort_reverse=self._config.list_sort_reverse,
                timeout_seconds=self._config.list_timeout_seconds,
            )
        except (BacalhauAdapterError, ConnectionError, TimeoutError) as error:
            logger.bind(source=self._client.adapter_source_name()).error("Listing Bacalhau jobs failed: {}", error)
            return completed, failed

        for running_event in jobs:
            job_logger = logger.bind(order_id=running_event.order_id, job_id=running_event.job_id)
            snapshot = self._job_match_snapshot(running_event.job_id, snapshots)
            if snapshot is None:
                continue

            classification = domain_classify_job(snapshot)
            if classification.outcome is JobOutcome.RUNNING:
                job_logger.bind(detail=classification.detail).debug("Bacalhau job still in progress")
            elif classification.outcome is JobOutcome.COMPLETED:
                job_logger.info("Bacalhau job completed")
                completed.append(running_event.completed())
            elif classification.outcome is JobOutcome.FAILED:
                job_logger.bind(detail=classification.detail).info("Bacalhau job failed")
                failed.append(running_event.failed())
            else:
                job_logger.warning("Bacalhau job in unknown state")

        return completed, failed

    def _job_match_snapshot(self, job_id: str, snapshots: Sequence[JobSnapshot]) -> JobSnapshot | None:
        for snapshot in snapshots:
            if snapshot.job_id == job_id:
                return snapshot
        return None

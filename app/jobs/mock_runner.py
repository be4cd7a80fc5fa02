"""Configurable job runner double with canned create and find handlers."""

from __future__ import annotations

from typing import Callable, Sequence
from uuid import uuid4

from app.domain import (
    BacalhauJobCompletedEvent,
    BacalhauJobFailedEvent,
    BacalhauJobRunningEvent,
    ContractSubmittedEvent,
)

from .interfaces import JobRunnerPort, JobSubmissionError

RunnerCreateHandler = Callable[[ContractSubmittedEvent], BacalhauJobRunningEvent]
RunnerFindCompletedHandler = Callable[
    [Sequence[BacalhauJobRunningEvent]],
    tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]],
]


def runner_successful_create(event: ContractSubmittedEvent) -> BacalhauJobRunningEvent:
    return event.job_created(str(uuid4()))


def runner_error_create(event: ContractSubmittedEvent) -> BacalhauJobRunningEvent:
    _ = event
    raise JobSubmissionError("error creating job")


def runner_successful_find(
    jobs: Sequence[BacalhauJobRunningEvent],
) -> tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]]:
    return [job.completed() for job in jobs], []


def runner_failed_find(
    jobs: Sequence[BacalhauJobRunningEvent],
) -> tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]]:
    return [], [job.failed() for job in jobs]


class MockJobRunner(JobRunnerPort):
    """Job runner that delegates to injected handlers.

    Unset handlers fall back to a successful create and a find that reports
    every tracked job as completed.
    """

    def __init__(
        self,
        create_handler: RunnerCreateHandler | None = None,
        find_completed_handler: RunnerFindCompletedHandler | None = None,
    ):
        self._create_handler = create_handler or runner_successful_create
        self._find_completed_handler = find_completed_handler or runner_successful_find

    def job_create(self, event: ContractSubmittedEvent) -> BacalhauJobRunningEvent:
        return self._create_handler(event)

    def job_find_completed(
        self,
        jobs: Sequence[BacalhauJobRunningEvent],
    ) -> tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]]:
        return self._find_completed_handler(jobs)

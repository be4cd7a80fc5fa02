"""Typed interfaces for job-layer submission and reconciliation responsibilities."""

from typing import Protocol, Sequence

from app.domain import (
    BacalhauJobCompletedEvent,
    BacalhauJobFailedEvent,
    BacalhauJobRunningEvent,
    ContractSubmittedEvent,
)


class JobSubmissionError(RuntimeError):
    """Raised when an order could not be submitted as a remote job."""


class JobRunnerPort(Protocol):
    """Port definition for bridging contract orders to remote compute jobs."""

    def job_create(self, event: ContractSubmittedEvent) -> BacalhauJobRunningEvent:
        """Submit one order as a remote job.

        Args:
            event: Order submission event.

        Returns:
            BacalhauJobRunningEvent: Tracking handle for the accepted job.

        Raises:
            JobSubmissionError: Raised when the remote submission fails.
        """

    def job_find_completed(
        self,
        jobs: Sequence[BacalhauJobRunningEvent],
    ) -> tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]]:
        """Classify tracked running jobs against one remote snapshot.

        Args:
            jobs: Tracked running handles.

        Returns:
            tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]]:
                Disjoint completed and failed subsets of `jobs`.

        Raises:
            RuntimeError: Implementations absorb polling failures and do not raise.
        """

"""Order and job lifecycle events exchanged with the contract bridge."""

from __future__ import annotations

from dataclasses import dataclass

from .models import JobSpec


@dataclass(frozen=True)
class BacalhauJobCompletedEvent:
    """Terminal event emitted when every shard of a job completed.

    Attributes:
        order_id: Originating contract order identifier.
        job_id: Remote job identifier.
    """

    order_id: str
    job_id: str


@dataclass(frozen=True)
class BacalhauJobFailedEvent:
    """Terminal event emitted when a job finished with errored shards.

    Attributes:
        order_id: Originating contract order identifier.
        job_id: Remote job identifier.
    """

    order_id: str
    job_id: str


@dataclass(frozen=True)
class BacalhauJobRunningEvent:
    """Tracking handle for a job accepted by the remote compute network.

    Attributes:
        order_id: Originating contract order identifier.
        job_id: Remote job identifier assigned at submission.
    """

    order_id: str
    job_id: str

    def completed(self) -> BacalhauJobCompletedEvent:
        return BacalhauJobCompletedEvent(order_id=self.order_id, job_id=self.job_id)

    def failed(self) -> BacalhauJobFailedEvent:
        return BacalhauJobFailedEvent(order_id=self.order_id, job_id=self.job_id)


@dataclass(frozen=True)
class ContractSubmittedEvent:
    """Order submission observed on the contract.

    Attributes:
        order_id: Contract order identifier.
        job_spec: Job specification derived from the order terms.
    """

    order_id: str
    job_spec: JobSpec

    def __post_init__(self) -> None:
        if not self.order_id.strip():
            raise ValueError("order_id must not be blank")

    def spec(self) -> JobSpec:
        """Return the job specification derived from the order terms."""

        return self.job_spec

    def job_created(self, job_id: str) -> BacalhauJobRunningEvent:
        """Build the running-job handle for a job accepted by the network.

        Args:
            job_id: Remote job identifier.

        Returns:
            BacalhauJobRunningEvent: Handle carrying this order's identifier.

        Raises:
            ValueError: Raised when job_id is blank.
        """

        if not job_id.strip():
            raise ValueError("job_id must not be blank")
        return BacalhauJobRunningEvent(order_id=self.order_id, job_id=job_id)

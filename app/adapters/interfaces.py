"""Typed interfaces for adapter-layer responsibilities."""

from typing import Protocol, Sequence

from app.domain import HealthStatus, JobSnapshot, JobSpec


class BacalhauClientPort(Protocol):
    """Port definition for submitting and listing jobs on a Bacalhau network."""

    def adapter_source_name(self) -> str:
        """Return adapter source identifier for diagnostics and telemetry.

        Returns:
            str: Human-readable upstream source identifier.

        Raises:
            RuntimeError: Raised when source metadata is unavailable.
        """

    def adapter_check_health(self) -> HealthStatus:
        """Probe upstream availability.

        Returns:
            HealthStatus: Upstream health result.

        Raises:
            ConnectionError: Raised when the upstream cannot be reached.
        """

    def adapter_submit(self, job_spec: JobSpec) -> JobSnapshot:
        """Submit one job specification to the network.

        Args:
            job_spec: Job specification with caller-supplied annotations.

        Returns:
            JobSnapshot: Snapshot of the accepted job, carrying its remote id.

        Raises:
            ConnectionError: Raised when upstream connection fails.
            TimeoutError: Raised when request exceeds timeout.
            ValueError: Raised when the upstream rejects the request.
        """

    def adapter_list(
        self,
        include_tags: Sequence[str],
        max_jobs: int,
        sort_by: str,
        sort_reverse: bool,
        timeout_seconds: float,
    ) -> list[JobSnapshot]:
        """List jobs carrying every tag in `include_tags`.

        Args:
            include_tags: Tags a job must carry to be returned.
            max_jobs: Upper bound on returned jobs.
            sort_by: Sort field name.
            sort_reverse: Whether to reverse the sort order.
            timeout_seconds: Deadline for this single call.

        Returns:
            list[JobSnapshot]: Fresh snapshots, unordered from the caller's view.

        Raises:
            ConnectionError: Raised when upstream connection fails.
            TimeoutError: Raised when request exceeds `timeout_seconds`.
        """

"""Deterministic in-memory Bacalhau client for local runs and tests."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Sequence

from app.domain import HealthStatus, JobShardState, JobSnapshot, JobSpec, JobStateType

from .bacalhau_errors import BacalhauAdapterConnectionError, BacalhauRequestError
from .interfaces import BacalhauClientPort


@dataclass(frozen=True)
class InMemoryListCall:
    """Recorded arguments of one `adapter_list` call.

    Attributes:
        include_tags: Requested include tags.
        max_jobs: Requested page size.
        sort_by: Requested sort field.
        sort_reverse: Requested sort direction.
        timeout_seconds: Requested call deadline.
    """

    include_tags: tuple[str, ...]
    max_jobs: int
    sort_by: str
    sort_reverse: bool
    timeout_seconds: float


class InMemoryBacalhauClient(BacalhauClientPort):
    """Client variant that keeps submitted jobs in process memory.

    Job ids are sequential, creation timestamps advance by one second per
    submission from a fixed epoch, and failures are injected explicitly.
    """

    _EPOCH = datetime(2023, 1, 1, tzinfo=timezone.utc)

    def __init__(self, job_id_prefix: str = "job"):
        if not job_id_prefix.strip():
            raise ValueError("job_id_prefix must not be blank")

        self._job_id_prefix = job_id_prefix.strip()
        self._snapshots: dict[str, JobSnapshot] = {}
        self._submit_error: Exception | None = None
        self._list_error: Exception | None = None
        self._submit_count = 0
        self.list_calls: list[InMemoryListCall] = []

    def adapter_source_name(self) -> str:
        return "bacalhau_in_memory"

    def adapter_check_health(self) -> HealthStatus:
        """Report healthy unless a list failure is injected.

        Returns:
            HealthStatus: Healthy in-memory status.

        Raises:
            ConnectionError: Raised when a list failure is currently injected.
        """

        if self._list_error is not None:
            raise BacalhauAdapterConnectionError(f"in-memory client unavailable: {self._list_error}")
        return HealthStatus(status="ok", detail=f"{len(self._snapshots)} jobs in memory")

    def adapter_submit(self, job_spec: JobSpec) -> JobSnapshot:
        """Store a submitted job as unplanned and return its snapshot.

        Args:
            job_spec: Job specification.

        Returns:
            JobSnapshot: New snapshot without shard states.

        Raises:
            Exception: Re-raises an injected submit failure.
        """

        if self._submit_error is not None:
            raise self._submit_error

        self._submit_count += 1
        job_id = f"{self._job_id_prefix}-{self._submit_count:04d}"
        # Snapshots inserted by id may already occupy the next sequential id.
        while job_id in self._snapshots:
            self._submit_count += 1
            job_id = f"{self._job_id_prefix}-{self._submit_count:04d}"
        snapshot = JobSnapshot(
            job_id=job_id,
            created_at=self._EPOCH + timedelta(seconds=self._submit_count),
            concurrency=job_spec.concurrency,
            total_shards=0,
            shard_states=(),
            annotations=job_spec.annotations,
        )
        self._snapshots[snapshot.job_id] = snapshot
        return snapshot

    def adapter_list(
        self,
        include_tags: Sequence[str],
        max_jobs: int,
        sort_by: str,
        sort_reverse: bool,
        timeout_seconds: float,
    ) -> list[JobSnapshot]:
        """Return stored jobs carrying all include tags, ordered by creation time.

        Args:
            include_tags: Tags a job must carry.
            max_jobs: Maximum number of returned jobs.
            sort_by: Sort field; only `created_at` and `id` are supported.
            sort_reverse: Whether to return newest first.
            timeout_seconds: Recorded deadline, not enforced in memory.

        Returns:
            list[JobSnapshot]: Matching snapshots.

        Raises:
            ValueError: Raised for unsupported sort fields or page sizes.
            Exception: Re-raises an injected list failure.
        """

        self.list_calls.append(
            InMemoryListCall(
                include_tags=tuple(include_tags),
                max_jobs=max_jobs,
                sort_by=sort_by,
                sort_reverse=sort_reverse,
                timeout_seconds=timeout_seconds,
            )
        )
        if self._list_error is not None:
            raise self._list_error
        if max_jobs < 1:
            raise BacalhauRequestError("max_jobs must be >= 1")
        if sort_by not in ("created_at", "id"):
            raise BacalhauRequestError(f"unsupported sort_by={sort_by}")

        required_tags = set(include_tags)
        matching_snapshots = [
            snapshot for snapshot in self._snapshots.values() if required_tags.issubset(snapshot.annotations)
        ]
        if sort_by == "id":
            matching_snapshots.sort(key=lambda snapshot: snapshot.job_id, reverse=sort_reverse)
        else:
            matching_snapshots.sort(key=lambda snapshot: snapshot.created_at or self._EPOCH, reverse=sort_reverse)
        return matching_snapshots[:max_jobs]

    def memory_put_snapshot(self, snapshot: JobSnapshot) -> None:
        """Insert or replace one stored snapshot as-is."""

        self._snapshots[snapshot.job_id] = snapshot

    def memory_get_snapshot(self, job_id: str) -> JobSnapshot:
        return self._snapshots[job_id]

    def memory_set_shard_states(
        self,
        job_id: str,
        states: Sequence[JobStateType],
        total_shards: int | None = None,
    ) -> JobSnapshot:
        """Replace the shard states of a stored job.

        Shards are assigned to nodes `node-<n>` in order, one shard per node.

        Args:
            job_id: Stored job identifier.
            states: One state per shard execution.
            total_shards: Planned shard count; defaults to the executions
                per node implied by `states` and the job concurrency.

        Returns:
            JobSnapshot: Updated snapshot.

        Raises:
            KeyError: Raised when the job is not stored.
        """

        snapshot = self._snapshots[job_id]
        if total_shards is None:
            total_shards = max(len(states) // max(snapshot.concurrency, 1), 1)
        shard_states = tuple(
            JobShardState(node_id=f"node-{index}", shard_index=0, state=state)
            for index, state in enumerate(states)
        )
        updated_snapshot = replace(snapshot, total_shards=total_shards, shard_states=shard_states)
        self._snapshots[job_id] = updated_snapshot
        return updated_snapshot

    def memory_set_submit_error(self, error: Exception | None) -> None:
        self._submit_error = error

    def memory_set_list_error(self, error: Exception | None) -> None:
        self._list_error = error

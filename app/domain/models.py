"""Typed domain models shared across runtime layers.

This module provides the order, job specification and remote job snapshot
contracts exchanged between the adapter, job and API layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


class JobStateType(str, Enum):
    """Shard execution states reported by the Bacalhau requester node."""

    UNKNOWN = "Unknown"
    NEW = "New"
    BIDDING = "Bidding"
    WAITING = "Waiting"
    RUNNING = "Running"
    VERIFYING = "Verifying"
    CANCELLED = "Cancelled"
    ERROR = "Error"
    COMPLETED = "Completed"

    def state_is_terminal(self) -> bool:
        """Return whether no further transition can occur from this state.

        Returns:
            bool: True for completed, errored and cancelled shards.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return self in _TERMINAL_JOB_STATES

    @classmethod
    def state_parse(cls, value: str | None) -> JobStateType:
        """Parse one wire state label into a known state type.

        Args:
            value: Raw state label, matched case-insensitively.

        Returns:
            JobStateType: Matching state, or `UNKNOWN` for unrecognized labels.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        normalized_value = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == normalized_value:
                return member
        return cls.UNKNOWN


_TERMINAL_JOB_STATES = frozenset({JobStateType.CANCELLED, JobStateType.ERROR, JobStateType.COMPLETED})


class JobOutcome(str, Enum):
    """Per-poll classification of one tracked job."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class JobSpec:
    """Docker job specification submitted to the remote compute network.

    Attributes:
        docker_image: Container image reference.
        entrypoint: Container entrypoint command and arguments.
        environment: `KEY=value` environment variable entries.
        concurrency: Number of nodes that should run the job.
        annotations: Filterable tags attached to the job.
    """

    docker_image: str
    entrypoint: tuple[str, ...] = ()
    environment: tuple[str, ...] = ()
    concurrency: int = 1
    annotations: tuple[str, ...] = ()

    def spec_with_annotations(self, *annotations: str) -> JobSpec:
        """Return a copy of this spec with extra annotations appended.

        Args:
            annotations: Tags to append after the existing ones.

        Returns:
            JobSpec: New immutable spec instance.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return JobSpec(
            docker_image=self.docker_image,
            entrypoint=self.entrypoint,
            environment=self.environment,
            concurrency=self.concurrency,
            annotations=self.annotations + tuple(annotations),
        )


@dataclass(frozen=True)
class JobShardState:
    """State of one shard executed by one compute node.

    Attributes:
        node_id: Compute node identifier.
        shard_index: Zero-based shard index.
        state: Shard execution state.
        status: Free-form status message reported by the node.
    """

    node_id: str
    shard_index: int
    state: JobStateType
    status: str = ""


@dataclass(frozen=True)
class JobSnapshot:
    """Remote-reported view of one job at poll time.

    Attributes:
        job_id: Remote job identifier.
        created_at: Remote creation timestamp when reported.
        concurrency: Number of nodes requested for the job.
        total_shards: Planned shard count; zero until the requester plans the job.
        shard_states: Flattened per-node shard states.
        annotations: Tags attached to the job.
    """

    job_id: str
    created_at: datetime | None = None
    concurrency: int = 1
    total_shards: int = 0
    shard_states: tuple[JobShardState, ...] = field(default_factory=tuple)
    annotations: tuple[str, ...] = ()


def domain_build_job_spec(payload: Mapping[str, Any]) -> JobSpec:
    """Build a job spec from a loosely typed mapping payload.

    Args:
        payload: Mapping with `docker_image` and optional `entrypoint`,
            `environment`, `concurrency` and `annotations` keys.

    Returns:
        JobSpec: Validated immutable job specification.

    Raises:
        ValueError: Raised when required keys are missing or values are invalid.
    """

    docker_image = str(payload.get("docker_image") or "").strip()
    if not docker_image:
        raise ValueError("docker_image must not be blank")

    concurrency = int(payload.get("concurrency", 1))
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    return JobSpec(
        docker_image=docker_image,
        entrypoint=tuple(str(value) for value in payload.get("entrypoint") or ()),
        environment=tuple(str(value) for value in payload.get("environment") or ()),
        concurrency=concurrency,
        annotations=tuple(str(value) for value in payload.get("annotations") or ()),
    )

"""Shard-state aggregation predicates used to classify remote jobs."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Sequence

from .models import JobOutcome, JobShardState, JobSnapshot, JobStateType

ShardStateCheck = Callable[[Sequence[JobShardState]], bool]


class JobStateCheckError(RuntimeError):
    """Raised when a shard-state predicate detects a disallowed state."""


@dataclass(frozen=True)
class JobClassification:
    """Outcome of one classification pass over a job snapshot.

    Attributes:
        outcome: Derived job outcome.
        detail: Predicate error message that influenced the outcome, if any.
    """

    outcome: JobOutcome
    detail: str | None = None


def domain_job_total_execution_count(snapshot: JobSnapshot) -> int:
    """Return the number of shard executions the network created for a job.

    Args:
        snapshot: Remote job snapshot.

    Returns:
        int: `concurrency * total_shards`, zero while the job is unplanned.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return max(snapshot.concurrency, 0) * max(snapshot.total_shards, 0)


def domain_count_shard_states(shard_states: Iterable[JobShardState]) -> Counter[JobStateType]:
    return Counter(shard_state.state for shard_state in shard_states)


def domain_check_terminal_states(total_shards: int) -> ShardStateCheck:
    """Build a check that passes once every expected shard is terminal.

    Args:
        total_shards: Expected shard execution count.

    Returns:
        ShardStateCheck: Predicate over shard states.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    def _check(shard_states: Sequence[JobShardState]) -> bool:
        if total_shards < 1:
            return False
        terminal_count = sum(1 for shard_state in shard_states if shard_state.state.state_is_terminal())
        return terminal_count == total_shards

    return _check


def domain_check_job_states(required_state_counts: Mapping[JobStateType, int]) -> ShardStateCheck:
    """Build a check that passes when observed state counts match exactly.

    Args:
        required_state_counts: Required shard count per state.

    Returns:
        ShardStateCheck: Predicate over shard states.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    def _check(shard_states: Sequence[JobShardState]) -> bool:
        observed_counts = domain_count_shard_states(shard_states)
        return all(
            observed_counts.get(state, 0) == required_count
            for state, required_count in required_state_counts.items()
        )

    return _check


def domain_check_no_error_states(error_states: Iterable[JobStateType]) -> ShardStateCheck:
    """Build a check that raises when any shard reached an error state.

    Args:
        error_states: States treated as errors.

    Returns:
        ShardStateCheck: Predicate returning True when no shard errored.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    disallowed_states = frozenset(error_states)

    def _check(shard_states: Sequence[JobShardState]) -> bool:
        errored_shards = [shard_state for shard_state in shard_states if shard_state.state in disallowed_states]
        if errored_shards:
            details = "; ".join(
                f"node={shard_state.node_id} shard={shard_state.shard_index} "
                f"state={shard_state.state.value} status={shard_state.status}"
                for shard_state in errored_shards
            )
            raise JobStateCheckError(f"job has shards in error state: {details}")
        return True

    return _check


def domain_classify_job(snapshot: JobSnapshot) -> JobClassification:
    """Classify one remote job snapshot into a poll outcome.

    Precedence: still running, completed, failed, unknown. A terminal job
    is completed only when every expected shard completed, and failed when
    the error-state check does not pass.

    Args:
        snapshot: Remote job snapshot.

    Returns:
        JobClassification: Derived outcome and optional predicate detail.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    total_shards = domain_job_total_execution_count(snapshot)
    shard_states = snapshot.shard_states
    job_reached_terminal_states = domain_check_terminal_states(total_shards)
    job_completed = domain_check_job_states({JobStateType.COMPLETED: total_shards})
    job_has_no_errors = domain_check_no_error_states([JobStateType.ERROR])

    try:
        if not job_reached_terminal_states(shard_states):
            return JobClassification(outcome=JobOutcome.RUNNING)
    except JobStateCheckError as error:
        return JobClassification(outcome=JobOutcome.RUNNING, detail=str(error))

    if job_completed(shard_states):
        return JobClassification(outcome=JobOutcome.COMPLETED)

    try:
        if not job_has_no_errors(shard_states):
            return JobClassification(outcome=JobOutcome.FAILED)
    except JobStateCheckError as error:
        return JobClassification(outcome=JobOutcome.FAILED, detail=str(error))

    return JobClassification(outcome=JobOutcome.UNKNOWN)

"""Regression tests for Bacalhau job submission and outcome reconciliation."""

from __future__ import annotations

from typing import Any

import pytest

from app.adapters import (
    BacalhauAdapterConnectionError,
    BacalhauAdapterTimeoutError,
    InMemoryBacalhauClient,
)
from app.domain import (
    BacalhauJobCompletedEvent,
    BacalhauJobFailedEvent,
    BacalhauJobRunningEvent,
    ContractSubmittedEvent,
    JobSnapshot,
    JobSpec,
    JobStateType,
)
from app.jobs import (
    LILYPAD_JOB_ANNOTATION,
    BacalhauJobRunner,
    JobRunnerConfig,
    JobSubmissionError,
    job_build_order_annotation,
)


def _build_event(order_id: str = "order-1") -> ContractSubmittedEvent:
    """Build a deterministic order submission event.

    Args:
        order_id: Contract order identifier.

    Returns:
        ContractSubmittedEvent: Event with a small docker job spec.

    Raises:
        ValueError: Raised by the event when order_id is blank.
    """

    return ContractSubmittedEvent(
        order_id=order_id,
        job_spec=JobSpec(docker_image="ubuntu:22.04", entrypoint=("echo", "hello")),
    )


def _submit(
    runner: BacalhauJobRunner,
    client: InMemoryBacalhauClient,
    order_id: str,
    states: list[JobStateType],
    total_shards: int | None = None,
) -> BacalhauJobRunningEvent:
    """Submit one order and set its remote shard states.

    Args:
        runner: Runner under test.
        client: In-memory client backing the runner.
        order_id: Contract order identifier.
        states: Remote shard states to report.
        total_shards: Optional planned shard count override.

    Returns:
        BacalhauJobRunningEvent: Running handle for the submitted order.

    Raises:
        JobSubmissionError: Raised when submission fails.
    """

    running_event = runner.job_create(_build_event(order_id))
    client.memory_set_shard_states(running_event.job_id, states, total_shards=total_shards)
    return running_event


def test_jobs_create_tags_job_and_returns_running_handle(captured_logs: list[dict[str, Any]]) -> None:
    """Attach system and order tags and wrap the remote id with the order id.

    Args:
        captured_logs: Captured loguru records.

    Returns:
        None: Assertions validate tagging and handle contents.

    Raises:
        AssertionError: Raised when tagging or handle contents are incorrect.
    """

    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    event = _build_event("order-42")

    running_event = runner.job_create(event)

    assert running_event.order_id == "order-42"
    assert running_event.job_id == "job-0001"
    stored_snapshot = client.memory_get_snapshot(running_event.job_id)
    assert stored_snapshot.annotations == (LILYPAD_JOB_ANNOTATION, "lilypad-job-order-42")
    assert event.job_spec.annotations == ()
    created_records = [record for record in captured_logs if record["message"] == "Created Bacalhau job"]
    assert len(created_records) == 1
    assert created_records[0]["level"].name == "INFO"
    assert created_records[0]["extra"] == {"order_id": "order-42", "job_id": "job-0001"}


def test_jobs_order_annotation_is_plain_concatenation() -> None:
    assert job_build_order_annotation("abc") == "lilypad-job-abc"


def test_jobs_create_wraps_submission_failure() -> None:
    """Raise typed submission error chained to the adapter failure.

    Returns:
        None: Assertions validate error wrapping.

    Raises:
        AssertionError: Raised when submission errors are not wrapped.
    """

    client = InMemoryBacalhauClient()
    upstream_error = BacalhauAdapterConnectionError("connection refused")
    client.memory_set_submit_error(upstream_error)
    runner = BacalhauJobRunner(client=client)

    with pytest.raises(JobSubmissionError, match="error submitting job: connection refused") as error_info:
        runner.job_create(_build_event())

    assert error_info.value.__cause__ is upstream_error


def test_jobs_create_can_be_retried_after_failure() -> None:
    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    event = _build_event()
    client.memory_set_submit_error(BacalhauAdapterTimeoutError("timed out"))

    with pytest.raises(JobSubmissionError):
        runner.job_create(event)

    client.memory_set_submit_error(None)
    assert runner.job_create(event).order_id == event.order_id


def test_jobs_find_completed_classifies_completed_and_failed_jobs() -> None:
    """Return completed and failed subsets and omit running or unknown jobs.

    Returns:
        None: Assertions validate classification subsets.

    Raises:
        AssertionError: Raised when classification subsets are incorrect.
    """

    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    completed_job = _submit(runner, client, "order-ok", [JobStateType.COMPLETED] * 3)
    failed_job = _submit(runner, client, "order-bad", [JobStateType.COMPLETED, JobStateType.ERROR])
    running_job = _submit(runner, client, "order-run", [JobStateType.COMPLETED, JobStateType.RUNNING])
    unknown_job = _submit(runner, client, "order-odd", [JobStateType.COMPLETED, JobStateType.CANCELLED])

    completed, failed = runner.job_find_completed([completed_job, failed_job, running_job, unknown_job])

    assert completed == [BacalhauJobCompletedEvent(order_id="order-ok", job_id=completed_job.job_id)]
    assert failed == [BacalhauJobFailedEvent(order_id="order-bad", job_id=failed_job.job_id)]


def test_jobs_find_completed_queries_once_with_tag_page_size_and_timeout() -> None:
    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    running_job = _submit(runner, client, "order-1", [JobStateType.RUNNING])

    runner.job_find_completed([running_job, running_job])

    assert len(client.list_calls) == 1
    list_call = client.list_calls[0]
    assert list_call.include_tags == (LILYPAD_JOB_ANNOTATION,)
    assert list_call.max_jobs == 100
    assert list_call.timeout_seconds == 5.0
    assert list_call.sort_by == "created_at"
    assert list_call.sort_reverse is True


def test_jobs_find_completed_uses_configured_page_size() -> None:
    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client, config=JobRunnerConfig(list_page_size=1))
    older_job = _submit(runner, client, "order-old", [JobStateType.COMPLETED])
    newer_job = _submit(runner, client, "order-new", [JobStateType.COMPLETED])

    completed, failed = runner.job_find_completed([older_job, newer_job])

    assert [event.job_id for event in completed] == [newer_job.job_id]
    assert failed == []


def test_jobs_find_completed_timeout_returns_empty_results(captured_logs: list[dict[str, Any]]) -> None:
    """Absorb a list timeout and return empty subsets without raising.

    Args:
        captured_logs: Captured loguru records.

    Returns:
        None: Assertions validate fail-soft polling behavior.

    Raises:
        AssertionError: Raised when query errors are propagated.
    """

    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    running_job = _submit(runner, client, "order-1", [JobStateType.COMPLETED])
    client.memory_set_list_error(BacalhauAdapterTimeoutError("Bacalhau /list request timed out"))

    completed, failed = runner.job_find_completed([running_job])

    assert completed == []
    assert failed == []
    assert any(record["level"].name == "ERROR" for record in captured_logs)


def test_jobs_find_completed_plain_connection_error_is_absorbed() -> None:
    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    client.memory_set_list_error(ConnectionError("network unreachable"))

    assert runner.job_find_completed([BacalhauJobRunningEvent(order_id="o", job_id="j")]) == ([], [])


def test_jobs_find_completed_omits_jobs_missing_from_remote_listing() -> None:
    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    _submit(runner, client, "order-1", [JobStateType.COMPLETED])
    missing_job = BacalhauJobRunningEvent(order_id="order-2", job_id="job-missing")

    assert runner.job_find_completed([missing_job]) == ([], [])


def test_jobs_find_completed_ignores_untagged_remote_jobs() -> None:
    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    client.memory_put_snapshot(JobSnapshot(job_id="foreign-job", total_shards=1))
    foreign_handle = BacalhauJobRunningEvent(order_id="order-x", job_id="foreign-job")

    assert runner.job_find_completed([foreign_handle]) == ([], [])


def test_jobs_find_completed_never_finishes_still_running_jobs(captured_logs: list[dict[str, Any]]) -> None:
    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    running_job = _submit(runner, client, "order-1", [JobStateType.ERROR, JobStateType.RUNNING])

    assert runner.job_find_completed([running_job]) == ([], [])
    assert any(record["message"] == "Bacalhau job still in progress" for record in captured_logs)


def test_jobs_find_completed_logs_unknown_terminal_state(captured_logs: list[dict[str, Any]]) -> None:
    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    unknown_job = _submit(runner, client, "order-1", [JobStateType.CANCELLED])

    assert runner.job_find_completed([unknown_job]) == ([], [])
    warning_records = [record for record in captured_logs if record["level"].name == "WARNING"]
    assert [record["message"] for record in warning_records] == ["Bacalhau job in unknown state"]


def test_jobs_find_completed_is_idempotent_and_does_not_mutate_input() -> None:
    """Return identical results for unchanged remote state and leave input intact.

    Returns:
        None: Assertions validate idempotence and input immutability.

    Raises:
        AssertionError: Raised when repeated polls diverge or input changes.
    """

    client = InMemoryBacalhauClient()
    runner = BacalhauJobRunner(client=client)
    tracked_jobs = [
        _submit(runner, client, "order-1", [JobStateType.COMPLETED] * 2),
        _submit(runner, client, "order-2", [JobStateType.ERROR]),
        _submit(runner, client, "order-3", [JobStateType.RUNNING]),
    ]
    tracked_jobs_before = list(tracked_jobs)

    first_result = runner.job_find_completed(tracked_jobs)
    second_result = runner.job_find_completed(tracked_jobs)

    assert first_result == second_result
    assert tracked_jobs == tracked_jobs_before
    completed_ids = {event.job_id for event in first_result[0]}
    failed_ids = {event.job_id for event in first_result[1]}
    assert completed_ids.isdisjoint(failed_ids)
    assert completed_ids | failed_ids <= {event.job_id for event in tracked_jobs}


def test_jobs_runner_rejects_invalid_config() -> None:
    client = InMemoryBacalhauClient()

    with pytest.raises(ValueError, match="list_page_size"):
        BacalhauJobRunner(client=client, config=JobRunnerConfig(list_page_size=0))
    with pytest.raises(ValueError, match="list_timeout_seconds"):
        BacalhauJobRunner(client=client, config=JobRunnerConfig(list_timeout_seconds=0))

"""Tests for caller-side job tracking, poll cycles and the mock job runner."""

from __future__ import annotations

import threading

import pytest

from app.adapters import InMemoryBacalhauClient
from app.domain import (
    BacalhauJobCompletedEvent,
    BacalhauJobFailedEvent,
    BacalhauJobRunningEvent,
    ContractSubmittedEvent,
    JobSpec,
    JobStateType,
)
from app.jobs import (
    BacalhauJobRunner,
    JobPollLoop,
    JobSubmissionError,
    JobTracker,
    MockJobRunner,
    runner_error_create,
    runner_failed_find,
)


def _build_event(order_id: str) -> ContractSubmittedEvent:
    return ContractSubmittedEvent(order_id=order_id, job_spec=JobSpec(docker_image="ubuntu:22.04"))


class _CountingRunner:
    """Runner stub that counts reconcile calls and reports nothing finished."""

    def __init__(self):
        self.find_calls: list[list[BacalhauJobRunningEvent]] = []

    def job_create(self, event: ContractSubmittedEvent) -> BacalhauJobRunningEvent:
        return event.job_created(f"job-{event.order_id}")

    def job_find_completed(
        self,
        jobs: list[BacalhauJobRunningEvent],
    ) -> tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]]:
        self.find_calls.append(list(jobs))
        return [], []


def test_jobs_mock_runner_defaults_to_successful_create_and_find() -> None:
    """Create handles for any order and report every tracked job completed.

    Returns:
        None: Assertions validate default mock handlers.

    Raises:
        AssertionError: Raised when default handlers misbehave.
    """

    runner = MockJobRunner()
    running_event = runner.job_create(_build_event("order-1"))

    completed, failed = runner.job_find_completed([running_event])

    assert running_event.order_id == "order-1"
    assert running_event.job_id
    assert completed == [running_event.completed()]
    assert failed == []


def test_jobs_mock_runner_uses_injected_handlers() -> None:
    runner = MockJobRunner(create_handler=runner_error_create, find_completed_handler=runner_failed_find)
    running_event = BacalhauJobRunningEvent(order_id="order-1", job_id="job-1")

    with pytest.raises(JobSubmissionError, match="error creating job"):
        runner.job_create(_build_event("order-1"))
    assert runner.job_find_completed([running_event]) == ([], [running_event.failed()])


def test_jobs_poll_loop_retires_classified_jobs_once() -> None:
    """Remove completed and failed jobs from the running set exactly once.

    Returns:
        None: Assertions validate retirement behavior.

    Raises:
        AssertionError: Raised when jobs are reprocessed after retirement.
    """

    client = InMemoryBacalhauClient()
    poll_loop = JobPollLoop(runner=BacalhauJobRunner(client=client))
    completed_job = poll_loop.loop_submit(_build_event("order-ok"))
    failed_job = poll_loop.loop_submit(_build_event("order-bad"))
    running_job = poll_loop.loop_submit(_build_event("order-run"))
    client.memory_set_shard_states(completed_job.job_id, [JobStateType.COMPLETED])
    client.memory_set_shard_states(failed_job.job_id, [JobStateType.ERROR])
    client.memory_set_shard_states(running_job.job_id, [JobStateType.RUNNING])

    first_cycle = poll_loop.loop_run_cycle()
    second_cycle = poll_loop.loop_run_cycle()

    assert first_cycle.polled_jobs == 3
    assert first_cycle.completed == [completed_job.completed()]
    assert first_cycle.failed == [failed_job.failed()]
    assert second_cycle.polled_jobs == 1
    assert second_cycle.completed == []
    assert second_cycle.failed == []
    assert poll_loop.tracker.tracker_running() == [running_job]
    assert poll_loop.tracker.tracker_completed() == [completed_job.completed()]
    assert poll_loop.tracker.tracker_failed() == [failed_job.failed()]


def test_jobs_poll_loop_submission_failure_tracks_nothing() -> None:
    poll_loop = JobPollLoop(runner=MockJobRunner(create_handler=runner_error_create))

    with pytest.raises(JobSubmissionError):
        poll_loop.loop_submit(_build_event("order-1"))
    assert poll_loop.tracker.tracker_running() == []


def test_jobs_poll_loop_skips_runner_when_nothing_is_tracked() -> None:
    runner = _CountingRunner()
    poll_loop = JobPollLoop(runner=runner)

    cycle_result = poll_loop.loop_run_cycle()

    assert cycle_result.polled_jobs == 0
    assert runner.find_calls == []


def test_jobs_tracker_ignores_results_for_untracked_jobs() -> None:
    tracker = JobTracker()
    tracked_job = BacalhauJobRunningEvent(order_id="order-1", job_id="job-1")
    tracker.tracker_add(tracked_job)

    retired_completed, retired_failed = tracker.tracker_retire(
        [BacalhauJobCompletedEvent(order_id="order-9", job_id="job-9")],
        [tracked_job.failed(), tracked_job.failed()],
    )

    assert retired_completed == []
    assert retired_failed == [tracked_job.failed()]
    assert tracker.tracker_running() == []


def test_jobs_poll_loop_run_until_idle_stops_when_jobs_retired() -> None:
    poll_loop = JobPollLoop(runner=MockJobRunner(), poll_interval_seconds=0.01)
    running_event = poll_loop.loop_submit(_build_event("order-1"))

    poll_loop.loop_run_until_idle()

    assert poll_loop.tracker.tracker_running() == []
    assert poll_loop.tracker.tracker_completed() == [running_event.completed()]


def test_jobs_poll_loop_run_forever_exits_on_stop_event() -> None:
    """Keep polling on the interval until the stop event is set.

    Returns:
        None: Assertions validate loop shutdown.

    Raises:
        AssertionError: Raised when the loop does not stop.
    """

    runner = _CountingRunner()
    poll_loop = JobPollLoop(runner=runner, poll_interval_seconds=0.01)
    poll_loop.loop_submit(_build_event("order-1"))
    stop_event = threading.Event()
    poll_thread = threading.Thread(target=poll_loop.loop_run_forever, args=(stop_event,))

    poll_thread.start()
    for _ in range(200):
        if runner.find_calls:
            break
        threading.Event().wait(0.01)
    stop_event.set()
    poll_thread.join(timeout=2)

    assert not poll_thread.is_alive()
    assert len(runner.find_calls) >= 1


def test_jobs_poll_loop_rejects_invalid_interval() -> None:
    with pytest.raises(ValueError, match="poll_interval_seconds"):
        JobPollLoop(runner=MockJobRunner(), poll_interval_seconds=0)

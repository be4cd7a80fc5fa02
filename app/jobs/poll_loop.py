"""Caller-side tracking and interval polling for submitted jobs."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Sequence

from loguru import logger

from app.domain import (
    BacalhauJobCompletedEvent,
    BacalhauJobFailedEvent,
    BacalhauJobRunningEvent,
    ContractSubmittedEvent,
)

from .interfaces import JobRunnerPort


@dataclass(frozen=True)
class JobPollCycleResult:
    """Events retired during one poll cycle.

    Attributes:
        polled_jobs: Number of running handles passed to the runner.
        completed: Newly completed events.
        failed: Newly failed events.
    """

    polled_jobs: int
    completed: list[BacalhauJobCompletedEvent] = field(default_factory=list)
    failed: list[BacalhauJobFailedEvent] = field(default_factory=list)


class JobTracker:
    """Thread-safe set of running handles plus retired outcomes.

    Running handles are keyed by job id. A handle is retired at most once;
    results for ids that are no longer running are ignored.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._running: dict[str, BacalhauJobRunningEvent] = {}
        self._completed: list[BacalhauJobCompletedEvent] = []
        self._failed: list[BacalhauJobFailedEvent] = []

    def tracker_add(self, running_event: BacalhauJobRunningEvent) -> None:
        with self._lock:
            self._running[running_event.job_id] = running_event

    def tracker_running(self) -> list[BacalhauJobRunningEvent]:
        with self._lock:
            return list(self._running.values())

    def tracker_completed(self) -> list[BacalhauJobCompletedEvent]:
        with self._lock:
            return list(self._completed)

    def tracker_failed(self) -> list[BacalhauJobFailedEvent]:
        with self._lock:
            return list(self._failed)

    def tracker_retire(
        self,
        completed: Sequence[BacalhauJobCompletedEvent],
        failed: Sequence[BacalhauJobFailedEvent],
    ) -> tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]]:
        """Remove classified handles from the running set.

        Args:
            completed: Completed events reported by the runner.
            failed: Failed events reported by the runner.

        Returns:
            tuple[list[BacalhauJobCompletedEvent], list[BacalhauJobFailedEvent]]:
                Events whose handles were still running and are now retired.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        retired_completed: list[BacalhauJobCompletedEvent] = []
        retired_failed: list[BacalhauJobFailedEvent] = []
        with self._lock:
            for completed_event in completed:
                if self._running.pop(completed_event.job_id, None) is not None:
                    retired_completed.append(completed_event)
            for failed_event in failed:
                if self._running.pop(failed_event.job_id, None) is not None:
                    retired_failed.append(failed_event)
            self._completed.extend(retired_completed)
            self._failed.extend(retired_failed)
        return retired_completed, retired_failed


class JobPollLoop:
    """Submit orders and periodically reconcile tracked jobs."""

    def __init__(
        self,
        runner: JobRunnerPort,
        tracker: JobTracker | None = None,
        poll_interval_seconds: float = 10.0,
    ):
        """Initialize poll loop dependencies.

        Args:
            runner: Job runner used for submission and reconciliation.
            tracker: Tracked-handle store; a new one is created when omitted.
            poll_interval_seconds: Delay between reconcile cycles.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if runner is None:
            raise ValueError("runner must not be None")
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be > 0")

        self._runner = runner
        self._tracker = tracker or JobTracker()
        self._poll_interval_seconds = poll_interval_seconds

    @property
    def tracker(self) -> JobTracker:
        return self._tracker

    def loop_submit(self, event: ContractSubmittedEvent) -> BacalhauJobRunningEvent:
        """Submit one order and start tracking its job.

        Args:
            event: Order submission event.

        Returns:
            BacalhauJobRunningEvent: Tracked running handle.

        Raises:
            JobSubmissionError: Propagated from the runner; nothing is tracked.
        """

        running_event = self._runner.job_create(event)
        self._tracker.tracker_add(running_event)
        return running_event

    def loop_run_cycle(self) -> JobPollCycleResult:
        """Run one reconcile cycle over every tracked running handle.

        Returns:
            JobPollCycleResult: Events retired by this cycle.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        running_events = self._tracker.tracker_running()
        if not running_events:
            return JobPollCycleResult(polled_jobs=0)

        completed, failed = self._runner.job_find_completed(running_events)
        retired_completed, retired_failed = self._tracker.tracker_retire(completed, failed)
        if retired_completed or retired_failed:
            logger.info(
                "Retired {} completed and {} failed jobs",
                len(retired_completed),
                len(retired_failed),
            )
        return JobPollCycleResult(
            polled_jobs=len(running_events),
            completed=retired_completed,
            failed=retired_failed,
        )

    def loop_run_forever(self, stop_event: threading.Event) -> None:
        """Run reconcile cycles on a fixed interval until `stop_event` is set.

        Args:
            stop_event: Event signalling loop shutdown.

        Returns:
            None: Returns once the stop event is set.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        logger.info("Starting job poll loop with interval {}s", self._poll_interval_seconds)
        while not stop_event.is_set():
            self.loop_run_cycle()
            stop_event.wait(self._poll_interval_seconds)
        logger.info("Job poll loop stopped")

    def loop_run_until_idle(self, stop_event: threading.Event | None = None) -> None:
        """Run reconcile cycles until no tracked job is running.

        Args:
            stop_event: Optional event that ends polling early.

        Returns:
            None: Returns when the running set is empty or polling was stopped.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        resolved_stop_event = stop_event or threading.Event()
        while not resolved_stop_event.is_set():
            self.loop_run_cycle()
            if not self._tracker.tracker_running():
                return
            resolved_stop_event.wait(self._poll_interval_seconds)

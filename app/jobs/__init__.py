"""Job layer package for order submission and outcome reconciliation."""

from .interfaces import JobRunnerPort, JobSubmissionError
from .job_runner import LILYPAD_JOB_ANNOTATION, BacalhauJobRunner, JobRunnerConfig, job_build_order_annotation
from .mock_runner import (
	MockJobRunner,
	runner_error_create,
	runner_failed_find,
	runner_successful_create,
	runner_successful_find,
)
from .poll_loop import JobPollCycleResult, JobPollLoop, JobTracker

__all__ = [
	"BacalhauJobRunner",
	"JobPollCycleResult",
	"JobPollLoop",
	"JobRunnerConfig",
	"JobRunnerPort",
	"JobSubmissionError",
	"JobTracker",
	"LILYPAD_JOB_ANNOTATION",
	"MockJobRunner",
	"job_build_order_annotation",
	"runner_error_create",
	"runner_failed_find",
	"runner_successful_create",
	"runner_successful_find",
]

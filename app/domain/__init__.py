"""Domain models used across application layer boundaries."""

from .events import (
	BacalhauJobCompletedEvent,
	BacalhauJobFailedEvent,
	BacalhauJobRunningEvent,
	ContractSubmittedEvent,
)
from .job_states import (
	JobClassification,
	JobStateCheckError,
	domain_check_job_states,
	domain_check_no_error_states,
	domain_check_terminal_states,
	domain_classify_job,
	domain_job_total_execution_count,
)
from .models import (
	HealthStatus,
	JobOutcome,
	JobShardState,
	JobSnapshot,
	JobSpec,
	JobStateType,
	domain_build_job_spec,
)

__all__ = [
	"BacalhauJobCompletedEvent",
	"BacalhauJobFailedEvent",
	"BacalhauJobRunningEvent",
	"ContractSubmittedEvent",
	"HealthStatus",
	"JobClassification",
	"JobOutcome",
	"JobShardState",
	"JobSnapshot",
	"JobSpec",
	"JobStateCheckError",
	"JobStateType",
	"domain_build_job_spec",
	"domain_check_job_states",
	"domain_check_no_error_states",
	"domain_check_terminal_states",
	"domain_classify_job",
	"domain_job_total_execution_count",
]

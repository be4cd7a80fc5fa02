"""Bacalhau public API adapter implementation for job submission and listing."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Final, Sequence

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from app.domain import HealthStatus, JobShardState, JobSnapshot, JobSpec, JobStateType

from .bacalhau_errors import (
    BacalhauAdapterConnectionError,
    BacalhauAdapterTimeoutError,
    BacalhauRequestError,
    BacalhauResponseError,
)
from .interfaces import BacalhauClientPort


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class _WireShardState(_WireModel):
    node_id: str = Field(default="", alias="NodeId")
    shard_index: int = Field(default=0, alias="ShardIndex")
    state: str = Field(default="", alias="State")
    status: str = Field(default="", alias="Status")


class _WireNodeState(_WireModel):
    shards: dict[str, _WireShardState] | None = Field(default=None, alias="Shards")


class _WireJobState(_WireModel):
    nodes: dict[str, _WireNodeState] | None = Field(default=None, alias="Nodes")


class _WireJobStatus(_WireModel):
    job_state: _WireJobState | None = Field(default=None, alias="JobState")


class _WireMetadata(_WireModel):
    job_id: str = Field(alias="ID")
    created_at: datetime | None = Field(default=None, alias="CreatedAt")


class _WireSpec(_WireModel):
    annotations: list[str] | None = Field(default=None, alias="Annotations")


class _WireDeal(_WireModel):
    concurrency: int = Field(default=1, alias="Concurrency")


class _WireExecutionPlan(_WireModel):
    total_shards: int = Field(default=0, validation_alias=AliasChoices("ShardsTotal", "TotalShards"))


class _WireJob(_WireModel):
    metadata: _WireMetadata = Field(alias="Metadata")
    spec: _WireSpec | None = Field(default=None, alias="Spec")
    deal: _WireDeal | None = Field(default=None, alias="Deal")
    execution_plan: _WireExecutionPlan | None = Field(default=None, alias="ExecutionPlan")
    status: _WireJobStatus | None = Field(default=None, alias="Status")


class BacalhauApiAdapter(BacalhauClientPort):
    """Adapter implementation for the Bacalhau requester `submit` and `list` endpoints."""

    _USER_AGENT: Final[str] = "lilypad-bacalhau-bridge/1.0 (Python/httpx)"
    _API_VERSION: Final[str] = "V1beta1"

    def __init__(
        self,
        base_url: str,
        client_id: str = "",
        request_timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize Bacalhau API adapter.

        Args:
            base_url: Requester node API base URL, e.g. `http://host:1234`.
            client_id: Client identifier sent with submit and list requests.
            request_timeout_seconds: Default HTTP request timeout in seconds.
            transport: Optional httpx transport override.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_base_url = base_url.strip()
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._base_url = normalized_base_url.rstrip("/")
        self._client_id = client_id.strip()
        self._request_timeout_seconds = request_timeout_seconds
        self._http_client = httpx.Client(
            base_url=self._base_url,
            timeout=request_timeout_seconds,
            headers={"User-Agent": self._USER_AGENT},
            transport=transport,
        )

    def adapter_source_name(self) -> str:
        """Return stable adapter source label.

        Returns:
            str: Source identifier including the requester base URL.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return f"bacalhau_api:{self._base_url}"

    def adapter_check_health(self) -> HealthStatus:
        """Probe the requester node health endpoint.

        Returns:
            HealthStatus: Healthy status when the endpoint answers successfully.

        Raises:
            ConnectionError: Raised for transport failures and non-success status.
            TimeoutError: Raised when the probe times out.
            ValueError: Raised when the requester rejects the probe.
            RuntimeError: Raised when the probe body is not valid JSON.
        """

        self._adapter_http_request("GET", "/healthz", payload=None, timeout_seconds=self._request_timeout_seconds)
        return HealthStatus(status="ok", detail="bacalhau requester reachable")

    def adapter_submit(self, job_spec: JobSpec) -> JobSnapshot:
        """Submit one job and return the accepted job snapshot.

        Args:
            job_spec: Job specification to submit.

        Returns:
            JobSnapshot: Accepted job snapshot with remote id.

        Raises:
            ConnectionError: Raised for network/HTTP transport failures.
            TimeoutError: Raised when the request times out.
            ValueError: Raised when the upstream rejects the request.
            RuntimeError: Raised when the response does not carry a job.
        """

        request_payload = {
            "data": {
                "ClientID": self._client_id,
                "Job": self._adapter_build_job_payload(job_spec),
                "Context": "",
            },
            "signature": "",
            "client_public_key": "",
        }
        response_payload = self._adapter_http_request(
            "POST",
            "/submit",
            payload=request_payload,
            timeout_seconds=self._request_timeout_seconds,
        )
        job_payload = response_payload.get("job")
        if not isinstance(job_payload, dict):
            raise BacalhauResponseError("Bacalhau submit response missing job")
        return self._adapter_parse_job(job_payload)

    def adapter_list(
        self,
        include_tags: Sequence[str],
        max_jobs: int,
        sort_by: str,
        sort_reverse: bool,
        timeout_seconds: float,
    ) -> list[JobSnapshot]:
        """List tagged jobs within a single bounded request.

        Args:
            include_tags: Tags a job must carry.
            max_jobs: Maximum jobs returned by the requester.
            sort_by: Sort field name.
            sort_reverse: Whether to reverse the sort order.
            timeout_seconds: Deadline for this call.

        Returns:
            list[JobSnapshot]: Parsed job snapshots.

        Raises:
            ConnectionError: Raised for network/HTTP transport failures.
            TimeoutError: Raised when the request exceeds `timeout_seconds`.
            RuntimeError: Raised when the response payload is malformed.
        """

        if max_jobs < 1:
            raise BacalhauRequestError("max_jobs must be >= 1")
        if timeout_seconds <= 0:
            raise BacalhauRequestError("timeout_seconds must be > 0")

        request_payload = {
            "client_id": self._client_id,
            "id": "",
            "max_jobs": max_jobs,
            "return_all": False,
            "sort_by": sort_by,
            "sort_reverse": sort_reverse,
            "include_tags": list(include_tags),
            "exclude_tags": [],
        }
        response_payload = self._adapter_http_request(
            "POST",
            "/list",
            payload=request_payload,
            timeout_seconds=timeout_seconds,
        )
        jobs_payload = response_payload.get("jobs")
        if jobs_payload is None:
            return []
        if not isinstance(jobs_payload, list):
            raise BacalhauResponseError("Bacalhau list response field `jobs` must be a list")
        return [self._adapter_parse_job(job_payload) for job_payload in jobs_payload]

    def adapter_close(self) -> None:
        """Release pooled HTTP connections."""

        self._http_client.close()

    def _adapter_http_request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None,
        timeout_seconds: float,
    ) -> dict[str, Any]:
        """Execute one HTTP request and return the decoded JSON object.

        Args:
            method: HTTP method.
            path: Endpoint path relative to the base URL.
            payload: Optional JSON body.
            timeout_seconds: Request timeout in seconds.

        Returns:
            dict[str, Any]: Decoded response object, empty for non-object bodies.

        Raises:
            ConnectionError: Raised for network and non-success HTTP status.
            TimeoutError: Raised when the request times out.
            ValueError: Raised when the upstream answers HTTP 400.
            RuntimeError: Raised when the response body is not valid JSON.
        """

        try:
            response = self._http_client.request(method, path, json=payload, timeout=timeout_seconds)
            response.raise_for_status()
        except httpx.TimeoutException as error:
            raise BacalhauAdapterTimeoutError(f"Bacalhau {path} request timed out") from error
        except httpx.HTTPStatusError as error:
            status_code = error.response.status_code
            if status_code == httpx.codes.BAD_REQUEST:
                raise BacalhauRequestError(
                    f"Bacalhau {path} request rejected: {error.response.text.strip()}",
                    status_code=status_code,
                ) from error
            raise BacalhauAdapterConnectionError(
                f"Bacalhau upstream returned HTTP {status_code}",
                status_code=status_code,
            ) from error
        except httpx.TransportError as error:
            raise BacalhauAdapterConnectionError(f"Bacalhau {path} transport request failed") from error

        if not response.content:
            return {}
        try:
            decoded_payload = response.json()
        except ValueError as error:
            raise BacalhauResponseError(f"Bacalhau {path} response is not valid JSON") from error
        if not isinstance(decoded_payload, dict):
            return {}
        return decoded_payload

    def _adapter_build_job_payload(self, job_spec: JobSpec) -> dict[str, Any]:
        """Render a job specification into the requester job document.

        Args:
            job_spec: Job specification.

        Returns:
            dict[str, Any]: Job document with production defaults applied.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "APIVersion": self._API_VERSION,
            "Spec": {
                "Engine": "Docker",
                "Verifier": "Noop",
                "Publisher": "Estuary",
                "Docker": {
                    "Image": job_spec.docker_image,
                    "Entrypoint": list(job_spec.entrypoint),
                    "EnvironmentVariables": list(job_spec.environment),
                },
                "Annotations": list(job_spec.annotations),
                "Sharding": {"BatchSize": 1, "GlobPatternBasePath": "/inputs"},
            },
            "Deal": {"Concurrency": job_spec.concurrency},
        }

    def _adapter_parse_job(self, job_payload: Any) -> JobSnapshot:
        """Parse one requester job document into a snapshot.

        Args:
            job_payload: Decoded job document.

        Returns:
            JobSnapshot: Immutable snapshot with flattened shard states.

        Raises:
            RuntimeError: Raised when the document does not match the job contract.
        """

        try:
            wire_job = _WireJob.model_validate(job_payload)
        except ValidationError as error:
            raise BacalhauResponseError(f"Bacalhau job payload is invalid: {error}") from error

        shard_states: list[JobShardState] = []
        job_state = wire_job.status.job_state if wire_job.status is not None else None
        for node_id, node_state in ((job_state.nodes if job_state else None) or {}).items():
            for shard_state in (node_state.shards or {}).values():
                shard_states.append(
                    JobShardState(
                        node_id=shard_state.node_id or node_id,
                        shard_index=shard_state.shard_index,
                        state=JobStateType.state_parse(shard_state.state),
                        status=shard_state.status,
                    )
                )
        shard_states.sort(key=lambda shard_state: (shard_state.node_id, shard_state.shard_index))

        return JobSnapshot(
            job_id=wire_job.metadata.job_id,
            created_at=wire_job.metadata.created_at,
            concurrency=wire_job.deal.concurrency if wire_job.deal is not None else 1,
            total_shards=wire_job.execution_plan.total_shards if wire_job.execution_plan is not None else 0,
            shard_states=tuple(shard_states),
            annotations=tuple((wire_job.spec.annotations if wire_job.spec else None) or ()),
        )

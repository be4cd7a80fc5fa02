"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class BridgeSettings(BaseSettings):
    """Application settings for the bridge runtime and Bacalhau polling.

    Environment variable names map directly to field names in uppercase.
    Example: `bacalhau_api_host` reads from `BACALHAU_API_HOST`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        bacalhau_api_host: Bacalhau requester node host.
        bacalhau_api_port: Bacalhau requester node API port.
        bacalhau_client_id: Client identifier sent with submit and list requests.
        bacalhau_request_timeout_seconds: Default HTTP timeout for submit and health calls.
        job_list_page_size: Maximum jobs fetched per reconcile cycle.
        job_list_timeout_seconds: Deadline for the list call of one reconcile cycle.
        poll_interval_seconds: Delay between reconcile cycles.
        log_level: Minimum log level for the stderr sink.
        log_json: Whether log records are serialized as JSON.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    bacalhau_api_host: str = Field(default="bootstrap.production.bacalhau.org", min_length=1)
    bacalhau_api_port: int = Field(default=1234, ge=1, le=65535)
    bacalhau_client_id: str = Field(default="")
    bacalhau_request_timeout_seconds: float = Field(default=30.0, gt=0)
    job_list_page_size: int = Field(default=100, ge=1)
    job_list_timeout_seconds: float = Field(default=5.0, gt=0)
    poll_interval_seconds: float = Field(default=10.0, gt=0)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    @field_validator("bacalhau_api_host")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log level: {value}")
        return normalized_value

    def settings_bacalhau_base_url(self) -> str:
        """Return the Bacalhau requester API base URL.

        Returns:
            str: `http://<host>:<port>` URL.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return f"http://{self.bacalhau_api_host}:{self.bacalhau_api_port}"


def config_load_settings() -> BridgeSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        BridgeSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return BridgeSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error

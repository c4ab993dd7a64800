"""Typed runtime settings with dotenv support and startup validation."""

import tempfile
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVEL_NAMES = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Client settings for the pipeline web service connection and local state.

    Environment variable names map directly to field names in uppercase.
    Example: `pipeline_base_url` reads from `PIPELINE_BASE_URL`.

    Attributes:
        pipeline_base_url: Base URL of the pipeline web service.
        pipeline_client_key: Client id used to sign requests; blank disables signing.
        pipeline_client_secret: Client secret used to sign requests.
        pipeline_request_timeout_seconds: HTTP request timeout in seconds.
        pipeline_poll_interval_seconds: Delay between job status polls while streaming messages.
        pipeline_halt_key_path: File holding the key accepted by the halt endpoint.
        last_job_id_path: Optional override for the last-job-id file location.
        scripts_enabled: Whether script commands are discovered and registered.
        log_level: Standard logging level name.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    pipeline_base_url: str = Field(default="http://localhost:8181/ws")
    pipeline_client_key: str = Field(default="")
    pipeline_client_secret: str = Field(default="")
    pipeline_request_timeout_seconds: float = Field(default=30.0, gt=0)
    pipeline_poll_interval_seconds: float = Field(default=1.0, ge=0)
    pipeline_halt_key_path: str = Field(default=str(Path(tempfile.gettempdir()) / "dp2key.txt"))
    last_job_id_path: str | None = Field(default=None)
    scripts_enabled: bool = Field(default=True)
    log_level: str = Field(default="WARNING")

    @field_validator("pipeline_base_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        stripped_value = value.strip().rstrip("/")
        if not stripped_value:
            raise ValueError("value must not be blank")
        if not stripped_value.startswith(("http://", "https://")):
            raise ValueError("pipeline_base_url must start with http:// or https://")
        return stripped_value

    @field_validator("pipeline_client_secret")
    @classmethod
    def _validate_secret_pairing(cls, value: str, info) -> str:
        client_key = str(info.data.get("pipeline_client_key", "")).strip()
        if client_key and not value.strip():
            raise ValueError("pipeline_client_secret must be set when pipeline_client_key is set")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in _LOG_LEVEL_NAMES:
            raise ValueError(f"log_level must be one of {', '.join(sorted(_LOG_LEVEL_NAMES))}")
        return normalized_value

    def settings_authentication_enabled(self) -> bool:
        """Return whether outgoing requests must be signed.

        Returns:
            bool: True when a client key is configured.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return bool(self.pipeline_client_key.strip())


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error

"""Process-wide relay configuration read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash-exp"


class ConfigError(Exception):
    """Raised when the environment does not describe a usable configuration."""


class RelayConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    channel_access_token: str = Field(min_length=1)
    gemini_api_key: str = Field(min_length=1)
    channel_secret: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    loading_seconds: int = Field(default=10, ge=5, le=60)
    http_timeout: float | None = Field(default=None, gt=0)
    audit_log_path: str | None = None
    audit_log_max_bytes: int = Field(default=10_485_760, gt=0)
    audit_log_backup_count: int = Field(default=5, ge=1)

    @field_validator("loading_seconds")
    @classmethod
    def _multiple_of_five(cls, value: int) -> int:
        # LINE rejects loading durations that are not a multiple of 5.
        if value % 5:
            raise ValueError("loading_seconds must be a multiple of 5")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelayConfig:
        """Build the configuration from environment variables.

        Raises:
            ConfigError: If a required variable is missing or a value is invalid.
        """
        env = os.environ if environ is None else environ
        missing = [
            name for name in ("CHANNEL_ACCESS_TOKEN", "GEMINI_API_KEY")
            if not env.get(name)
        ]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        values: dict[str, object] = {
            "channel_access_token": env["CHANNEL_ACCESS_TOKEN"],
            "gemini_api_key": env["GEMINI_API_KEY"],
            "channel_secret": env.get("LINE_CHANNEL_SECRET") or None,
            "gemini_model": env.get("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            "loading_seconds": env.get("LOADING_SECONDS", "10"),
            "http_timeout": env.get("HTTP_TIMEOUT_SECONDS") or None,
            "audit_log_path": env.get("AUDIT_LOG_PATH") or None,
            "audit_log_max_bytes": env.get("AUDIT_LOG_MAX_BYTES", "10485760"),
            "audit_log_backup_count": env.get("AUDIT_LOG_BACKUP_COUNT", "5"),
        }
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

"""Pydantic models for settings and validation outcomes."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from google_oauth_exec.common.google import DEFAULT_TIMEOUT_SECONDS, ErrorKind

ENV_VARS = {
    "token": "GOOGLE_OAUTH_EXEC_INPUT_TOKEN",
    "client_id": "GOOGLE_OAUTH_EXEC_CLIENT_ID",
    "timeout_seconds": "GOOGLE_OAUTH_EXEC_TIMEOUT",
    "clock_skew_seconds": "GOOGLE_OAUTH_EXEC_CLOCK_SKEW",
    "log_level": "GOOGLE_OAUTH_EXEC_LOG_LEVEL",
}


class ExecSettings(BaseModel):
    """Inputs for a single validation run."""

    model_config = ConfigDict(frozen=True)

    # Emptiness of token and client_id is reported as MissingInput by the verifier.
    token: str = Field(default="", repr=False)
    client_id: str = ""
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0, allow_inf_nan=False)
    clock_skew_seconds: int = Field(default=0, ge=0, le=300)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        name = value.strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level {value!r}")
        return name

    @classmethod
    def from_env(cls, environ: Mapping[str, str], **overrides: Any) -> "ExecSettings":
        """Build settings from environment variables, then apply non-None overrides."""

        values: dict[str, Any] = {}
        for field, name in ENV_VARS.items():
            raw = environ.get(name)
            if raw:
                values[field] = raw
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls.model_validate(values)


class ValidationOutcome(BaseModel):
    """Either the verified claim set or a classified failure."""

    model_config = ConfigDict(frozen=True)

    claims: dict[str, Any] | None = None
    error: ErrorKind | None = None
    message: str | None = None

    @classmethod
    def success(cls, claims: Mapping[str, Any]) -> "ValidationOutcome":
        return cls(claims=dict(claims))

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ValidationOutcome":
        return cls(error=kind, message=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        if self.error is None:
            return 0
        return self.error.exit_code

"""Settings model for wasm-relay.

This module provides:
- RelayConfig: listener and compiler backend settings, read once at startup
  from HOST, PORT, COMPILER_URL, COMPILER_TIMEOUT, LOG_LEVEL and LOG_JSON
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wasm_relay.errors import ConfigurationError

DEFAULT_PORT = 3000

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class RelayConfig(BaseSettings):
    """Relay service configuration.

    Loaded from environment variables when fields are not passed explicitly.
    Constructed once at boot and passed to every component.

    Attributes:
        host: Interface the inbound listener binds to (HOST).
        port: Inbound listener port, default 3000 (PORT).
        compiler_url: Compiler backend base URL, required (COMPILER_URL).
        compiler_timeout_seconds: Timeout for each backend call (COMPILER_TIMEOUT).
        log_level: Minimum log level (LOG_LEVEL).
        log_json: Emit JSON logs if True, console-rendered logs otherwise (LOG_JSON).

    Example:
        >>> # From environment
        >>> config = RelayConfig()
        >>>
        >>> # Explicit
        >>> config = RelayConfig(compiler_url="http://compiler:8080/")
        >>> config.run_url
        'http://compiler:8080/run'
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        env_ignore_empty=True,
    )

    host: str = Field(
        default="0.0.0.0",  # noqa: S104
        min_length=1,
        validation_alias="HOST",
        description="Interface for the inbound listener",
    )
    port: int = Field(
        default=DEFAULT_PORT,
        ge=1,
        le=65535,
        validation_alias="PORT",
        description="Port for the inbound listener",
    )
    compiler_url: str = Field(
        ...,
        min_length=1,
        validation_alias="COMPILER_URL",
        description="Compiler backend base URL",
    )
    compiler_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=600.0,
        validation_alias="COMPILER_TIMEOUT",
        description="Timeout for a single compiler backend call in seconds",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Minimum log level",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Render logs as JSON",
    )

    @field_validator("compiler_url")
    @classmethod
    def validate_url_format(cls, v: str) -> str:
        """Validate URL format (must be http:// or https://)."""
        if not v.startswith(("http://", "https://")):
            msg = f"compiler_url must start with http:// or https://, got: {v}"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            msg = f"log_level must be one of {', '.join(sorted(LOG_LEVELS))}, got: {v}"
            raise ValueError(msg)
        return level

    @property
    def run_url(self) -> str:
        """Full URL of the backend compile endpoint."""
        return f"{self.compiler_url}/run"

    @classmethod
    def from_env(cls, **overrides: Any) -> RelayConfig:
        """Load configuration from the environment, failing fast on errors.

        Args:
            **overrides: Field values that take precedence over the environment.
                None values are ignored.

        Returns:
            Validated RelayConfig.

        Raises:
            ConfigurationError: If COMPILER_URL is absent or a value is invalid.
        """
        # Keyed by env name so init values and env values land on the same key
        init = {
            cls.model_fields[name].validation_alias: value
            for name, value in overrides.items()
            if value is not None
        }
        try:
            return cls(**init)
        except ValidationError as exc:
            first = exc.errors()[0]
            variable = _variable_for(str(first["loc"][0])) if first["loc"] else None
            if first["type"] == "missing" and variable == "COMPILER_URL":
                raise ConfigurationError(
                    "COMPILER_URL must be set",
                    variable=variable,
                ) from exc
            raise ConfigurationError(
                f"Invalid configuration: {variable}: {first['msg']}",
                variable=variable,
            ) from exc


def _variable_for(loc: str) -> str | None:
    """Map a validation error location to its environment variable."""
    for name, field in RelayConfig.model_fields.items():
        if loc in (name, field.validation_alias):
            return str(field.validation_alias)
    return None

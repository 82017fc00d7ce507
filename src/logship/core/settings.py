"""
Configuration models for logship using Pydantic v2 Settings.

Values come from keyword arguments first, then ``LOGSHIP_*`` environment
variables, then the defaults below. Required identifiers are validated up
front so a misconfigured transport fails before any record flows.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

VALID_DOMAINS: Final[tuple[str, ...]] = (
    "us1",
    "us2",
    "eu1",
    "eu2",
    "ap1",
    "ap2",
    "ap3",
)

DEFAULT_BATCH_SIZE: Final[int] = 100
DEFAULT_FLUSH_INTERVAL_SECONDS: Final[float] = 1.0
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
# Backend hard limit on the serialized array
DEFAULT_MAX_BATCH_SIZE_BYTES: Final[int] = 2 * 1024 * 1024


class DiagnosticsSettings(BaseSettings):
    """Settings read by the diagnostics module on first use."""

    internal_logging_enabled: bool = Field(
        default=True,
        description="Emit JSON diagnostics to stderr for internal errors",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOGSHIP_",
        extra="ignore",
        case_sensitive=False,
    )


class TransportSettings(BaseSettings):
    """Top-level transport configuration."""

    domain: str | None = Field(
        default=None,
        description="Coralogix region domain (us1, us2, eu1, eu2, ap1, ap2, ap3)",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Send-Your-Data API key, sent as a bearer token",
    )
    application_name: str | None = Field(
        default=None, description="Coralogix applicationName for every record"
    )
    subsystem_name: str | None = Field(
        default=None, description="Coralogix subsystemName for every record"
    )
    computer_name: str | None = Field(
        default=None,
        description="Overrides the hostname carried by individual records",
    )
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE,
        ge=1,
        description="Number of buffered records that triggers a flush",
    )
    flush_interval_seconds: float = Field(
        default=DEFAULT_FLUSH_INTERVAL_SECONDS,
        gt=0.0,
        description="Interval of the periodic background flush",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0.0,
        description="HTTP request timeout for one batch delivery",
    )
    max_batch_size_bytes: int = Field(
        default=DEFAULT_MAX_BATCH_SIZE_BYTES,
        ge=1,
        description="Backend ceiling for one serialized batch",
    )
    size_trigger_requires_count: bool = Field(
        default=False,
        description=(
            "Only flush on the size threshold when the count threshold is "
            "also reached"
        ),
    )
    internal_logging_enabled: bool = Field(
        default=True,
        description="Emit JSON diagnostics to stderr for internal errors",
    )
    enable_metrics: bool = Field(
        default=False, description="Enable Prometheus metrics export"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOGSHIP_",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("domain", "application_name", "subsystem_name", "computer_name")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("domain")
    @classmethod
    def _normalize_domain(cls, value: str | None) -> str | None:
        return value.lower() if value else value

    @model_validator(mode="after")
    def _require_identifiers(self) -> TransportSettings:
        if not self.domain:
            raise ValueError("domain is required")
        if self.domain not in VALID_DOMAINS:
            raise ValueError(
                f"Invalid domain: {self.domain}. "
                f"Must be one of: {', '.join(VALID_DOMAINS)}"
            )
        if self.api_key is None or not self.api_key.get_secret_value():
            raise ValueError("api_key is required")
        if not self.application_name:
            raise ValueError("application_name is required")
        if not self.subsystem_name:
            raise ValueError("subsystem_name is required")
        return self

    def api_key_value(self) -> str:
        return self.api_key.get_secret_value() if self.api_key else ""


def _format_validation_error(exc: ValidationError) -> str:
    messages: list[str] = []
    for err in exc.errors():
        raised = err.get("ctx", {}).get("error")
        if isinstance(raised, Exception):
            messages.append(str(raised))
            continue
        loc = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(messages)


def load_settings(
    settings: TransportSettings | None = None, **overrides: Any
) -> TransportSettings:
    """Build validated settings, raising ``ConfigurationError`` on failure.

    When ``settings`` is given, ``overrides`` are applied on top of it and
    the result is re-validated.
    """
    try:
        if settings is None:
            return TransportSettings(**overrides)
        if not overrides:
            return settings
        merged = settings.model_dump()
        merged.update(overrides)
        return TransportSettings(**merged)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e), cause=e) from e

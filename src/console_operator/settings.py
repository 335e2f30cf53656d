"""Centralized operator settings using pydantic-settings.

This module provides a single source of truth for all operator configuration
loaded from environment variables. Uses pydantic for automatic validation,
type coercion, and documentation.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from console_operator.constants import CONSOLE_COMPONENT_NAMESPACE, CONSOLE_OPERATOR_NAME

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Operator configuration loaded from environment variables.

    All settings have sensible defaults for production use. Override via
    environment variables as documented per field.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs for request tracing",
    )

    # Metrics and observability
    metrics_port: int = Field(
        default=8081,
        validation_alias="METRICS_PORT",
        description="Port for Prometheus metrics endpoint",
    )
    metrics_host: str = Field(
        default="0.0.0.0",
        validation_alias="METRICS_HOST",
        description="Host address to bind metrics server",
    )

    # Watched objects
    target_namespace: str = Field(
        default=CONSOLE_COMPONENT_NAMESPACE,
        validation_alias="TARGET_NAMESPACE",
        description="Namespace holding the console deployment, secrets and config maps",
    )

    # Sync scheduling
    resync_interval_seconds: float = Field(
        default=60.0,
        validation_alias="RESYNC_INTERVAL_SECONDS",
        description="Base interval between periodic passes when nothing changes",
    )
    resync_jitter_factor: float = Field(
        default=1.0,
        validation_alias="RESYNC_JITTER_FACTOR",
        description="Maximum jitter added to the resync interval, as a fraction of it",
    )
    requeue_base_delay_seconds: float = Field(
        default=1.0,
        validation_alias="REQUEUE_BASE_DELAY_SECONDS",
        description="Initial delay before re-running a pass that requested a retry",
    )
    requeue_max_delay_seconds: float = Field(
        default=60.0,
        validation_alias="REQUEUE_MAX_DELAY_SECONDS",
        description="Upper bound for the exponential retry delay",
    )

    # Status writes
    status_update_retries: int = Field(
        default=5,
        validation_alias="STATUS_UPDATE_RETRIES",
        description="Attempts for a status write that hits an update conflict",
    )
    field_manager: str = Field(
        default=CONSOLE_OPERATOR_NAME,
        validation_alias="FIELD_MANAGER",
        description="Field manager recorded on status writes",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(VALID_LOG_LEVELS)}")
        return level

    @field_validator(
        "resync_interval_seconds",
        "requeue_base_delay_seconds",
        "requeue_max_delay_seconds",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("resync_jitter_factor")
    @classmethod
    def validate_jitter(cls, v: float) -> float:
        if v < 0:
            raise ValueError("resync_jitter_factor cannot be negative")
        return v

    @field_validator("status_update_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("status_update_retries must be at least 1")
        return v


# Global settings instance - initialized once at module import
settings = Settings()

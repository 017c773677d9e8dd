"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with the library defaults as fallbacks. Supports .env files and nested
configuration.

Example:
    >>> from backoffcase.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.exponential.initial_interval
    0.5
    >>> settings.backoff.strategy
    'exponential'

    # Or with environment variables:
    # BACKOFFCASE_EXPONENTIAL_MAX_ELAPSED_TIME=120
    # BACKOFFCASE_BACKOFF_STRATEGY=constant
    # BACKOFFCASE_BACKOFF_INTERVAL=2.5
    # BACKOFFCASE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, NonNegativeFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import defaults
from .defaults import ExponentialBackoffConfig

Strategy = Literal["exponential", "constant", "fixed", "zero", "stop"]


class ExponentialSettings(BaseSettings):
    """Parameters of the exponential policy."""

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFCASE_EXPONENTIAL_",
        extra="ignore",
    )

    initial_interval: NonNegativeFloat = Field(default=defaults.INITIAL_INTERVAL, description="First interval in seconds")
    randomization_factor: Annotated[float, Field(ge=0.0, le=1.0)] = defaults.RANDOMIZATION_FACTOR
    multiplier: Annotated[float, Field(ge=1.0)] = defaults.MULTIPLIER
    max_interval: NonNegativeFloat = Field(default=defaults.MAX_INTERVAL, description="Interval cap in seconds")
    max_elapsed_time: NonNegativeFloat | None = Field(
        default=defaults.MAX_ELAPSED_TIME,
        description="Overall budget in seconds; unset for no limit",
    )

    @field_validator("max_elapsed_time", mode="before")
    @classmethod
    def _parse_unbounded(cls, v: object) -> object:
        """Accept "none"/"" from the environment as no limit."""
        if isinstance(v, str) and v.strip().lower() in ("", "none", "null"):
            return None
        return v

    def to_config(self) -> ExponentialBackoffConfig:
        """Freeze into the record consumed by ExponentialBackoff."""
        return ExponentialBackoffConfig(**self.model_dump())


class BackoffSettings(BaseSettings):
    """Which strategy build_backoff() produces, plus the simple strategies' knobs."""

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFCASE_BACKOFF_",
        extra="ignore",
    )

    strategy: Strategy = "exponential"
    interval: NonNegativeFloat = Field(default=1.0, description="Interval for constant/fixed strategies")
    max_attempts: PositiveInt = Field(default=3, description="Attempt count for the fixed strategy")

    @field_validator("strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class BackoffcaseSettings(BaseSettings):
    """Root settings for backoffcase.

    Loads configuration from environment variables with BACKOFFCASE_ prefix.

    Example environment variables:
        BACKOFFCASE_EXPONENTIAL_MULTIPLIER=2.0
        BACKOFFCASE_BACKOFF_STRATEGY=fixed
        BACKOFFCASE_BACKOFF_MAX_ATTEMPTS=5
        BACKOFFCASE_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    exponential: ExponentialSettings = Field(default_factory=ExponentialSettings)
    backoff: BackoffSettings = Field(default_factory=BackoffSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> BackoffcaseSettings:
    """Get the global settings instance (cached)."""
    return BackoffcaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()

"""Configuration management using pydantic-settings.

Provides environment-based configuration with type safety and validation,
plus the frozen default record for the exponential policy.
"""

from .defaults import DEFAULT_EXPONENTIAL, ExponentialBackoffConfig
from .settings import (
    BackoffcaseSettings,
    BackoffSettings,
    ExponentialSettings,
    LoggingSettings,
    Strategy,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DEFAULT_EXPONENTIAL",
    "ExponentialBackoffConfig",
    "BackoffcaseSettings",
    "BackoffSettings",
    "ExponentialSettings",
    "LoggingSettings",
    "Strategy",
    "clear_settings_cache",
    "get_settings",
]

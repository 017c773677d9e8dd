"""Foundation - Core building blocks for backoffcase.

Contains: error classification, Result type, config, testing.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "BackoffError", "Permanent", "Transient", "classify",
    "Result", "Ok", "Err",
    # Config
    "BackoffcaseSettings", "get_settings", "clear_settings_cache",
    "ExponentialSettings", "BackoffSettings", "LoggingSettings", "Strategy",
    "ExponentialBackoffConfig", "DEFAULT_EXPONENTIAL",
    # Testing
    "ManualClock", "StepClock", "ManualSleeper", "MockOperation", "poll", "PENDING",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("BackoffError", "Permanent", "Transient", "classify", "Result", "Ok", "Err"):
        from . import errors
        return getattr(errors, name)

    if name in ("BackoffcaseSettings", "get_settings", "clear_settings_cache",
                "ExponentialSettings", "BackoffSettings", "LoggingSettings", "Strategy",
                "ExponentialBackoffConfig", "DEFAULT_EXPONENTIAL"):
        from . import config
        return getattr(config, name)

    if name in ("ManualClock", "StepClock", "ManualSleeper", "MockOperation", "poll", "PENDING"):
        from . import testing
        return getattr(testing, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

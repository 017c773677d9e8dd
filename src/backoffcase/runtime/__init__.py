"""Runtime - Backoff policies, retry engines, and observability.

Contains: backoff strategies, blocking/awaitable/stream retry, logging setup.
"""

from __future__ import annotations

__all__ = [
    # Backoff
    "Backoff", "Zero", "Stop", "Constant", "FixedNumber",
    "ExponentialBackoff", "ExponentialBackoffBuilder", "RandomSource", "randomized_nanos",
    "Clock", "SystemClock", "build_backoff",
    # Retry
    "retry", "retry_notify", "next_delay",
    "Retry", "RetryState", "Sleeper", "AsyncioSleeper",
    "StreamBackoff", "StreamState", "backoff_stream",
    "Notify", "NoopNotify", "LoggingNotify", "as_notify",
    # Observability
    "ROOT_LOGGER", "JsonFormatter", "configure_logging", "get_logger",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    backoff_attrs = {
        "Backoff", "Zero", "Stop", "Constant", "FixedNumber",
        "ExponentialBackoff", "ExponentialBackoffBuilder", "RandomSource", "randomized_nanos",
        "Clock", "SystemClock", "build_backoff",
    }
    if name in backoff_attrs:
        from . import backoff
        return getattr(backoff, name)

    retry_attrs = {
        "retry", "retry_notify", "next_delay",
        "Retry", "RetryState", "Sleeper", "AsyncioSleeper",
        "StreamBackoff", "StreamState", "backoff_stream",
        "Notify", "NoopNotify", "LoggingNotify", "as_notify",
    }
    if name in retry_attrs:
        from . import retry
        return getattr(retry, name)

    if name in ("ROOT_LOGGER", "JsonFormatter", "configure_logging", "get_logger"):
        from . import observability
        return getattr(observability, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

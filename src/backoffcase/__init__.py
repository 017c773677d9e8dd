"""Backoffcase - Retry operations with exponential backoff.

Backoff policies decide how long to wait before the next attempt (or when to
give up); retry engines run an operation until it succeeds, fails
permanently, or the policy is exhausted. Blocking, awaitable and stream
variants share the same policies and error classification.

Quick Start (Blocking):
    >>> from backoffcase import ExponentialBackoff, Permanent, retry
    >>>
    >>> def fetch_url() -> str:
    ...     try:
    ...         return http_get("https://www.rust-lang.org")
    ...     except InvalidURL as e:
    ...         raise Permanent(e) from e
    >>>
    >>> body = retry(ExponentialBackoff(), fetch_url)

Awaitable (asyncio or any loop via a Sleeper):
    >>> from backoffcase import future
    >>> body = await future.retry(ExponentialBackoff(), fetch_url_async)

Streams:
    >>> from backoffcase import Constant, backoff_stream
    >>> async for item in backoff_stream(events(), Constant(1.0)):
    ...     print(item)

Rate limits:
    >>> raise BackoffError.retry_after(err, 30.0)   # retried after exactly 30s

Configuration (BACKOFFCASE_* environment variables):
    >>> from backoffcase import build_backoff, configure_logging
    >>> policy = build_backoff()      # BACKOFFCASE_BACKOFF_STRATEGY=exponential
    >>> configure_logging()           # BACKOFFCASE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

__version__ = "0.1.0"

# Error classification
from .foundation.errors import BackoffError, Err, Ok, Permanent, Result, Transient, classify

# Configuration
from .foundation.config import (
    DEFAULT_EXPONENTIAL,
    BackoffcaseSettings,
    ExponentialBackoffConfig,
    clear_settings_cache,
    get_settings,
)

# Backoff policies
from .runtime.backoff import (
    Backoff,
    Clock,
    Constant,
    ExponentialBackoff,
    ExponentialBackoffBuilder,
    FixedNumber,
    Stop,
    SystemClock,
    Zero,
    build_backoff,
)

# Retry engines
from .runtime.retry import (
    AsyncioSleeper,
    LoggingNotify,
    NoopNotify,
    Notify,
    Retry,
    RetryState,
    Sleeper,
    StreamBackoff,
    StreamState,
    backoff_stream,
    future,
    retry,
    retry_notify,
)

# Observability
from .runtime.observability import configure_logging, get_logger

__all__ = [
    # Version
    "__version__",
    # Error classification
    "BackoffError",
    "Permanent",
    "Transient",
    "classify",
    "Result",
    "Ok",
    "Err",
    # Configuration
    "BackoffcaseSettings",
    "ExponentialBackoffConfig",
    "DEFAULT_EXPONENTIAL",
    "get_settings",
    "clear_settings_cache",
    # Backoff policies
    "Backoff",
    "Zero",
    "Stop",
    "Constant",
    "FixedNumber",
    "ExponentialBackoff",
    "ExponentialBackoffBuilder",
    "Clock",
    "SystemClock",
    "build_backoff",
    # Retry engines
    "retry",
    "retry_notify",
    "future",
    "Retry",
    "RetryState",
    "Sleeper",
    "AsyncioSleeper",
    "StreamBackoff",
    "StreamState",
    "backoff_stream",
    "Notify",
    "NoopNotify",
    "LoggingNotify",
    # Observability
    "configure_logging",
    "get_logger",
]

"""Retry engines driven by a backoff policy.

- retry/retry_notify: blocking loop on the calling thread (``sync``)
- future.retry/future.retry_notify: awaitable state machine (``future``)
- StreamBackoff/backoff_stream: pause an async stream after each Err (``stream``)
- Notify/NoopNotify/LoggingNotify: observers of scheduled retries
"""

from . import future, stream
from .future import AsyncioSleeper, Retry, RetryState, Sleeper
from .notify import LoggingNotify, NoopNotify, Notify, as_notify
from .stream import StreamBackoff, StreamState, backoff_stream
from .sync import next_delay, retry, retry_notify

__all__ = [
    # Blocking
    "retry", "retry_notify", "next_delay",
    # Awaitable
    "future", "Retry", "RetryState", "Sleeper", "AsyncioSleeper",
    # Streams
    "stream", "StreamBackoff", "StreamState", "backoff_stream",
    # Notifiers
    "Notify", "NoopNotify", "LoggingNotify", "as_notify",
]

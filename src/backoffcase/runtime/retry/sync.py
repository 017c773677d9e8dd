"""Blocking retry loop.

Runs an operation on the calling thread until it succeeds, raises a
``Permanent`` error, or the backoff policy gives up. Between attempts the
thread sleeps for the computed delay.

Example:
    >>> from backoffcase import ExponentialBackoff, Permanent, retry
    >>>
    >>> def fetch() -> str:
    ...     try:
    ...         return client.get("/status")
    ...     except InvalidURL as e:
    ...         raise Permanent(e) from e   # never retried
    ...     # any other exception is transient and retried
    >>>
    >>> body = retry(ExponentialBackoff(), fetch)
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, TypeVar

from backoffcase.foundation.errors import BackoffError, Permanent, Transient, classify

from .notify import Notify, as_notify

if TYPE_CHECKING:
    from backoffcase.runtime.backoff import Backoff

T = TypeVar("T")

logger = logging.getLogger("backoffcase.retry")


def next_delay(backoff: Backoff, error: BackoffError) -> float | None:
    """Delay before retrying after ``error``, or None to surface it.

    Permanent errors never get a delay. A transient ``retry_after`` overrides
    the policy for this one attempt; otherwise the policy is consulted.
    """
    if isinstance(error, Permanent):
        return None
    if isinstance(error, Transient) and error.retry_after is not None:
        return error.retry_after
    return backoff.next_backoff()


def retry(
    backoff: Backoff,
    operation: Callable[[], T],
    *,
    sleep: Callable[[float], object] = time.sleep,
) -> T:
    """Retry ``operation`` according to the backoff policy. The policy is reset first.

    Raises:
        Permanent: the operation raised a Permanent error (after exactly that attempt)
        Transient: the policy gave up; wraps the last transient error
    """
    return retry_notify(backoff, operation, None, sleep=sleep)


def retry_notify(
    backoff: Backoff,
    operation: Callable[[], T],
    notify: Notify[object] | Callable[[object, float], object] | None,
    *,
    sleep: Callable[[float], object] = time.sleep,
) -> T:
    """Retry ``operation``; call ``notify(err, delay)`` before each retry.

    The surfaced ``Permanent``/``Transient`` has the original exception as
    ``__cause__``; its ``err`` attribute holds the wrapped error value.
    """
    notifier = as_notify(notify)
    backoff.reset()

    while True:
        try:
            return operation()
        except Exception as exc:  # noqa: BLE001 - unclassified errors are transient
            error = classify(exc).with_cause()

        if isinstance(error, Permanent):
            logger.debug("permanent error, not retrying: %s", error)
            raise error

        delay = next_delay(backoff, error)
        if delay is None:
            logger.debug("backoff exhausted, giving up: %s", error)
            raise error

        notifier.notify(error.err, delay)
        sleep(delay)

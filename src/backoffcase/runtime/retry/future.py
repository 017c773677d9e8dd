"""Non-blocking retry: an awaitable state machine.

``Retry`` drives an operation that returns an awaitable. It never blocks a
thread and never spawns tasks: it makes progress only when the host event
loop resumes it, and at any moment it is waiting on exactly one thing,
either the current attempt or the delay before the next one.

    AWAITING_ATTEMPT --success--------------------------------> DONE (value)
    AWAITING_ATTEMPT --Permanent------------------------------> DONE (raise)
    AWAITING_ATTEMPT --Transient, no delay available----------> DONE (raise)
    AWAITING_ATTEMPT --Transient, delay d--(notify)-----------> AWAITING_DELAY
    AWAITING_DELAY   --delay elapsed--(invoke operation)------> AWAITING_ATTEMPT

Example:
    >>> from backoffcase import ExponentialBackoff
    >>> from backoffcase.runtime.retry import future
    >>>
    >>> async def fetch() -> str:
    ...     async with session.get(url) as resp:
    ...         return await resp.text()
    >>>
    >>> body = await future.retry(ExponentialBackoff(), fetch)

Cancellation is by destruction: cancelling the awaiting task (or calling
``close()``) abandons whichever awaitable is in flight. No further attempts
or notifications happen afterwards.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Generator
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

from backoffcase.foundation.errors import Permanent, classify

from .notify import Notify, as_notify
from .sync import next_delay

if TYPE_CHECKING:
    from backoffcase.runtime.backoff import Backoff

T = TypeVar("T")

logger = logging.getLogger("backoffcase.retry.future")


@runtime_checkable
class Sleeper(Protocol):
    """Produces an awaitable that completes ``seconds`` after ``sleep()`` is called.

    Supplied by the host runtime. The timer starts on the call, not on the
    first await, and the awaitable may be awaited again after an interrupted
    await (a Future, or an object whose ``__await__`` can be re-entered).
    """

    def sleep(self, seconds: float) -> Awaitable[None]: ...


def _wake(fut: asyncio.Future[None]) -> None:
    if not fut.done():
        fut.set_result(None)


class AsyncioSleeper:
    """Sleeper backed by the running asyncio loop's timer. Must be called inside the loop."""

    __slots__ = ()

    def sleep(self, seconds: float) -> asyncio.Future[None]:
        loop = asyncio.get_running_loop()
        fut = loop.create_future()
        handle = loop.call_later(seconds, _wake, fut)
        fut.add_done_callback(lambda _: handle.cancel())
        return fut

    def __repr__(self) -> str:
        return "AsyncioSleeper()"


class RetryState(StrEnum):
    """Retry session states."""
    AWAITING_ATTEMPT = "awaiting_attempt"  # Operation in flight
    AWAITING_DELAY = "awaiting_delay"      # Sleeping before the next attempt
    DONE = "done"                          # Finished, failed or abandoned


async def _reraise(exc: Exception) -> Any:
    raise exc


def close_awaitable(aw: Awaitable[Any] | None) -> None:
    """Discard an awaitable that will never be awaited to completion."""
    if inspect.iscoroutine(aw):
        aw.close()
    elif isinstance(aw, asyncio.Future):
        aw.cancel()


class Retry(Generic[T]):
    """Awaitable that retries ``operation`` according to ``backoff``.

    The policy is reset and the first attempt is created on construction.
    A Retry can be awaited once.

    Args:
        sleeper: Source of delay awaitables
        backoff: Policy consulted after each transient failure
        notify: Called synchronously with (err, delay) before each retry
        operation: Zero-argument callable returning an awaitable
    """

    __slots__ = ("_sleeper", "_backoff", "_notify", "_operation", "_attempt", "_delay", "_state", "_driver", "_attempts")

    def __init__(
        self,
        sleeper: Sleeper,
        backoff: Backoff,
        notify: Notify[object] | Callable[[object, float], object] | None,
        operation: Callable[[], Awaitable[T]],
    ) -> None:
        self._sleeper = sleeper
        self._backoff = backoff
        self._notify = as_notify(notify)
        self._operation = operation
        self._delay: Awaitable[None] | None = None
        self._driver: Generator[Any, Any, T] | None = None
        self._attempts = 0
        backoff.reset()
        self._attempt: Awaitable[T] | None = self._invoke()
        self._state = RetryState.AWAITING_ATTEMPT

    # ─── Inspection ──────────────────────────────────────────────────

    @property
    def state(self) -> RetryState:
        return self._state

    @property
    def attempts(self) -> int:
        """Number of times the operation has been invoked."""
        return self._attempts

    # ─── Driver ──────────────────────────────────────────────────────

    def _invoke(self) -> Awaitable[T]:
        self._attempts += 1
        try:
            aw = self._operation()
        except Exception as exc:  # noqa: BLE001 - failing before producing an awaitable is a failed attempt
            return _reraise(exc)
        if not inspect.isawaitable(aw):
            raise TypeError(f"operation must return an awaitable, got {type(aw).__name__}")
        return aw

    def __await__(self) -> Generator[Any, Any, T]:
        if self._driver is not None or self._state is RetryState.DONE:
            raise RuntimeError("Retry can only be awaited once")
        self._driver = self._drive()
        return self._driver

    def _drive(self) -> Generator[Any, Any, T]:
        try:
            while True:
                if self._delay is not None:
                    yield from self._delay.__await__()
                    self._delay = None
                    self._attempt = self._invoke()
                    self._state = RetryState.AWAITING_ATTEMPT

                attempt, self._attempt = self._attempt, None
                if attempt is None:
                    raise RuntimeError("Retry resumed with no attempt in flight")
                try:
                    value = yield from attempt.__await__()
                except Exception as exc:  # noqa: BLE001 - unclassified errors are transient
                    error = classify(exc).with_cause()
                else:
                    self._state = RetryState.DONE
                    return value

                if isinstance(error, Permanent):
                    self._state = RetryState.DONE
                    logger.debug("permanent error, not retrying: %s", error)
                    raise error

                delay = next_delay(self._backoff, error)
                if delay is None:
                    self._state = RetryState.DONE
                    logger.debug("backoff exhausted after %d attempts: %s", self._attempts, error)
                    raise error

                self._notify.notify(error.err, delay)
                self._delay = self._sleeper.sleep(delay)
                self._state = RetryState.AWAITING_DELAY
        finally:
            if self._state is not RetryState.DONE:
                self._abandon()

    def _abandon(self) -> None:
        close_awaitable(self._attempt)
        close_awaitable(self._delay)
        self._attempt = self._delay = None
        self._state = RetryState.DONE

    def close(self) -> None:
        """Abandon the session and any in-flight attempt or delay."""
        if self._driver is not None:
            self._driver.close()
        if self._state is not RetryState.DONE:
            self._abandon()

    def __repr__(self) -> str:
        return f"Retry(state={self._state.value}, attempts={self._attempts}, backoff={self._backoff!r})"


def retry(
    backoff: Backoff,
    operation: Callable[[], Awaitable[T]],
    *,
    sleeper: Sleeper | None = None,
) -> Retry[T]:
    """Retry ``operation`` according to ``backoff``. Await the result.

    Raises (when awaited):
        Permanent: the operation raised a Permanent error
        Transient: the policy gave up; wraps the last transient error
    """
    return Retry(sleeper or AsyncioSleeper(), backoff, None, operation)


def retry_notify(
    backoff: Backoff,
    operation: Callable[[], Awaitable[T]],
    notify: Notify[object] | Callable[[object, float], object] | None,
    *,
    sleeper: Sleeper | None = None,
) -> Retry[T]:
    """Retry ``operation``; call ``notify(err, delay)`` synchronously before each retry."""
    return Retry(sleeper or AsyncioSleeper(), backoff, notify, operation)

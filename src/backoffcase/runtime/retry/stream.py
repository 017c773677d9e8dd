"""Apply a backoff policy to a stream of fallible items.

After any ``Err`` item is emitted, the stream is paused for
``backoff.next_backoff()`` before the source is pulled again. The policy is
reset on every ``Ok`` item. If the policy gives up, the stream ends: an error
never closes the stream by itself, exhaustion does.

    AWAKE       --Err, delay d----> BACKING_OFF (item emitted, delay started)
    AWAKE       --Err, no delay---> GIVEN_UP    (item emitted)
    AWAKE       --Ok--------------> AWAKE       (policy reset, item emitted)
    BACKING_OFF --delay elapsed---> AWAKE, then pull the source
    GIVEN_UP    --any-------------> end of stream, forever

The delay runs from the moment the ``Err`` is emitted. A pull abandoned while
backing off (e.g. by ``asyncio.wait_for``) leaves it running, so the next
pull only waits for whatever is left of it.

Example:
    >>> async for item in backoff_stream(watch_events(), ExponentialBackoff()):
    ...     if item.is_ok():
    ...         handle(item.unwrap())
    ...     else:
    ...         log.warning("watch failed: %s", item.unwrap_err())
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, TypeVar

from backoffcase.foundation.errors import Result

from .future import AsyncioSleeper, Sleeper, close_awaitable

if TYPE_CHECKING:
    from backoffcase.runtime.backoff import Backoff

T = TypeVar("T")
E = TypeVar("E")

logger = logging.getLogger("backoffcase.retry.stream")


class StreamState(StrEnum):
    """Backed-off stream states."""
    AWAKE = "awake"
    BACKING_OFF = "backing_off"
    GIVEN_UP = "given_up"


class StreamBackoff(Generic[T, E]):
    """Async iterator pausing ``stream`` after each ``Err`` according to ``backoff``.

    Items that are not ``Result`` instances are treated as ``Ok``. The source
    is never pulled while a delay is outstanding.

    Args:
        stream: Source of Result items
        backoff: Policy deciding the pause after each error
        sleeper: Source of delay awaitables (default: asyncio)
    """

    __slots__ = ("_stream", "_backoff", "_sleeper", "_state", "_delay", "_sleep")

    def __init__(
        self,
        stream: AsyncIterator[Result[T, E] | T],
        backoff: Backoff,
        sleeper: Sleeper | None = None,
    ) -> None:
        self._stream = stream
        self._backoff = backoff
        self._sleeper = sleeper or AsyncioSleeper()
        self._state = StreamState.AWAKE
        self._delay = 0.0
        self._sleep: Awaitable[None] | None = None

    @property
    def state(self) -> StreamState:
        return self._state

    def __aiter__(self) -> StreamBackoff[T, E]:
        return self

    async def __anext__(self) -> Result[T, E]:
        if self._state is StreamState.GIVEN_UP:
            raise StopAsyncIteration
        if self._state is StreamState.BACKING_OFF:
            await self._wait()

        item: Result[T, E] = Result.of(await anext(self._stream))  # type: ignore[assignment]
        if item.is_err():
            self._back_off()
        else:
            self._backoff.reset()
        return item

    async def _wait(self) -> None:
        if self._sleep is None:
            self._sleep = self._sleeper.sleep(self._delay)
        sleep = self._sleep
        if isinstance(sleep, asyncio.Future):
            # Cancelling this pull must not cancel the delay itself.
            await asyncio.shield(sleep)
        elif inspect.iscoroutine(sleep):
            try:
                await sleep
            except BaseException:
                # A coroutine cannot be resumed; the next pull starts a new delay.
                sleep.close()
                self._sleep = None
                raise
        else:
            await sleep
        logger.debug("backoff of %.3fs complete, waking up", self._delay)
        self._sleep = None
        self._state = StreamState.AWAKE

    def _back_off(self) -> None:
        delay = self._backoff.next_backoff()
        if delay is None:
            logger.debug("error received, giving up")
            self._state = StreamState.GIVEN_UP
            return
        logger.debug("error received, backing off for %.3fs", delay)
        self._delay = delay
        self._sleep = self._sleeper.sleep(delay)
        self._state = StreamState.BACKING_OFF

    async def aclose(self) -> None:
        """Give up, cancel any pending delay and close the source (if it supports aclose)."""
        close_awaitable(self._sleep)
        self._sleep = None
        self._state = StreamState.GIVEN_UP
        if (close := getattr(self._stream, "aclose", None)) is not None:
            await close()

    def __repr__(self) -> str:
        return f"StreamBackoff(state={self._state.value}, backoff={self._backoff!r})"


def backoff_stream(stream: AsyncIterator[Result[T, E] | T], backoff: Backoff) -> StreamBackoff[T, E]:
    """Apply ``backoff`` to ``stream`` using asyncio for the delays."""
    return StreamBackoff(stream, backoff, AsyncioSleeper())

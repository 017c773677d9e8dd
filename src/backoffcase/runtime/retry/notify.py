"""Observers of transient failures.

A notifier is called with ``(error, delay_seconds)`` every time a transient
failure is about to be retried. It has no say over control flow. Plain
callables work; ``NoopNotify`` and ``LoggingNotify`` are provided.

Notifiers run synchronously. To do async work on notification, hand it off
to an independently scheduled task: a retry session cannot own a third
awaitable, since it may be dropped before that awaitable finishes.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Protocol, TypeVar, runtime_checkable

E = TypeVar("E", contravariant=True)

logger = logging.getLogger("backoffcase.retry")


@runtime_checkable
class Notify(Protocol[E]):
    """Called on failed attempts that will be retried."""

    def notify(self, err: E, delay: float) -> None: ...


@dataclass(frozen=True, slots=True)
class NoopNotify:
    """Literally does nothing."""

    def notify(self, err: object, delay: float) -> None:
        pass


@dataclass(slots=True)
class LoggingNotify:
    """Logs each scheduled retry.

    Attributes:
        logger: Target logger (default: backoffcase.retry)
        level: Log level for retry messages (default: WARNING)
        attempts: Retries scheduled so far
    """

    logger: logging.Logger = field(default=logger)
    level: int = logging.WARNING
    attempts: int = field(default=0, init=False)

    def notify(self, err: object, delay: float) -> None:
        self.attempts += 1
        if self.logger.isEnabledFor(self.level):
            self.logger.log(self.level, "Retry %d after %.3fs: %s", self.attempts, delay, err)


@dataclass(frozen=True, slots=True)
class _CallableNotify(Generic[E]):
    fn: Callable[[E, float], object]

    def notify(self, err: E, delay: float) -> None:
        if inspect.isawaitable(out := self.fn(err, delay)):
            if inspect.iscoroutine(out):
                out.close()
            raise TypeError("notify must be synchronous; schedule async work as a separate task")


def as_notify(notify: Notify[E] | Callable[[E, float], object] | None) -> Notify[E]:
    """Normalize None, a plain callable, or a Notify into a Notify."""
    if notify is None:
        return NoopNotify()
    if isinstance(notify, Notify):
        return notify
    if inspect.iscoroutinefunction(notify):
        raise TypeError("notify must be synchronous; schedule async work as a separate task")
    if callable(notify):
        return _CallableNotify(notify)
    raise TypeError(f"notify must be callable or implement notify(err, delay), got {type(notify).__name__}")

"""Backoff policies for retrying an operation.

A policy is a small stateful object answering one question: how long to wait
before the next attempt, or ``None`` to give up.

- Zero: retry immediately
- Stop: never retry
- Constant: fixed delay
- FixedNumber: fixed delay for a bounded number of retries
- ExponentialBackoff (see ``exponential``): jittered, capped, exponential growth

Any object with ``reset()`` and ``next_backoff()`` is a policy, so the concrete
strategy can be picked at runtime (see ``factory.build_backoff``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff policies.

    Durations are in seconds. ``reset()`` re-arms the policy to its initial
    state; the retry loops call it once before the first attempt.
    """

    def reset(self) -> None:
        """Reset the internal state to the initial value."""

    def next_backoff(self) -> float | None:
        """Delay before the next attempt, or None if no further retries should be made."""
        ...


@dataclass(slots=True)
class Zero(Backoff):
    """Immediately retry the operation."""

    def next_backoff(self) -> float | None:
        return 0.0


@dataclass(slots=True)
class Stop(Backoff):
    """The operation should never be retried."""

    def next_backoff(self) -> float | None:
        return None


@dataclass(slots=True)
class Constant(Backoff):
    """Always wait the same interval.

    Attributes:
        interval: Delay in seconds
    """

    interval: float

    def __post_init__(self) -> None:
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")

    def next_backoff(self) -> float | None:
        return self.interval


@dataclass(slots=True)
class FixedNumber(Backoff):
    """Constant interval for a fixed number of attempts.

    ``max_attempts`` counts the initial call, so the operation is retried at
    most ``max_attempts - 1`` times.

    Attributes:
        interval: Delay in seconds between attempts
        max_attempts: Total number of attempts allowed (>= 1)
    """

    interval: float
    max_attempts: int
    current_attempt: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")

    def reset(self) -> None:
        self.current_attempt = 0

    def next_backoff(self) -> float | None:
        if self.current_attempt < self.max_attempts - 1:
            self.current_attempt += 1
            return self.interval
        return None

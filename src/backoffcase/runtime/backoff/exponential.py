"""Exponential backoff with jitter, an interval cap and an elapsed-time budget.

The randomized interval is computed as::

    randomized interval =
        current_interval * (random value in range [1 - randomization_factor, 1 + randomization_factor])

and ``current_interval`` is multiplied by ``multiplier`` after every call,
until it reaches ``max_interval``. ``max_interval`` caps ``current_interval``,
not the randomized interval, which may exceed it by up to the randomization
factor.

Once the time elapsed since the last ``reset()`` goes past
``max_elapsed_time``, ``next_backoff()`` returns None.

With the defaults, and assuming ``max_elapsed_time`` is crossed on the 10th
call, the sequence is:

    Call # | current_interval (s) | randomized interval (s)
    -------|----------------------|------------------------
       1   |  0.5                 | [0.25,   0.75]
       2   |  0.75                | [0.375,  1.125]
       3   |  1.125               | [0.562,  1.687]
       4   |  1.687               | [0.8435, 2.53]
       5   |  2.53                | [1.265,  3.795]
       6   |  3.795               | [1.897,  5.692]
       7   |  5.692               | [2.846,  8.538]
       8   |  8.538               | [4.269, 12.807]
       9   | 12.807               | [6.403, 19.210]
      10   | 19.210               | None

Example:
    >>> policy = ExponentialBackoffBuilder().with_max_elapsed_time(None).build()
    >>> 0.25 <= policy.next_backoff() <= 0.75
    True
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Protocol, Self

from backoffcase.foundation.config import DEFAULT_EXPONENTIAL, ExponentialBackoffConfig, get_settings

from .backoff import Backoff
from .clock import Clock, SystemClock

if TYPE_CHECKING:
    from backoffcase.foundation.config import ExponentialSettings

logger = logging.getLogger("backoffcase.backoff")

NANOS_PER_SECOND = 1_000_000_000


class RandomSource(Protocol):
    """Anything with ``random() -> float`` in [0, 1): the random module or a random.Random."""

    def random(self) -> float: ...


def _to_nanos(seconds: float) -> int:
    return int(seconds * NANOS_PER_SECOND)


def randomized_nanos(randomization_factor: float, rand: float, current_nanos: int) -> int:
    """Pick a value from [current - delta, current + delta] given ``rand`` in [0, 1).

    The +1 spreads probability evenly over integer nanosecond buckets: with
    bounds 1 and 3 each of 1, 2 and 3 has a 33% chance.
    """
    delta = randomization_factor * current_nanos
    lo = current_nanos - delta
    hi = current_nanos + delta
    return int(lo + rand * (hi - lo + 1))


class ExponentialBackoff(Backoff):
    """Backoff policy whose interval grows exponentially, randomized by a jitter factor.

    Attributes are exposed in seconds; the arithmetic runs in nanoseconds.

    Args:
        config: Parameters (defaults: 0.5s initial, 0.5 jitter, x1.5, 60s cap, 15min budget)
        clock: Time source for the elapsed-time budget
        rng: Random source for the jitter
    """

    __slots__ = (
        "initial_interval", "randomization_factor", "multiplier", "max_interval", "max_elapsed_time",
        "clock", "rng", "start_time", "_current_nanos",
    )

    def __init__(
        self,
        config: ExponentialBackoffConfig = DEFAULT_EXPONENTIAL,
        *,
        clock: Clock | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self.initial_interval = config.initial_interval
        self.randomization_factor = config.randomization_factor
        self.multiplier = config.multiplier
        self.max_interval = config.max_interval
        self.max_elapsed_time = config.max_elapsed_time
        self.clock: Clock = clock or SystemClock()
        self.rng: RandomSource = rng or random
        self.start_time: int = 0
        self._current_nanos: int = 0
        self.reset()

    @classmethod
    def from_settings(cls, settings: ExponentialSettings | None = None, **kwargs: object) -> Self:
        """Build from environment settings (BACKOFFCASE_EXPONENTIAL_*)."""
        settings = settings or get_settings().exponential
        return cls(settings.to_config(), **kwargs)  # type: ignore[arg-type]

    # ─── State ───────────────────────────────────────────────────────

    @property
    def current_interval(self) -> float:
        """The current (pre-jitter) retry interval in seconds."""
        return self._current_nanos / NANOS_PER_SECOND

    @current_interval.setter
    def current_interval(self, seconds: float) -> None:
        self._current_nanos = _to_nanos(seconds)

    @property
    def config(self) -> ExponentialBackoffConfig:
        return ExponentialBackoffConfig(
            initial_interval=self.initial_interval,
            randomization_factor=self.randomization_factor,
            multiplier=self.multiplier,
            max_interval=self.max_interval,
            max_elapsed_time=self.max_elapsed_time,
        )

    def get_elapsed_time(self) -> float:
        """Seconds elapsed since the last reset."""
        return self._elapsed_nanos() / NANOS_PER_SECOND

    def _elapsed_nanos(self) -> int:
        return self.clock.now() - self.start_time

    # ─── Backoff ─────────────────────────────────────────────────────

    def reset(self) -> None:
        self._current_nanos = _to_nanos(self.initial_interval)
        self.start_time = self.clock.now()

    def next_backoff(self) -> float | None:
        elapsed = self._elapsed_nanos()
        budget = None if self.max_elapsed_time is None else _to_nanos(self.max_elapsed_time)

        if budget is not None and elapsed > budget:
            logger.debug("elapsed time %.3fs already past budget %.3fs", elapsed / NANOS_PER_SECOND, self.max_elapsed_time)
            return None

        interval = randomized_nanos(self.randomization_factor, self.rng.random(), self._current_nanos)
        self._increment_current_interval()

        # Checked again: this delay itself may push past the budget.
        if budget is not None and elapsed + interval > budget:
            logger.debug("next delay %.3fs would exceed budget %.3fs", interval / NANOS_PER_SECOND, self.max_elapsed_time)
            return None
        return interval / NANOS_PER_SECOND

    def _increment_current_interval(self) -> None:
        max_nanos = _to_nanos(self.max_interval)
        # Clamp before multiplying so the interval never overshoots the cap.
        if self._current_nanos >= max_nanos / self.multiplier:
            self._current_nanos = max_nanos
        else:
            self._current_nanos = int(self._current_nanos * self.multiplier)

    # ─── Dunder Methods ──────────────────────────────────────────────

    def copy(self) -> ExponentialBackoff:
        """Clone with identical state, sharing the clock and random source."""
        clone = object.__new__(type(self))
        for name in ExponentialBackoff.__slots__:
            setattr(clone, name, getattr(self, name))
        return clone

    __copy__ = copy

    def __repr__(self) -> str:
        return (
            f"ExponentialBackoff(current_interval={self.current_interval}, initial_interval={self.initial_interval}, "
            f"randomization_factor={self.randomization_factor}, multiplier={self.multiplier}, "
            f"max_interval={self.max_interval}, max_elapsed_time={self.max_elapsed_time})"
        )


class ExponentialBackoffBuilder:
    """Fluent builder for ExponentialBackoff. Starts from the defaults; validates on build().

    Example:
        >>> policy = (
        ...     ExponentialBackoffBuilder()
        ...     .with_initial_interval(1.0)
        ...     .with_multiplier(2.0)
        ...     .with_max_elapsed_time(None)
        ...     .build()
        ... )
    """

    __slots__ = ("_fields", "_clock", "_rng")

    def __init__(self) -> None:
        self._fields: dict[str, float | None] = DEFAULT_EXPONENTIAL.model_dump()
        self._clock: Clock | None = None
        self._rng: RandomSource | None = None

    def with_initial_interval(self, seconds: float) -> Self:
        """The initial retry interval."""
        self._fields["initial_interval"] = seconds
        return self

    def with_randomization_factor(self, factor: float) -> Self:
        """0.5 results in a random period ranging between 50% below and 50% above the retry interval."""
        self._fields["randomization_factor"] = factor
        return self

    def with_multiplier(self, multiplier: float) -> Self:
        """The value to multiply the current interval with for each retry attempt."""
        self._fields["multiplier"] = multiplier
        return self

    def with_max_interval(self, seconds: float) -> Self:
        """Once the retry interval reaches this value it stops increasing."""
        self._fields["max_interval"] = seconds
        return self

    def with_max_elapsed_time(self, seconds: float | None) -> Self:
        """Budget after which next_backoff() returns None; None disables it."""
        self._fields["max_elapsed_time"] = seconds
        return self

    def with_clock(self, clock: Clock) -> Self:
        self._clock = clock
        return self

    def with_rng(self, rng: RandomSource) -> Self:
        self._rng = rng
        return self

    def build(self) -> ExponentialBackoff:
        """Raises pydantic.ValidationError on invalid parameters."""
        return ExponentialBackoff(ExponentialBackoffConfig(**self._fields), clock=self._clock, rng=self._rng)

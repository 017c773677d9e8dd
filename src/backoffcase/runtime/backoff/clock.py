"""Time source for elapsed-time budgets.

Instants are integer nanoseconds from a monotonic clock. Tests inject their
own clock to make elapsed-time behavior deterministic.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Returns the current instant in nanoseconds."""

    def now(self) -> int: ...


class SystemClock:
    """Uses the system's monotonic clock. The clock for real use-cases."""

    __slots__ = ()

    def now(self) -> int:
        return time.monotonic_ns()

    def __repr__(self) -> str:
        return "SystemClock()"

"""Testing utilities: virtual time and scripted operations for retry tests."""

from .mock import PENDING, Invocation, ManualClock, ManualSleep, ManualSleeper, MockOperation, StepClock, poll

__all__ = [
    "ManualClock", "StepClock", "ManualSleep", "ManualSleeper",
    "MockOperation", "Invocation",
    "poll", "PENDING",
]

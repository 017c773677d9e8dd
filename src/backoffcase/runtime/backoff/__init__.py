"""Backoff policies: how long to wait between attempts, or when to give up."""

from .backoff import Backoff, Constant, FixedNumber, Stop, Zero
from .clock import Clock, SystemClock
from .exponential import ExponentialBackoff, ExponentialBackoffBuilder, RandomSource, randomized_nanos
from .factory import build_backoff

__all__ = [
    # Protocol & simple strategies
    "Backoff",
    "Zero",
    "Stop",
    "Constant",
    "FixedNumber",
    # Exponential
    "ExponentialBackoff",
    "ExponentialBackoffBuilder",
    "RandomSource",
    "randomized_nanos",
    # Time
    "Clock",
    "SystemClock",
    # Runtime selection
    "build_backoff",
]

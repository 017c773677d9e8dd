"""Tests for the exponential backoff policy.

Validates:
- Jitter bucket distribution
- Interval growth and cap
- Elapsed-time budget (both checks)
- Builder defaults and validation
"""

from __future__ import annotations

import copy
import random

import pytest
from pydantic import ValidationError

from backoffcase import DEFAULT_EXPONENTIAL, ExponentialBackoff, ExponentialBackoffBuilder
from backoffcase.foundation.testing import ManualClock, StepClock
from backoffcase.runtime.backoff import randomized_nanos


class FixedRandom:
    """Random source always returning the same value."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


def no_jitter(**overrides: object) -> ExponentialBackoffBuilder:
    builder = ExponentialBackoffBuilder().with_randomization_factor(0.0).with_max_elapsed_time(None)
    for name, value in overrides.items():
        getattr(builder, f"with_{name}")(value)
    return builder


# ═════════════════════════════════════════════════════════════════════════════
# Randomization
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    ("rand", "expected"),
    [(0.0, 1), (0.33, 1), (0.34, 2), (0.66, 2), (0.67, 3), (0.99, 3)],
)
def test_randomized_nanos_buckets(rand: float, expected: int) -> None:
    """Bounds [1, 3] split [0, 1) into three equal buckets."""
    assert randomized_nanos(0.5, rand, 2) == expected


def test_randomized_nanos_without_jitter() -> None:
    assert randomized_nanos(0.0, 0.0, 500) == 500
    assert randomized_nanos(0.0, 0.999, 500) == 500


def test_randomized_interval_stays_in_bounds() -> None:
    """Each delay lies within current_interval * [1 - factor, 1 + factor]."""
    policy = (
        ExponentialBackoffBuilder()
        .with_max_elapsed_time(None)
        .with_rng(random.Random(7))
        .build()
    )
    for _ in range(50):
        current = policy.current_interval
        delay = policy.next_backoff()
        assert delay is not None
        assert current * 0.5 - 1e-9 <= delay <= current * 1.5 + 1e-9


# ═════════════════════════════════════════════════════════════════════════════
# Growth
# ═════════════════════════════════════════════════════════════════════════════


def test_growth_is_capped_at_max_interval() -> None:
    policy = no_jitter(initial_interval=0.5, multiplier=2.0, max_interval=5.0).build()
    delays = [policy.next_backoff() for _ in range(7)]
    assert delays == pytest.approx([0.5, 1.0, 2.0, 4.0, 5.0, 5.0, 5.0])


def test_default_interval_progression() -> None:
    """current_interval follows 0.5 * 1.5^n with the defaults."""
    policy = ExponentialBackoff(clock=ManualClock(), rng=FixedRandom(0.5))
    expected = [0.5, 0.75, 1.125, 1.6875, 2.53125, 3.796875, 5.6953125, 8.54296875, 12.814453125]
    seen = []
    for _ in expected:
        seen.append(policy.current_interval)
        policy.next_backoff()
    assert seen == pytest.approx(expected, rel=1e-6)


def test_tenth_call_gives_up_when_budget_crossed() -> None:
    """Elapsed time past max_elapsed_time on the 10th call ends the sequence."""
    clock = ManualClock()
    policy = ExponentialBackoff(clock=clock, rng=FixedRandom(0.5))
    for _ in range(9):
        assert policy.next_backoff() is not None
        clock.advance(1.0)
    clock.advance(DEFAULT_EXPONENTIAL.max_elapsed_time)
    assert policy.next_backoff() is None


def test_multiplier_one_keeps_interval_constant() -> None:
    policy = no_jitter(initial_interval=2.0, multiplier=1.0).build()
    assert [policy.next_backoff() for _ in range(4)] == pytest.approx([2.0] * 4)


def test_reset_restores_initial_interval() -> None:
    clock = ManualClock()
    policy = no_jitter(multiplier=2.0).with_clock(clock).build()
    for _ in range(4):
        policy.next_backoff()
    clock.advance(30.0)
    assert policy.current_interval == pytest.approx(8.0)

    policy.reset()
    assert policy.current_interval == pytest.approx(0.5)
    assert policy.get_elapsed_time() == 0.0


# ═════════════════════════════════════════════════════════════════════════════
# Elapsed-time budget
# ═════════════════════════════════════════════════════════════════════════════


def test_budget_already_exceeded() -> None:
    clock = ManualClock()
    policy = no_jitter(max_elapsed_time=1.0).with_clock(clock).build()
    clock.advance(1.5)
    assert policy.next_backoff() is None


def test_budget_would_be_exceeded_by_delay() -> None:
    """0.9s elapsed + 0.5s delay > 1s budget."""
    clock = ManualClock()
    policy = no_jitter(max_elapsed_time=1.0).with_clock(clock).build()
    clock.advance(0.9)
    assert policy.next_backoff() is None


def test_delay_that_fits_budget_is_returned() -> None:
    clock = ManualClock()
    policy = no_jitter(max_elapsed_time=1.0).with_clock(clock).build()
    clock.advance(0.4)
    assert policy.next_backoff() == pytest.approx(0.5)


def test_unbounded_never_gives_up() -> None:
    clock = ManualClock()
    policy = no_jitter().with_clock(clock).build()
    clock.advance(10 * 365 * 24 * 3600)
    assert policy.next_backoff() == pytest.approx(0.5)


def test_get_elapsed_time_reads_clock() -> None:
    policy = ExponentialBackoff(clock=StepClock(step=0.25))
    # reset() read the clock once at construction
    assert policy.get_elapsed_time() == pytest.approx(0.25)
    assert policy.get_elapsed_time() == pytest.approx(0.5)


# ═════════════════════════════════════════════════════════════════════════════
# Builder & Config
# ═════════════════════════════════════════════════════════════════════════════


def test_builder_defaults_match_documented_values() -> None:
    policy = ExponentialBackoffBuilder().build()
    assert policy.initial_interval == 0.5
    assert policy.randomization_factor == 0.5
    assert policy.multiplier == 1.5
    assert policy.max_interval == 60.0
    assert policy.max_elapsed_time == 900.0
    assert policy.current_interval == 0.5


def test_builder_sets_all_fields() -> None:
    clock = ManualClock()
    policy = (
        ExponentialBackoffBuilder()
        .with_initial_interval(1.0)
        .with_randomization_factor(0.2)
        .with_multiplier(3.0)
        .with_max_interval(30.0)
        .with_max_elapsed_time(120.0)
        .with_clock(clock)
        .build()
    )
    assert policy.config.model_dump() == {
        "initial_interval": 1.0,
        "randomization_factor": 0.2,
        "multiplier": 3.0,
        "max_interval": 30.0,
        "max_elapsed_time": 120.0,
    }
    assert policy.clock is clock


@pytest.mark.parametrize(
    "builder",
    [
        ExponentialBackoffBuilder().with_randomization_factor(1.5),
        ExponentialBackoffBuilder().with_randomization_factor(-0.1),
        ExponentialBackoffBuilder().with_multiplier(0.5),
        ExponentialBackoffBuilder().with_initial_interval(-1.0),
        ExponentialBackoffBuilder().with_initial_interval(10.0).with_max_interval(5.0),
    ],
)
def test_builder_rejects_invalid_parameters(builder: ExponentialBackoffBuilder) -> None:
    with pytest.raises(ValidationError):
        builder.build()


def test_default_config_is_frozen() -> None:
    with pytest.raises(ValidationError):
        DEFAULT_EXPONENTIAL.multiplier = 2.0  # type: ignore[misc]


# ═════════════════════════════════════════════════════════════════════════════
# Copy
# ═════════════════════════════════════════════════════════════════════════════


def test_copy_is_independent() -> None:
    policy = no_jitter(multiplier=2.0).build()
    policy.next_backoff()
    clone = policy.copy()
    assert clone.current_interval == policy.current_interval

    policy.next_backoff()
    assert policy.current_interval == pytest.approx(2.0)
    assert clone.current_interval == pytest.approx(1.0)
    assert copy.copy(clone).current_interval == pytest.approx(1.0)


def test_current_interval_is_settable() -> None:
    policy = no_jitter().build()
    policy.current_interval = 3.0
    assert policy.next_backoff() == pytest.approx(3.0)

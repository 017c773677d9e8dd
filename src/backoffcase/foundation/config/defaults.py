"""Default parameters for the exponential backoff policy.

``ExponentialBackoffConfig`` is a frozen record; the module-level
``DEFAULT_EXPONENTIAL`` instance carries the defaults. All durations are in
seconds.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, model_validator

# The default initial interval (0.5 seconds).
INITIAL_INTERVAL: float = 0.5
# 0.5 gives a random period ranging between 50% below and 50% above the retry interval.
RANDOMIZATION_FACTOR: float = 0.5
# 1.5 is a 50% increase per back off.
MULTIPLIER: float = 1.5
# The default maximum back off time (1 minute).
MAX_INTERVAL: float = 60.0
# The default maximum elapsed time (15 minutes).
MAX_ELAPSED_TIME: float = 900.0


class ExponentialBackoffConfig(BaseModel):
    """Validated, immutable parameters of an exponential backoff policy.

    Attributes:
        initial_interval: First retry interval in seconds
        randomization_factor: Jitter as a fraction of the interval, in [0, 1]
        multiplier: Growth factor applied to the interval after each attempt
        max_interval: Cap on the (pre-jitter) retry interval
        max_elapsed_time: Overall budget since the last reset; None = unbounded
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        json_schema_extra={
            "title": "Exponential Backoff",
            "examples": [{
                "initial_interval": 0.5,
                "randomization_factor": 0.5,
                "multiplier": 1.5,
                "max_interval": 60.0,
                "max_elapsed_time": 900.0,
            }],
        },
    )

    initial_interval: NonNegativeFloat = INITIAL_INTERVAL
    randomization_factor: Annotated[float, Field(ge=0.0, le=1.0)] = RANDOMIZATION_FACTOR
    multiplier: Annotated[float, Field(ge=1.0)] = MULTIPLIER
    max_interval: NonNegativeFloat = MAX_INTERVAL
    max_elapsed_time: NonNegativeFloat | None = MAX_ELAPSED_TIME

    @model_validator(mode="after")
    def _check_bounds(self) -> ExponentialBackoffConfig:
        if self.initial_interval > self.max_interval:
            raise ValueError(
                f"initial_interval ({self.initial_interval}) must not exceed max_interval ({self.max_interval})"
            )
        return self


DEFAULT_EXPONENTIAL = ExponentialBackoffConfig()

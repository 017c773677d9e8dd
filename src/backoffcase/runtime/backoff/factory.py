"""Build the configured backoff policy at runtime."""

from __future__ import annotations

from typing import TYPE_CHECKING

from backoffcase.foundation.config import get_settings

from .backoff import Backoff, Constant, FixedNumber, Stop, Zero
from .exponential import ExponentialBackoff

if TYPE_CHECKING:
    from backoffcase.foundation.config import BackoffcaseSettings


def build_backoff(settings: BackoffcaseSettings | None = None) -> Backoff:
    """Instantiate the strategy named by ``settings.backoff.strategy``.

    Example:
        >>> # BACKOFFCASE_BACKOFF_STRATEGY=fixed BACKOFFCASE_BACKOFF_MAX_ATTEMPTS=5
        >>> policy = build_backoff()
    """
    settings = settings or get_settings()
    cfg = settings.backoff
    match cfg.strategy:
        case "exponential": return ExponentialBackoff(settings.exponential.to_config())
        case "constant": return Constant(cfg.interval)
        case "fixed": return FixedNumber(cfg.interval, cfg.max_attempts)
        case "zero": return Zero()
        case "stop": return Stop()
        case _: raise ValueError(f"Unknown backoff strategy: {cfg.strategy}")

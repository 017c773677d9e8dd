"""Tests for environment configuration and logging setup."""

from __future__ import annotations

import io
import logging

import orjson
import pytest
from pydantic import ValidationError

from backoffcase import ExponentialBackoff, configure_logging, get_logger, get_settings, clear_settings_cache
from backoffcase.foundation.config import BackoffSettings, ExponentialSettings, LoggingSettings
from backoffcase.runtime.observability import ROOT_LOGGER


@pytest.fixture(autouse=True)
def clean_settings() -> object:
    """Reset cached settings before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def root_logger() -> object:
    """Restore the backoffcase logger after configure_logging()."""
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────


def test_defaults() -> None:
    settings = get_settings()
    assert settings.exponential.initial_interval == 0.5
    assert settings.exponential.max_elapsed_time == 900.0
    assert settings.backoff.strategy == "exponential"
    assert settings.logging.level == "WARNING"
    assert settings.logging.format == "text"


def test_settings_are_cached() -> None:
    assert get_settings() is get_settings()


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BACKOFFCASE_EXPONENTIAL_INITIAL_INTERVAL", "2")
    monkeypatch.setenv("BACKOFFCASE_EXPONENTIAL_MAX_ELAPSED_TIME", "")
    monkeypatch.setenv("BACKOFFCASE_LOG_LEVEL", "debug")
    clear_settings_cache()

    settings = get_settings()
    assert settings.exponential.initial_interval == 2.0
    assert settings.exponential.max_elapsed_time is None
    assert settings.logging.level == "DEBUG"


def test_from_settings_builds_policy() -> None:
    policy = ExponentialBackoff.from_settings(ExponentialSettings(multiplier=3.0, max_elapsed_time=None))
    assert policy.multiplier == 3.0
    assert policy.max_elapsed_time is None
    assert policy.current_interval == 0.5


@pytest.mark.parametrize(
    "factory",
    [
        lambda: ExponentialSettings(randomization_factor=2.0),
        lambda: ExponentialSettings(multiplier=0.0),
        lambda: BackoffSettings(strategy="fibonacci"),
        lambda: BackoffSettings(max_attempts=0),
        lambda: LoggingSettings(format="xml"),
    ],
)
def test_invalid_values_rejected(factory) -> None:
    with pytest.raises(ValidationError):
        factory()


def test_inconsistent_intervals_rejected_on_conversion() -> None:
    settings = ExponentialSettings(initial_interval=10.0, max_interval=1.0)
    with pytest.raises(ValidationError):
        settings.to_config()


# ─────────────────────────────────────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────────────────────────────────────


def test_get_logger_namespaces_under_root() -> None:
    assert get_logger("retry").name == "backoffcase.retry"
    assert get_logger("backoffcase.retry.stream").name == "backoffcase.retry.stream"


def test_configure_logging_json(root_logger: logging.Logger) -> None:
    out = io.StringIO()
    configure_logging(LoggingSettings(level="DEBUG", format="json"), output=out)

    get_logger("retry").warning("Retry %d after %.3fs: %s", 1, 0.5, "boom", extra={"attempt": 1})
    record = orjson.loads(out.getvalue().splitlines()[-1])
    assert record["level"] == "warning"
    assert record["logger"] == "backoffcase.retry"
    assert record["event"] == "Retry 1 after 0.500s: boom"
    assert record["attempt"] == 1
    assert "timestamp" in record


def test_configure_logging_text(root_logger: logging.Logger) -> None:
    out = io.StringIO()
    configure_logging(LoggingSettings(level="INFO", format="text"), output=out)

    get_logger("backoff").debug("hidden")
    get_logger("backoff").info("shown")
    lines = out.getvalue().splitlines()
    assert len(lines) == 1
    assert "[INFO] backoffcase.backoff: shown" in lines[0]


def test_configure_logging_replaces_previous_handler(root_logger: logging.Logger) -> None:
    before = len(root_logger.handlers)
    configure_logging(LoggingSettings(), output=io.StringIO())
    configure_logging(LoggingSettings(), output=io.StringIO())
    assert len(root_logger.handlers) == before + 1
    assert root_logger.level == logging.WARNING

"""Logging setup for the backoffcase logger hierarchy.

Every module logs through a named stdlib logger below ``backoffcase``
(``backoffcase.retry``, ``backoffcase.retry.stream``, ...). The library never
touches the root logger; applications that want output either configure
logging themselves or call ``configure_logging()``, which applies
``LoggingSettings``:

    >>> from backoffcase import configure_logging
    >>> configure_logging()  # BACKOFFCASE_LOG_LEVEL / BACKOFFCASE_LOG_FORMAT
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

import orjson

from backoffcase.foundation.config import LoggingSettings, get_settings

ROOT_LOGGER = "backoffcase"

# Attributes present on every LogRecord; anything else came in via ``extra=``.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """JSON Lines output for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
            **{k: v for k, v in vars(record).items() if k not in _RESERVED},
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Logger below the backoffcase hierarchy, e.g. get_logger("retry") -> backoffcase.retry."""
    return logging.getLogger(name if name.startswith(ROOT_LOGGER) else f"{ROOT_LOGGER}.{name}")


def configure_logging(settings: LoggingSettings | None = None, *, output: TextIO | None = None) -> logging.Handler:
    """Attach a single stream handler to the backoffcase logger. Idempotent: replaces a previous one."""
    settings = settings or get_settings().logging
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in [h for h in logger.handlers if getattr(h, "_backoffcase", False)]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(output or sys.stderr)
    match settings.format:
        case "json": handler.setFormatter(JsonFormatter())
        case "text": handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
        case _: raise ValueError(f"Unknown format: {settings.format}. Use 'text' or 'json'")
    handler._backoffcase = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(settings.level)
    return handler

"""Observability helpers: logger hierarchy and handler setup."""

from .logging import ROOT_LOGGER, JsonFormatter, configure_logging, get_logger

__all__ = ["ROOT_LOGGER", "JsonFormatter", "configure_logging", "get_logger"]

"""Centralized logging configuration for CashPulse.

Entrypoints (the CLI) call ``configure_logging(...)`` once at startup. Library
modules only call ``get_logger(__name__)`` and never attach handlers of their
own; until configured, the package root logger carries a ``NullHandler``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

__all__ = ["configure_logging", "get_logger"]

_PKG_LOGGER_NAME = "cashpulse"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
        return logging.INFO
    env_val = os.getenv("CASHPULSE_LOG_LEVEL")
    if env_val:
        return _parse_level(env_val)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Attach a single ``StreamHandler`` to the package root logger.

    ``level`` falls back to ``CASHPULSE_LOG_LEVEL`` and then ``INFO``.
    Repeated calls are no-ops.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    logger.propagate = False
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the ``cashpulse`` tree."""

    root = logging.getLogger(_PKG_LOGGER_NAME)
    if not root.handlers:
        root.addHandler(logging.NullHandler())

    if name == _PKG_LOGGER_NAME or name.startswith(f"{_PKG_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_PKG_LOGGER_NAME}.{name}")

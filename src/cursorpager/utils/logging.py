"""Logging utilities.

Purpose:
    Centralize logging configuration for the package.

Key responsibilities:
    - Provide helper to obtain loggers under the ``cursorpager`` namespace.
    - Install a single stderr handler on demand (CLI, scripts).

Notes/Edge cases:
    - Logging configuration is idempotent: repeated calls adjust the level and
      never stack handlers.
    - Library code never configures handlers on import.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

ROOT_LOGGER_NAME = "cursorpager"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_ATTR = "_cursorpager_handler"


class _StderrHandler(logging.StreamHandler):
    """Stream handler writing to the current ``sys.stderr`` unless given a stream.

    ``sys.stderr`` is resolved on every emit, never cached.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__(stream)
        self._stream = stream

    @property  # type: ignore[override]
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    @stream.setter
    def stream(self, value: TextIO | None) -> None:
        self._stream = value


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger below the package namespace.

    ``name`` may be a dotted module path (``__name__``) or a short suffix.
    """

    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: int | str = logging.WARNING, stream: TextIO | None = None) -> logging.Logger:
    """Attach one stream handler to the package logger and set its level."""

    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level: {level!r}")
        level = resolved

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    handler = next((h for h in logger.handlers if getattr(h, _HANDLER_ATTR, False)), None)
    if handler is None:
        handler = _StderrHandler(stream)
        setattr(handler, _HANDLER_ATTR, True)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    elif isinstance(handler, _StderrHandler):
        handler.stream = stream
    handler.setLevel(level)
    return logger


__all__ = ["LOG_FORMAT", "ROOT_LOGGER_NAME", "configure_logging", "get_logger"]

# src/logging/logger.py - v3
"""Formatters and handler wiring for the docwrite logger tree.

Every module logs through ``logging.getLogger(__name__)``; since all of them
live under the ``docwrite`` package, configuring the ``docwrite`` logger is
enough to route the whole write path.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from docwrite.logging.context import LogContext, get_context

if TYPE_CHECKING:
    from docwrite.config.settings import Settings

ROOT_LOGGER = "docwrite"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _exception_text(formatter: logging.Formatter, record: logging.LogRecord) -> str | None:
    if record.exc_info and record.exc_info[1] is not None:
        return formatter.formatException(record.exc_info)
    return None


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Request and item context (collection, request id, identifier) is nested
    under ``context``; anything passed as ``extra={"data": ...}`` lands under
    ``data``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        ctx = get_context().as_dict()
        if ctx:
            entry["context"] = ctx
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        exc = _exception_text(self, record)
        if exc:
            entry["exception"] = exc
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line format for terminals: time, level, logger, [collection] (identifier)."""

    def format(self, record: logging.LogRecord) -> str:
        line = " ".join(
            [
                _now().strftime("%Y-%m-%d %H:%M:%S"),
                f"[{record.levelname:8s}]",
                record.name,
                *self._scope(get_context()),
                f"- {record.getMessage()}",
            ]
        )
        exc = _exception_text(self, record)
        return f"{line}\n{exc}" if exc else line

    @staticmethod
    def _scope(ctx: LogContext) -> list[str]:
        scope = []
        if ctx.collection:
            scope.append(f"[{ctx.collection}]")
        if ctx.identifier:
            scope.append(f"({ctx.identifier})")
        return scope


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """Install stderr (and optionally rotating file) handlers on the docwrite logger.

    Calling it again replaces the previously installed handlers.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        log_format: "json" or "text".
        log_file: Optional file path; parent directories are created.
        rotation: Size at which the file rotates, e.g. "10MB".
        retention: Rotated files kept.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        from docwrite.logging.handlers import create_rotating_handler

        handlers.append(
            create_rotating_handler(log_file, rotation=rotation, retention=retention)
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)


def setup_logging_from_settings(settings: Settings) -> None:
    """Configure logging from the log_* settings."""
    setup_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )

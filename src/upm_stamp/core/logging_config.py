"""Logging setup for the ``upm_stamp`` logger tree.

Records are tagged with the active request context (correlation ID,
operation, elapsed time). Key/value pairs passed as ``extra={"fields": {...}}``
are rendered by both formatters.

Usage:
    from upm_stamp.core.logging_config import configure_logging, get_logger

    configure_logging(level="DEBUG", format="human")
    logger = get_logger(__name__)
    logger.info("Wrote creator file", extra={"fields": {"path": "tool.toml"}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO, Union

from upm_stamp.core.context import get_current_context

__all__ = [
    "ROOT_LOGGER",
    "ContextFilter",
    "StructuredFormatter",
    "HumanReadableFormatter",
    "configure_logging",
    "get_logger",
]

ROOT_LOGGER = "upm_stamp"


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = getattr(record, "fields", None)
    return dict(fields) if isinstance(fields, dict) else {}


class ContextFilter(logging.Filter):
    """Copy the request context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_current_context()
        record.correlation_id = ctx.correlation_id or "-"
        record.operation = ctx.operation or "-"
        record.elapsed_ms = ctx.elapsed_ms
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per line.

    Example output:
        {"timestamp":"2024-01-15T10:30:45.123+00:00","level":"INFO",
         "logger":"upm_stamp.core.template","message":"Package created: ...",
         "correlation_id":"cli_a1b2c3d4e5f6","operation":"package.create",
         "elapsed_ms":42.5}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", "-"),
            "operation": getattr(record, "operation", "-"),
            "elapsed_ms": getattr(record, "elapsed_ms", 0.0),
        }
        fields = _record_fields(record)
        if fields:
            entry["fields"] = fields
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, separators=(",", ":"), default=str)


class HumanReadableFormatter(logging.Formatter):
    """Readable single-line output.

    Produces:
        2024-01-15 10:30:45 [INFO] [cli_a1b2c3d4e5f6 package.create] core.template: Package created key=value
    """

    def __init__(self, *, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        parts = []
        if self.include_timestamp:
            parts.append(datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S"))
        parts.append(f"[{record.levelname}]")

        context = [
            value
            for value in (getattr(record, "correlation_id", "-"), getattr(record, "operation", "-"))
            if value and value != "-"
        ]
        if context:
            parts.append(f"[{' '.join(context)}]")

        name = record.name
        if name.startswith(f"{ROOT_LOGGER}."):
            name = name[len(ROOT_LOGGER) + 1 :]
        parts.append(f"{name}:")
        parts.append(record.getMessage())
        parts.extend(f"{key}={value}" for key, value in _record_fields(record).items())

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    *,
    level: Union[int, str] = logging.INFO,
    format: str = "structured",  # "structured" or "human"
    stream: Optional[TextIO] = None,
    add_context: bool = True,
) -> logging.Logger:
    """Point the ``upm_stamp`` logger at a single stderr handler.

    Previous handlers are dropped, so repeated calls (one per CLI
    invocation) never duplicate output.

    Args:
        level: Level name or number; unknown names fall back to INFO
        format: "structured" for JSON lines, "human" for readable lines
        stream: Output stream (default: stderr)
        add_context: Tag records with the request context
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        StructuredFormatter() if format == "structured" else HumanReadableFormatter()
    )
    if add_context:
        handler.addFilter(ContextFilter())

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    return root


def get_logger(name: str) -> logging.Logger:
    """A logger below ``upm_stamp``."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")

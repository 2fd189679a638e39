"""Logging setup for the direct upload CLI.

Records go to stderr so stdout stays free for JSON and HTML output.
Context passed through ``extra={...}`` is appended as ``key=value`` pairs,
or nested under ``context`` when ``LOG_JSON`` is set.
"""

import json
import logging
import os
import sys
import time
from typing import Any, Optional, TextIO

PACKAGE_LOGGER = "direct_upload"
TIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Attributes of every LogRecord; anything else came from ``extra``
_STANDARD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

_TRUTHY = ("1", "true", "yes", "on")


class ContextFormatter(logging.Formatter):
    """One line per record with its ``extra`` context, as text or JSON."""

    converter = time.gmtime

    def __init__(self, as_json: bool = False):
        super().__init__(datefmt=TIME_FORMAT)
        self.as_json = as_json

    @staticmethod
    def context(record: logging.LogRecord) -> dict[str, Any]:
        return {
            key: value
            for key, value in sorted(record.__dict__.items())
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, self.datefmt)
        context = self.context(record)

        if self.as_json:
            payload: dict[str, Any] = {
                "timestamp": timestamp,
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            if context:
                payload["context"] = context
            if record.exc_info:
                payload["exception"] = self.formatException(record.exc_info)
            return json.dumps(payload, default=str, separators=(",", ":"))

        line = f"{timestamp} {record.levelname} {record.name} {record.getMessage()}"
        if context:
            line += " " + " ".join(f"{key}={value!r}" for key, value in context.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    level: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Install a single stderr handler on the package logger.

    Args:
        level: Level name, falls back to ``LOG_LEVEL`` then WARNING.
        stream: Stream to write to, defaults to stderr.

    Returns:
        The installed handler.
    """
    level_name = level or os.getenv("LOG_LEVEL", "WARNING")
    resolved_level = getattr(logging, level_name.upper(), logging.WARNING)
    as_json = os.getenv("LOG_JSON", "").strip().lower() in _TRUTHY

    handler = logging.StreamHandler(stream=stream or sys.stderr)
    handler.setFormatter(ContextFormatter(as_json=as_json))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(resolved_level)
    logging.captureWarnings(True)
    return handler

# bce/utils/logging.py
"""Structured logging with JSON format and correlation ID support.

Provides:
- JSON-formatted log output for structured logging
- Request correlation ID via ContextVar, one per bce invocation
- Centralized logger configuration (always stderr: stdout carries
  completion candidates)
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any

# Request correlation ID for tracking one invocation across modules
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"


def set_request_id(request_id: str) -> None:
    """Set the request correlation ID for the current context.

    Args:
        request_id: Unique identifier for the request.
    """
    request_id_var.set(request_id)


def get_request_id() -> str:
    """Get the request correlation ID for the current context.

    Returns:
        Current request ID, or empty string if not set.
    """
    return request_id_var.get()


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs log records as JSON with timestamp, level, logger name,
    message, and optional request_id for correlation.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON-formatted log string.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class RequestIdFilter(logging.Filter):
    """Expose the current request ID to plain-text format strings."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def configure_logging(level: int = logging.WARNING, json_format: bool = False) -> None:
    """Configure logging for the bce command.

    Sets up a single stderr StreamHandler on the root logger, replacing
    handlers installed by a previous call.

    Args:
        level: Logging level (default: logging.WARNING).
        json_format: Emit StructuredFormatter JSON lines instead of text.
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.addFilter(RequestIdFilter())
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    for existing in list(logging.root.handlers):
        if getattr(existing, "_bce_handler", False):
            logging.root.removeHandler(existing)
    handler._bce_handler = True  # type: ignore[attr-defined]

    logging.root.addHandler(handler)
    logging.root.setLevel(level)

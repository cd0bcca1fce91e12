"""JSON logging.

Every record is written to stderr as one JSON object (timestamp, level,
logger, message, request_id when inside a request, and whatever was passed
via ``extra=``), ready for Loki/journald style collectors.
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from typing import Any, cast

from flask import g, has_request_context

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# LogRecord attributes that are not user-supplied extras
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def get_request_id() -> str | None:
    """Request ID of the current Flask request, or of the current context."""
    if has_request_context() and hasattr(g, "request_id"):
        return cast(str | None, g.request_id)
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)
    if has_request_context():
        g.request_id = request_id


class JSONFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value

        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging() -> None:
    """Send all logging through the JSON formatter at Config.LOG_LEVEL."""
    from src.config import Config

    level = getattr(logging, Config.LOG_LEVEL, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # Chatty libraries: HTTP connection pools, push delivery, migrations
    for noisy in ("urllib3", "pywebpush", "yoyo"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_payload_snippet(logger: logging.Logger, payload: Any, max_length: int = 500) -> None:
    """Log the start of an upstream payload at DEBUG (for unexpected shapes)."""
    try:
        text = json.dumps(payload, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        logger.debug("Payload is not JSON serializable")
        return
    if len(text) > max_length:
        text = text[:max_length] + "..."
    logger.debug("Payload snippet", extra={"payload_snippet": text})

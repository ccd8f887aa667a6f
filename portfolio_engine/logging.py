"""
Logging setup for the Portfolio Command Center engine.

Every line carries the ID of the inbound HTTP request that caused it, so an
upstream failure can be matched to the dashboard call that triggered it.
Development gets a readable line format; production gets one JSON object per
line.
"""

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import UTC, datetime

# Bound by the HTTP middleware for the lifetime of one request
current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)

TEXT_FORMAT = "%(timestamp)s | %(levelname)-8s | %(name)s | %(request_prefix)s%(message)s"

# Third-party loggers that would otherwise log every request
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


class RequestIdFilter(logging.Filter):
    """Attach the current request ID and a UTC timestamp to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = current_request_id.get()
        record.request_id = request_id
        record.request_prefix = f"[{request_id}] " if request_id else ""
        record.timestamp = datetime.fromtimestamp(record.created, UTC).isoformat()
        return True


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, with the traceback inlined when present."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": getattr(record, "timestamp", None),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", None),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        level: Logging level name
        json_output: Emit JSON lines instead of the text format

    Returns:
        Configured root logger
    """
    root = logging.getLogger()
    root.handlers.clear()

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(JsonLineFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a module logger (pass __name__)."""
    return logging.getLogger(name)


def bind_request_id(request_id: str) -> Token[str | None]:
    """Bind a request ID for log correlation; returns the token to undo it."""
    return current_request_id.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    """Restore whatever request ID was bound before `bind_request_id`."""
    current_request_id.reset(token)

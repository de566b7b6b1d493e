"""Structured JSON logging for Keygate.

One JSON object per line on stdout. Services attach structured fields with
``extra={"context": {...}}``; they land under the ``context`` key.
"""

import logging
import json
import sys
from datetime import datetime, timezone

NAMESPACE = "keygate"


class JSONFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": NAMESPACE,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            log_entry["context"] = context
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        # Datetimes and enums in context are rendered with str().
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Configure structured logging for the application.

    Safe to call once per app: a second ``create_app`` in the same process
    reuses the existing handler instead of doubling every line.
    """
    root = logging.getLogger(NAMESPACE)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not any(isinstance(h.formatter, JSONFormatter) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger scoped under keygate."""
    return logging.getLogger(f"{NAMESPACE}.{name}")

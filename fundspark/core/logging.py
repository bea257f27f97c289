"""FundSpark — Structured JSON Logging.

One stdout handler lives on the ``fundspark`` package logger; module loggers
from ``get_logger`` are its children and propagate to it. Request and store
code passes context through ``extra=`` (see ``CONTEXT_FIELDS``).
"""

import json
import logging
import sys
from datetime import datetime, timezone

from fundspark.config import settings

ROOT_LOGGER = "fundspark"
CONTEXT_FIELDS = ("endpoint", "entity_id", "user_id", "duration_ms", "status_code")


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _package_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
        root.propagate = False
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return root


def get_logger(name: str) -> logging.Logger:
    """Return ``fundspark.<name>``, wiring the package handler on first use."""
    _package_logger()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")

"""
Structured logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides where those records go. ``setup_logging`` attaches a single JSON-lines
handler to the ``ledger_api`` logger so records from the guard, the executor
and the services share one format.
"""

import json
import logging
from datetime import datetime, timezone

ROOT_LOGGER_NAME = "ledger_api"


class JSONFormatter(logging.Formatter):
    """Render a log record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_path": getattr(record, "request_path", None),
            "reason": getattr(record, "reason", None),
        }

        log_entry = {k: v for k, v in log_entry.items() if v is not None}

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the ``ledger_api`` logger hierarchy.

    Safe to call more than once: existing handlers are replaced rather than
    stacked, so repeated app startups (e.g. in tests) don't duplicate lines.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    return logger

"""Structured Logging — JSON formatter and setup for transfer observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (transfer_id, accounts, amount, outcome, reason) surfaced when present
    - JSON format by default, human-readable text on request

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once by the bootstrap (CLI entry point)
    - Driver loggers (aiosqlite, sqlalchemy.engine, sqlalchemy.pool) stay at WARNING
      unless the ledger runs at DEBUG
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "transfer_id", "from_account", "to_account", "amount", "outcome",
    "reason", "strategy", "error_code", "retryable",
)

DRIVER_LOGGERS = ("aiosqlite", "sqlalchemy.engine", "sqlalchemy.pool")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure root logging. Returns the installed handler."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    root_level = getattr(logging, level.upper(), logging.INFO)
    logging.root.setLevel(root_level)
    driver_level = logging.DEBUG if root_level <= logging.DEBUG else logging.WARNING
    for name in DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(driver_level)
    return handler

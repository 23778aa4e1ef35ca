"""Structured Logging — inventory-aware log formatting for the sync engine and API.

Invariants:
    - Every record carries timestamp, level, logger name and message
    - Inventory extras (facility/department/item ids, delta, pending_count) and API
      extras (error_code, attempt, token usage) are surfaced when set on the record
    - setup_logging is idempotent: re-running it replaces the handler it installed

Design Decisions:
    - Stdlib logging with a JSON formatter for production, key=value text for dev
    - The installed handler is tagged so repeated lifespans (tests) never stack handlers
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_KEYS = (
    "facility_id", "department_id", "item_id", "delta", "pending_count",
    "error_code", "path", "attempt", "input_tokens", "output_tokens",
)

_HANDLER_NAME = "medsync"


def record_extras(record: logging.LogRecord) -> dict:
    """Known extra fields present on record, in EXTRA_KEYS order."""
    extras = {}
    for key in EXTRA_KEYS:
        value = record.__dict__.get(key)
        if value is not None:
            extras[key] = value
    return extras


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_extras(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class KeyValueFormatter(logging.Formatter):
    """Human-readable line with extras appended as key=value pairs."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        if not extras:
            return line
        pairs = " ".join(f"{k}={v}" for k, v in extras.items())
        return f"{line} [{pairs}]"


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the MedSync handler on the root logger."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else KeyValueFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler

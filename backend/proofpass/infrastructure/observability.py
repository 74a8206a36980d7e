"""Structured Logging — JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Context fields (op, email, user_id, event_id, ...) surfaced when passed via extra=
    - No ambient logger context: callers hand their context dict to each log call
    - JSON format in production, human-readable in development
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = (
    "op", "email", "user_id", "event_id", "nullifier", "attendance_id",
    "error_code", "path", "collaborator", "key_id",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def log_context(op: str, **fields: object) -> dict:
    """Build the extra= dict for one operation, dropping unset fields."""
    ctx: dict = {"op": op}
    ctx.update({k: v for k, v in fields.items() if v is not None})
    return ctx


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(op)s - %(message)s",
            defaults={"op": "-"},
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))

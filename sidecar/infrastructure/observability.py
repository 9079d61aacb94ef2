"""Structured Logging — one JSON object per line for the sidecar's log stream.

Invariants:
    - Every line carries ts, level, service, logger, caller and msg
    - ts is when the record was created, not when it was formatted
    - Request-scoped extras (url, error_code, op, user_agent, duration_ms,
      family, table) are copied only when set on the record
    - Tracebacks travel in "stack" so a failure stays a single line

Design Decisions:
    - setup_logging called once on startup from the CLI
    - Handler replaced, not appended: calling setup twice must not double every line
"""

import json
import logging
from datetime import datetime, timezone

SERVICE_NAME = "ctlstore-sidecar"

EXTRA_FIELDS = (
    "url", "error_code", "op", "user_agent", "duration_ms", "family", "table",
)

_HANDLER_NAME = "sidecar"


class JSONFormatter(logging.Formatter):
    """Render a record as a sidecar log line."""

    def __init__(self, service: str = SERVICE_NAME):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, timezone.utc)
        log = {
            "ts": created.isoformat(timespec="milliseconds"),
            "level": record.levelname.lower(),
            "service": self.service,
            "logger": record.name,
            "caller": f"{record.module}:{record.lineno}",
            "msg": record.getMessage(),
        }
        log.update({
            key: getattr(record, key) for key in EXTRA_FIELDS
            if getattr(record, key, None) is not None
        })
        if record.exc_info:
            log["stack"] = self.formatException(record.exc_info)
        return json.dumps(log, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))

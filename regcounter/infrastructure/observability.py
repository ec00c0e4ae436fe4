"""Structured Logging — log records for the registration counter's operators.

Invariants:
    - Every record carries timestamp, level, logger name and message
    - The counting context (date_key, log_file, error_code, admin/event/file counts,
      engine_state) travels as extra fields and survives in BOTH output formats
    - setup_logging is idempotent: running the lifespan again replaces the handler
      it installed instead of duplicating every line

Design Decisions:
    - JSON by default: the daily report is itself a log record (LoggingReportPublisher),
      so per-admin counts must stay machine-readable for whoever collects the logs
    - The text format appends the same extras as key=value, so a developer
      running uvicorn locally still sees which day and file a line is about
"""

import logging
import json
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "date_key", "log_file", "error_code", "admin_count",
    "event_count", "file_count", "engine_state",
)

_HANDLER_MARKER = "_regcounter_handler"


def _extras(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in _EXTRA_FIELDS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update(_extras(record))
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable line with the counting context appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extras(record)
        if not extras:
            return line
        context = " ".join(f"{key}={value}" for key, value in extras.items())
        head, sep, tail = line.partition("\n")
        return f"{head} [{context}]{sep}{tail}"


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Install the regcounter handler on the root logger, replacing a previous one."""
    for existing in list(logging.root.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    setattr(handler, _HANDLER_MARKER, True)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))

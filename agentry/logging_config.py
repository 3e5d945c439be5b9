"""JSON logging for agentry.

Records carry the workflow's correlation id when the caller passes
``extra={"correlation_id": ...}``, so one request can be followed across
the dispatcher, agents and broker.
"""

import json
import logging
import logging.config
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH, LOG_BACKUP_COUNT, LOG_MAX_BYTES

EXTRA_FIELDS = ("correlation_id", "context")


class JSONFormatter(logging.Formatter):
    """Renders each record as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value:
                entry[field] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _build_handlers(log_file: str, console: bool) -> dict:
    handlers: dict = {
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": LOG_MAX_BYTES,
            "backupCount": LOG_BACKUP_COUNT,
            "formatter": "json",
            "encoding": "utf-8",
        },
    }
    if console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        }
    return handlers


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    console: bool = True,
) -> None:
    """Route all loggers through the JSON formatter.

    Args:
        log_level: Root level name; falls back to LOG_LEVEL, then INFO.
        log_file: Rotating log file; falls back to LOG_FILE, then logs/app.log.
        console: Mirror records to stdout.
    """
    level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_file = log_file or os.getenv("LOG_FILE") or str(DEFAULT_LOG_PATH)
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    handlers = _build_handlers(log_file, console)
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"json": {"()": JSONFormatter}},
            "handlers": handlers,
            "root": {"level": level, "handlers": list(handlers)},
        }
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

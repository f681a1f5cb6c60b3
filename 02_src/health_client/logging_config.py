"""Logging for the health assistant client.

Records go to a rotating JSON file under ``04_logs`` and to stdout. The
stdout stream is JSON too unless ``LOG_FORMAT=text``, which is easier to
read while driving the client by hand.
"""

import json
import logging
import logging.config
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Per-request chatter from the HTTP stack
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Transfer kind, entry ids, appointment ids, ...
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        return json.dumps(entry, default=str)


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    console_format: str | None = None,
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
                   Defaults to LOG_LEVEL env var or INFO.
        log_file: Path of the rotating JSON log. Defaults to LOG_FILE env var
                  or 04_logs/app.log.
        console_format: "json" or "text". Defaults to LOG_FORMAT env var or json.
    """
    level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_path = Path(log_file or os.getenv("LOG_FILE") or DEFAULT_LOG_PATH)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    console_format = (console_format or os.getenv("LOG_FORMAT", "json")).lower()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": "health_client.logging_config.JSONFormatter"},
                "text": {"format": TEXT_FORMAT},
            },
            "handlers": {
                "file": {
                    "class": "logging.handlers.RotatingFileHandler",
                    "filename": str(log_path),
                    "maxBytes": 10 * 1024 * 1024,
                    "backupCount": 5,
                    "formatter": "json",
                    "encoding": "utf-8",
                },
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "text" if console_format == "text" else "json",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                name: {"level": "WARNING"} for name in NOISY_LOGGERS
            },
            "root": {"level": level, "handlers": ["file", "console"]},
        }
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

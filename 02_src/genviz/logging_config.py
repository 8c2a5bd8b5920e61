"""Structured logging configuration for GenViz."""

import json
import logging
import logging.config
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import DEFAULT_LOG_PATH


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Channel / viewer identifiers attached through ChannelLogger
        if hasattr(record, "context"):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str)


class ChannelLogger(logging.LoggerAdapter):
    """Logger adapter that tags every record with channel context."""

    def process(self, msg: str, kwargs: Any) -> tuple[str, Any]:
        extra = kwargs.setdefault("extra", {})
        context = dict(self.extra or {})
        context.update(extra.pop("context", {}))
        extra["context"] = context
        return msg, kwargs


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    to_file: bool = True,
) -> None:
    """
    Setup structured logging for the server process.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to LOG_LEVEL env var or INFO.
        log_file: Path to log file. Defaults to 04_logs/app.log.
        to_file: Disable to log to stdout only (e.g. inside a notebook).
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")

    if log_file is None:
        log_file = str(DEFAULT_LOG_PATH)

    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    }
    if to_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "formatter": "json",
            "encoding": "utf-8",
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "genviz.logging_config.JSONFormatter",
            },
        },
        "handlers": handlers,
        "loggers": {
            # uvicorn installs its own handlers; route them through ours
            "uvicorn": {"handlers": [], "propagate": True},
            "uvicorn.access": {"level": "WARNING", "propagate": True},
        },
        "root": {
            "level": log_level.upper(),
            "handlers": list(handlers),
        },
    }

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def get_channel_logger(name: str, channel_id: str) -> ChannelLogger:
    """Get a logger whose records carry ``channel_id`` in their context."""
    return ChannelLogger(logging.getLogger(name), {"channel_id": channel_id})

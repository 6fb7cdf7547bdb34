"""Logging configuration for the engine and its entry points."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.config import dictConfig


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure the root logger.

    Args:
        level: Root log level name
        json_output: Emit one JSON object per line instead of rich console output
    """
    if json_output:
        handler = {
            "class": "logging.StreamHandler",
            "formatter": "json",
        }
    else:
        handler = {
            "()": "rich.logging.RichHandler",
            "show_path": False,
            "rich_tracebacks": True,
        }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "default": handler,
            },
            "root": {
                "handlers": ["default"],
                "level": level.upper(),
            },
        }
    )

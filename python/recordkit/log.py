"""Logging helpers.

The library only ever calls :func:`get_logger`; applications (and the
``recordkit`` CLI) opt into output with :func:`configure_logging`.

Usage:
    from recordkit.log import configure_logging

    configure_logging(level="INFO")
    Cat.all()   # each statement is logged on "recordkit.connection"
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RESERVED = frozenset(vars(logging.makeLogRecord({})))


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and key != "message":
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=repr)


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure root logging for command-line use.

    Args:
        level: Logging level name, e.g. ``"DEBUG"``.
        json_logs: Emit JSON lines instead of the console format.
    """
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json" if json_logs else "console",
                    "level": level,
                }
            },
            "root": {"handlers": ["default"], "level": level},
        }
    )


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["JsonFormatter", "configure_logging", "get_logger"]

"""Logging configuration.

Records are grouped into the ``APP``, ``LLM`` and ``SYSTEM`` categories via a
``log_type`` attribute passed through ``extra``. Production deployments emit
one JSON object per line so log collectors can filter on ``logType``;
everywhere else a human readable console format is used.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .settings import Settings

DEFAULT_LOG_TYPE = "APP"
_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARNING",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}


def _structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        "severity": _SEVERITY.get(record.levelno, record.levelname),
        "logType": getattr(record, "log_type", DEFAULT_LOG_TYPE),
        "message": record.getMessage(),
        "component": getattr(record, "component", None) or record.name,
    }
    metadata = getattr(record, "metadata", None)
    if metadata:
        payload["metadata"] = metadata
    if record.exc_info and record.exc_info[1] is not None:
        exc = record.exc_info[1]
        payload["error"] = {
            "message": str(exc) or exc.__class__.__name__,
            "type": exc.__class__.__name__,
            "stack": logging.Formatter().formatException(record.exc_info),
        }
    return payload


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(_structured_fields(record), default=str)


class ConsoleFormatter(logging.Formatter):
    """Human readable formatter for local development."""

    def format(self, record: logging.LogRecord) -> str:
        fields = _structured_fields(record)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        output = (
            f"{timestamp} {fields['severity']} {fields['logType']} "
            f"[{fields['component']}] {fields['message']}"
        )
        if "metadata" in fields:
            output += f"\n  Metadata: {json.dumps(fields['metadata'], indent=2, default=str)}"
        if "error" in fields:
            output += f"\n  Error: {fields['error']['message']}\n  Stack: {fields['error']['stack']}"
        return output


def build_logging_config(settings: Settings) -> dict[str, Any]:
    formatter = "json" if settings.is_production else "console"
    log_level = settings.log_level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JsonFormatter},
            "console": {"()": ConsoleFormatter},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["stdout"], "level": log_level},
        "loggers": {
            "uvicorn": {"handlers": ["stdout"], "level": "INFO", "propagate": False},
            "uvicorn.error": {"handlers": ["stdout"], "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["stdout"], "level": "INFO", "propagate": False},
        },
    }


def configure_logging(settings: Settings) -> None:
    """Install the application logging configuration."""

    logging.config.dictConfig(build_logging_config(settings))


__all__ = (
    "ConsoleFormatter",
    "JsonFormatter",
    "build_logging_config",
    "configure_logging",
)

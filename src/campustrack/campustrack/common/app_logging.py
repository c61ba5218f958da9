"""JSON logging configuration.

Log records are rendered as single-line JSON objects so they can be shipped to
a log aggregator as-is. Fields passed through ``extra=`` end up under
``extra_context``.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

_JSON_LOG_FIELDS = (
    "ts",
    "level",
    "logger",
    "msg",
    "error_type",
    "error",
    "stack",
    "extra_context",
)


class JSONFormatter(logging.Formatter):
    """Formatter that renders log records as single-line JSON objects."""

    # Attributes populated by logging.LogRecord that we do not want to surface
    _RESERVED = {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "ts": timestamp.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "stack": None,
            "extra_context": None,
        }

        if record.exc_info:
            payload["error_type"] = record.exc_info[0].__name__
            payload["error"] = str(record.exc_info[1])
            payload["stack"] = self.formatException(record.exc_info)
        elif record.stack_info:
            payload["stack"] = record.stack_info

        extra: Dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in self._RESERVED or key in payload or key.startswith("_"):
                continue
            extra[key] = value
        if extra:
            payload["extra_context"] = extra

        for field in _JSON_LOG_FIELDS:
            payload.setdefault(field, None)

        return json.dumps(payload, default=_json_default, separators=(",", ":"))


def _json_default(obj: Any) -> Any:
    """JSON serialiser fallback."""

    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    return str(obj)


_configured = False


def configure_logging(level_name: Optional[str] = None) -> None:
    """Configure root logging with a JSON formatter.

    The handler is installed once; a later call with an explicit level only
    adjusts the root level.
    """

    global _configured
    if _configured:
        if level_name:
            logging.getLogger().setLevel(getattr(logging, level_name.upper(), logging.INFO))
        return

    level_name = (level_name or os.environ.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]
    logging.captureWarnings(True)

    # Werkzeug's access log duplicates what the app logs explicitly.
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger instance using the configured JSON formatter."""

    configure_logging()
    return logging.getLogger(name)


__all__ = ["JSONFormatter", "configure_logging", "get_logger"]

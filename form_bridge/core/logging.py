"""JSON-lines logging for the form bridge service and CLI."""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

CORRELATION_ID_CTX: ContextVar[str] = ContextVar("correlation_id", default="")

# Record attributes copied into the JSON line when set via ``extra=``.
INSPECTION_KEYS = ("target_url", "action", "rendered", "field_count", "missing_roles")
SUBMISSION_KEYS = ("upstream_status",)
REQUEST_KEYS = ("path", "method", "status_code", "error_code")
_EXTRA_KEYS = INSPECTION_KEYS + SUBMISSION_KEYS + REQUEST_KEYS

# Connection-pool loggers never go below WARNING.
_QUIET_LOGGERS = ("urllib3", "urllib3.connectionpool")


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record, correlation id included when known."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = CORRELATION_ID_CTX.get()
        if correlation_id:
            payload["correlation_id"] = correlation_id

        for key in _EXTRA_KEYS:
            value = getattr(record, key, None)
            if value not in (None, ""):
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = "INFO") -> None:
    """Send JSON lines to stdout at ``level``; unknown names fall back to INFO."""
    normalized_level = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(normalized_level)
    root_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(normalized_level, logging.WARNING))


def set_correlation_id(correlation_id: str) -> None:
    CORRELATION_ID_CTX.set(correlation_id)

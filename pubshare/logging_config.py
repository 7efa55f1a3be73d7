from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from pubshare.logging_context import get_request_id

DEFAULT_REDACT_FIELDS = frozenset(
    {
        "password",
        "password_confirm",
        "passwordconfirm",
        "token",
        "auth_token",
        "authorization",
        "cookie",
        "session",
        "csrf_token",
    }
)
REDACTED = "[REDACTED]"

_RESERVED_ATTRS = frozenset(
    {
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
        "message",
        "module",
        "msecs",
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
)
_DROPPED_ATTRS = frozenset({"color_message"})


def parse_redact_fields(raw_value: str) -> frozenset[str]:
    extra = {part.strip().lower() for part in raw_value.split(",") if part.strip()}
    return DEFAULT_REDACT_FIELDS | extra


def _redact(value: Any, redact_fields: frozenset[str]) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in redact_fields else _redact(item, redact_fields)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(item, redact_fields) for item in value]
    return value


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and key not in _DROPPED_ATTRS and not key.startswith("_")
    }


def _utc_timestamp(created: float) -> str:
    return datetime.fromtimestamp(created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%SZ")


class JsonLogFormatter(logging.Formatter):
    def __init__(self, *, redact_fields: frozenset[str] = DEFAULT_REDACT_FIELDS) -> None:
        super().__init__()
        self._redact_fields = redact_fields

    def format(self, record: logging.LogRecord) -> str:
        extras = _record_extras(record)
        payload: dict[str, Any] = {
            "timestamp": _utc_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "event": extras.pop("event", None) or record.getMessage(),
        }
        request_id = get_request_id()
        if request_id:
            payload["request_id"] = request_id
        payload.update(_redact(extras, self._redact_fields))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ConsoleLogFormatter(logging.Formatter):
    def __init__(self, *, redact_fields: frozenset[str] = DEFAULT_REDACT_FIELDS) -> None:
        super().__init__()
        self._redact_fields = redact_fields

    def format(self, record: logging.LogRecord) -> str:
        extras = _redact(_record_extras(record), self._redact_fields)
        extras.pop("event", None)
        fields = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        request_id = get_request_id()
        prefix = f"{_utc_timestamp(record.created)} {record.levelname:<7} {record.name}"
        if request_id:
            prefix = f"{prefix} [{request_id}]"
        line = f"{prefix} {record.getMessage()}"
        if fields:
            line = f"{line} {fields}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    *,
    level: str = "INFO",
    log_format: str = "console",
    redact_fields: frozenset[str] = DEFAULT_REDACT_FIELDS,
    include_uvicorn_access: bool = False,
) -> None:
    handler = logging.StreamHandler(sys.stdout)
    if log_format.strip().lower() == "json":
        handler.setFormatter(JsonLogFormatter(redact_fields=redact_fields))
    else:
        handler.setFormatter(ConsoleLogFormatter(redact_fields=redact_fields))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name in ("uvicorn", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
    access_logger = logging.getLogger("uvicorn.access")
    access_logger.handlers.clear()
    access_logger.propagate = include_uvicorn_access
    access_logger.disabled = not include_uvicorn_access
    logging.getLogger("httpx").setLevel(logging.WARNING)

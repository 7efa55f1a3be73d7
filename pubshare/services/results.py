from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pubshare.remote.errors import RemoteError

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


@dataclass(frozen=True)
class OperationResult:
    success: bool
    data: Any = None
    error: str | None = None
    details: dict[str, str] | None = None

    @classmethod
    def ok(cls, data: Any = None) -> OperationResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, details: dict[str, str] | None = None) -> OperationResult:
        return cls(success=False, error=error, details=details or None)

    @classmethod
    def from_remote_error(cls, exc: RemoteError, *, with_details: bool = False) -> OperationResult:
        details = flatten_details(exc.data) if with_details else None
        return cls.fail(exc.message, details)


def flatten_details(data: Mapping[str, object] | None) -> dict[str, str]:
    if not data:
        return {}
    flattened: dict[str, str] = {}
    for field_name, value in data.items():
        if isinstance(value, Mapping):
            message = value.get("message") or value.get("code") or ""
            flattened[str(field_name)] = str(message)
        else:
            flattened[str(field_name)] = str(value)
    return flattened


def format_error_message(result: OperationResult) -> str:
    message = result.error or UNEXPECTED_ERROR_MESSAGE
    if not result.details:
        return message
    field_errors = ", ".join(f"{field}: {error}" for field, error in result.details.items())
    return f"{message}. Details: {field_errors}"

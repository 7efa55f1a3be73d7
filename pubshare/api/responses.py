from __future__ import annotations

from fastapi import Request


def _meta(request: Request) -> dict[str, object]:
    return {"request_id": getattr(request.state, "request_id", None)}


def success_payload(request: Request, *, data: object) -> dict[str, object]:
    return {"data": data, "meta": _meta(request)}


def error_payload(
    request: Request,
    *,
    code: str,
    message: str,
    details: object | None = None,
) -> dict[str, object]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
        "meta": _meta(request),
    }

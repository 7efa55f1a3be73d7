from __future__ import annotations

import logging
import time
from secrets import token_urlsafe

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from pubshare.auth.session import SESSION_MODEL_KEY
from pubshare.logging_context import set_request_id
from pubshare.remote.errors import RemoteError

REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def session_user_id(request: Request) -> str | None:
    """Id of the signed-in user, read from the session once the app has run."""
    session = request.scope.get("session")
    if not isinstance(session, dict):
        return None
    model = session.get(SESSION_MODEL_KEY)
    if not isinstance(model, dict) or not model.get("id"):
        return None
    return str(model["id"])


def failure_fields(exc: Exception) -> dict[str, object]:
    fields: dict[str, object] = {"error_type": type(exc).__name__}
    if isinstance(exc, RemoteError):
        fields["backend_status"] = exc.status
        fields["backend_message"] = exc.message
    return fields


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id and logs it with the acting user.

    Must sit outside ``SessionMiddleware``: the user id is read from the
    session the inner app leaves in the shared scope.
    """

    def __init__(
        self,
        app,
        *,
        log_requests: bool = True,
        skip_paths: tuple[str, ...] = (),
    ) -> None:
        super().__init__(app)
        self._log_requests = log_requests
        self._skip_paths = tuple(path for path in skip_paths if path)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or token_urlsafe(12)
        request.state.request_id = request_id
        set_request_id(request_id)
        start = time.perf_counter()
        should_log = self._log_requests and not self._is_skipped_path(request.url.path)
        request_fields = {"method": request.method, "path": request.url.path}

        if should_log:
            logger.info("request.started", extra={"event": "request.started", **request_fields})
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "request.failed",
                extra={
                    "event": "request.failed",
                    **request_fields,
                    **failure_fields(exc),
                    "user_id": session_user_id(request),
                    "duration_ms": _elapsed_ms(start),
                },
            )
            raise
        else:
            response.headers[REQUEST_ID_HEADER] = request_id
            if should_log:
                logger.info(
                    "request.completed",
                    extra={
                        "event": "request.completed",
                        **request_fields,
                        "status_code": response.status_code,
                        "user_id": session_user_id(request),
                        "duration_ms": _elapsed_ms(start),
                    },
                )
            return response
        finally:
            set_request_id(None)

    def _is_skipped_path(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self._skip_paths)


def parse_skip_paths(raw_value: str) -> tuple[str, ...]:
    parts = [part.strip() for part in raw_value.split(",")]
    return tuple(part for part in parts if part)

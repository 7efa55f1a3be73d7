from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pubshare.api.responses import error_payload
from pubshare.services.results import UNEXPECTED_ERROR_MESSAGE, OperationResult, format_error_message

logger = logging.getLogger(__name__)


class ApiException(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: object | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details

    @classmethod
    def from_result(cls, result: OperationResult, *, status_code: int, code: str) -> ApiException:
        return cls(
            status_code=status_code,
            code=code,
            message=format_error_message(result),
            details=result.details,
        )


def register_api_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiException)
    async def _handle_api_exception(request: Request, exc: ApiException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(
                request,
                code=exc.code,
                message=exc.message,
                details=exc.details,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=error_payload(
                request,
                code="validation_error",
                message="Request validation failed.",
                details=jsonable_encoder(exc.errors()),
            ),
        )

    @app.exception_handler(Exception)
    async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "api.unexpected_error",
            extra={
                "event": "api.unexpected_error",
                "path": request.url.path,
                "method": request.method,
            },
        )
        return JSONResponse(
            status_code=500,
            content=error_payload(
                request,
                code="unexpected_error",
                message=f"{UNEXPECTED_ERROR_MESSAGE}.",
            ),
        )

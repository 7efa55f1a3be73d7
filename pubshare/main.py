from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from starlette.middleware.sessions import SessionMiddleware

from pubshare.api.errors import register_api_exception_handlers
from pubshare.api.router import router as api_router
from pubshare.http.middleware import RequestLoggingMiddleware, parse_skip_paths
from pubshare.logging_config import configure_logging, parse_redact_fields
from pubshare.remote.session import check_backend, close_http_client
from pubshare.settings import settings

configure_logging(
    level=settings.log_level,
    log_format=settings.log_format,
    redact_fields=parse_redact_fields(settings.log_redact_fields),
    include_uvicorn_access=settings.log_uvicorn_access,
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await close_http_client()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
register_api_exception_handlers(app)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret_key,
    same_site="lax",
    https_only=settings.session_cookie_secure,
)
app.add_middleware(
    RequestLoggingMiddleware,
    log_requests=settings.log_requests,
    skip_paths=parse_skip_paths(settings.log_request_skip_paths),
)
app.include_router(api_router)


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    if await check_backend():
        return {"status": "ok"}
    raise HTTPException(status_code=500, detail="backend unavailable")

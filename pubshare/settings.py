from __future__ import annotations

import os
from dataclasses import dataclass


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str = _env_str("APP_NAME", "pubshare")
    backend_url: str = _env_str("POCKETBASE_URL", "http://127.0.0.1:8090")
    backend_timeout_seconds: float = _env_float("PUBSHARE_BACKEND_TIMEOUT_SECONDS", 10.0)
    feed_page_size: int = _env_int("PUBSHARE_FEED_PAGE_SIZE", 10)
    related_page_size: int = _env_int("PUBSHARE_RELATED_PAGE_SIZE", 50)
    session_secret_key: str = _env_str("SESSION_SECRET_KEY", "dev-only-change-me")
    session_cookie_secure: bool = _env_bool("SESSION_COOKIE_SECURE", False)
    login_rate_limit_attempts: int = _env_int("LOGIN_RATE_LIMIT_ATTEMPTS", 5)
    login_rate_limit_window_seconds: int = _env_int("LOGIN_RATE_LIMIT_WINDOW_SECONDS", 60)
    log_level: str = _env_str("LOG_LEVEL", "INFO")
    log_format: str = _env_str("LOG_FORMAT", "console")
    log_redact_fields: str = _env_str("LOG_REDACT_FIELDS", "")
    log_requests: bool = _env_bool("LOG_REQUESTS", True)
    log_request_skip_paths: str = _env_str("LOG_REQUEST_SKIP_PATHS", "/healthz")
    log_uvicorn_access: bool = _env_bool("LOG_UVICORN_ACCESS", False)


settings = Settings()

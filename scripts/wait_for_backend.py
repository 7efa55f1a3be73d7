import asyncio
import logging
import os

import httpx

from pubshare.logging_config import configure_logging, parse_redact_fields
from pubshare.remote.client import RemoteCollectionClient
from pubshare.settings import settings

configure_logging(
    level=settings.log_level,
    log_format=settings.log_format,
    redact_fields=parse_redact_fields(settings.log_redact_fields),
    include_uvicorn_access=settings.log_uvicorn_access,
)

logger = logging.getLogger(__name__)


async def can_reach(backend_url: str) -> bool:
    async with httpx.AsyncClient(base_url=backend_url, timeout=5.0) as http_client:
        return await RemoteCollectionClient(http_client).health()


async def wait_for_backend() -> int:
    backend_url = settings.backend_url
    if not backend_url:
        logger.error("backend.wait_missing_url", extra={"event": "backend.wait_missing_url"})
        return 1

    timeout_seconds = int(os.getenv("BACKEND_WAIT_TIMEOUT_SECONDS", "60"))
    interval_seconds = int(os.getenv("BACKEND_WAIT_INTERVAL_SECONDS", "2"))
    retries = max(timeout_seconds // max(interval_seconds, 1), 1)

    for attempt in range(1, retries + 1):
        if await can_reach(backend_url):
            logger.info("backend.wait_ready", extra={"event": "backend.wait_ready"})
            return 0
        logger.info(
            "backend.wait_retry",
            extra={
                "event": "backend.wait_retry",
                "attempt": attempt,
                "retries": retries,
            },
        )
        await asyncio.sleep(interval_seconds)

    logger.error(
        "backend.wait_timeout",
        extra={
            "event": "backend.wait_timeout",
            "retries": retries,
        },
    )
    return 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(wait_for_backend()))

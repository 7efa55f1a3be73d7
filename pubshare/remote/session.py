import logging

import httpx

from pubshare.remote.auth_store import AuthStore
from pubshare.remote.client import RemoteCollectionClient
from pubshare.settings import settings

logger = logging.getLogger(__name__)

_http_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            base_url=settings.backend_url,
            timeout=max(float(settings.backend_timeout_seconds), 0.5),
        )
        logger.info(
            "remote.transport_initialized",
            extra={"event": "remote.transport_initialized", "backend_url": settings.backend_url},
        )
    return _http_client


def build_client(auth_store: AuthStore | None = None) -> RemoteCollectionClient:
    return RemoteCollectionClient(get_http_client(), auth_store=auth_store)


async def check_backend() -> bool:
    healthy = await build_client().health()
    if not healthy:
        logger.warning("remote.healthcheck_failed", extra={"event": "remote.healthcheck_failed"})
    return healthy


async def close_http_client() -> None:
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        logger.info("remote.transport_closed", extra={"event": "remote.transport_closed"})
        _http_client = None

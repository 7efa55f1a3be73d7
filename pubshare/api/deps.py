from __future__ import annotations

import logging

from fastapi import Depends, Request

from pubshare.api.errors import ApiException
from pubshare.auth.session import session_auth_store
from pubshare.remote.client import RemoteCollectionClient
from pubshare.remote.session import build_client
from pubshare.services.domains.users import application as user_service

logger = logging.getLogger(__name__)


def get_remote_client(request: Request) -> RemoteCollectionClient:
    return build_client(session_auth_store(request))


async def get_api_current_user(
    client: RemoteCollectionClient = Depends(get_remote_client),
) -> dict:
    auth_store = client.auth_store
    if user_service.is_authenticated(client) and auth_store.model:
        return auth_store.model
    if auth_store.token:
        logger.info(
            "auth.session_expired",
            extra={
                "event": "auth.session_expired",
                "user_id": (auth_store.model or {}).get("id"),
            },
        )
        auth_store.clear()
    raise ApiException(
        status_code=401,
        code="auth_required",
        message="Authentication required.",
    )

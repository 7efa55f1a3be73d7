from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from pubshare.api.deps import get_api_current_user, get_remote_client
from pubshare.api.errors import ApiException
from pubshare.api.responses import error_payload, success_payload
from pubshare.api.schemas import ApiEnvelope, LoginRequest, MessageEnvelope, SignupRequest
from pubshare.auth.deps import get_login_rate_limiter
from pubshare.auth.rate_limit import SlidingWindowRateLimiter
from pubshare.remote.client import RemoteCollectionClient
from pubshare.services.domains.users import application as user_service
from pubshare.services.results import format_error_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["api-auth"])


def login_rate_limit_key(request: Request, email: str) -> str:
    client_host = request.client.host if request.client is not None else "unknown"
    normalized_email = email.strip().lower()
    return f"{client_host}:{normalized_email or '<empty>'}"


@router.post(
    "/login",
    response_model=ApiEnvelope,
)
async def login(
    payload: LoginRequest,
    request: Request,
    client: RemoteCollectionClient = Depends(get_remote_client),
    rate_limiter: SlidingWindowRateLimiter = Depends(get_login_rate_limiter),
):
    limiter_key = login_rate_limit_key(request, payload.email)
    normalized_email = payload.email.strip().lower()
    decision = rate_limiter.check(limiter_key)
    if not decision.allowed:
        logger.warning(
            "auth.login_rate_limited",
            extra={
                "event": "auth.login_rate_limited",
                "email": normalized_email,
                "retry_after_seconds": decision.retry_after_seconds,
            },
        )
        return JSONResponse(
            status_code=429,
            content=error_payload(
                request,
                code="rate_limited",
                message="Too many login attempts. Please try again later.",
            ),
            headers={"Retry-After": str(decision.retry_after_seconds)},
        )

    result = await user_service.login_with_email(client, payload.email, payload.password)
    if not result.success:
        rate_limiter.record_failure(limiter_key)
        logger.info(
            "auth.login_failed",
            extra={"event": "auth.login_failed", "email": normalized_email},
        )
        raise ApiException(
            status_code=401,
            code="invalid_credentials",
            message=format_error_message(result),
            details=result.details,
        )

    rate_limiter.reset(limiter_key)
    user = result.data.record
    logger.info(
        "auth.login_succeeded",
        extra={"event": "auth.login_succeeded", "user_id": user.get("id")},
    )
    return success_payload(request, data={"user": user})


@router.post(
    "/signup",
    response_model=ApiEnvelope,
    status_code=201,
)
async def signup(
    payload: SignupRequest,
    request: Request,
    client: RemoteCollectionClient = Depends(get_remote_client),
):
    user_data = payload.to_record()
    try:
        user_service.validate_signup(user_data)
    except user_service.UserServiceError as exc:
        raise ApiException(
            status_code=400,
            code="invalid_signup",
            message=str(exc),
        ) from exc

    result = await user_service.signup_with_email(client, user_data)
    if not result.success:
        raise ApiException.from_result(result, status_code=400, code="signup_failed")
    return success_payload(request, data={"user": result.data})


@router.post(
    "/logout",
    response_model=MessageEnvelope,
)
async def logout(
    request: Request,
    client: RemoteCollectionClient = Depends(get_remote_client),
):
    current_user = user_service.get_current_user(client)
    user_service.logout(client)
    logger.info(
        "auth.logout",
        extra={
            "event": "auth.logout",
            "user_id": current_user.get("id") if current_user else None,
        },
    )
    return success_payload(request, data={"message": "Signed out."})


@router.get(
    "/me",
    response_model=ApiEnvelope,
)
async def me(
    request: Request,
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    return success_payload(
        request,
        data={
            "user": current_user,
            "avatar_url": user_service.avatar_url(client, current_user),
        },
    )

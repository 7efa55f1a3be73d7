from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile

from pubshare.api.deps import get_api_current_user, get_remote_client
from pubshare.api.errors import ApiException
from pubshare.api.forms import read_upload
from pubshare.api.responses import success_payload
from pubshare.api.schemas import ApiEnvelope, ResearcherType
from pubshare.remote.client import RemoteCollectionClient
from pubshare.services.domains.publications import application as publication_service
from pubshare.services.domains.users import application as user_service
from pubshare.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["api-users"])


def _serialize_user(client: RemoteCollectionClient, record: dict) -> dict[str, object]:
    return {**record, "avatar_url": user_service.avatar_url(client, record)}


@router.get(
    "/{user_id}",
    response_model=ApiEnvelope,
)
async def get_user_profile(
    user_id: str,
    request: Request,
    page: int = Query(default=1, ge=1),
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    user = await user_service.get_user_by_id(client, user_id)
    if not user.success:
        raise ApiException(
            status_code=404,
            code="user_not_found",
            message=user.error or "User not found.",
        )
    publications = await publication_service.get_user_publications(
        client,
        user_id,
        page=page,
        per_page=settings.feed_page_size,
    )
    if not publications.success:
        raise ApiException.from_result(publications, status_code=502, code="publications_unavailable")
    return success_payload(
        request,
        data={
            "user": _serialize_user(client, user.data),
            "publications": publications.data.items,
            "page": page,
            "has_more": publications.data.has_more,
        },
    )


@router.patch(
    "/me",
    response_model=ApiEnvelope,
)
async def update_own_profile(
    request: Request,
    name: Annotated[str, Form()] = "",
    bio: Annotated[str, Form()] = "",
    institution: Annotated[str, Form()] = "",
    department: Annotated[str, Form()] = "",
    company: Annotated[str, Form()] = "",
    position: Annotated[str, Form()] = "",
    website: Annotated[str, Form()] = "",
    orcid_id: Annotated[str, Form()] = "",
    researcher_type: Annotated[ResearcherType | None, Form()] = None,
    is_scientific: Annotated[bool | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    payload = user_service.profile_payload(
        {
            "name": name.strip(),
            "bio": bio,
            "institution": institution.strip(),
            "department": department.strip(),
            "company": company.strip(),
            "position": position.strip(),
            "website": website.strip(),
            "orcid_id": orcid_id.strip(),
            "researcher_type": researcher_type,
            "is_scientific": is_scientific,
        },
        avatar=await read_upload(avatar) if avatar is not None and avatar.filename else None,
    )
    if not len(payload):
        raise ApiException(
            status_code=400,
            code="empty_update",
            message="Nothing to update.",
        )
    result = await user_service.update_user_profile(client, str(current_user["id"]), payload)
    if not result.success:
        raise ApiException.from_result(result, status_code=400, code="profile_update_failed")
    logger.info(
        "api.users.profile_updated",
        extra={
            "event": "api.users.profile_updated",
            "user_id": current_user.get("id"),
            "fields": payload.names(),
        },
    )
    return success_payload(request, data={"user": _serialize_user(client, result.data)})

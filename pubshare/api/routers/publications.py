from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile

from pubshare.api.deps import get_api_current_user, get_remote_client
from pubshare.api.errors import ApiException
from pubshare.api.forms import (
    add_file_drafts,
    parse_co_author_drafts,
    parse_kept_ids,
    read_uploads,
    validate_publication_fields,
)
from pubshare.api.responses import success_payload
from pubshare.api.schemas import (
    ApiEnvelope,
    CommentCreateRequest,
    CommentListEnvelope,
    MessageEnvelope,
    PublicationListEnvelope,
)
from pubshare.remote.client import RemoteCollectionClient
from pubshare.services.domains.coauthors import application as co_author_service
from pubshare.services.domains.comments import application as comment_service
from pubshare.services.domains.files import application as file_service
from pubshare.services.domains.publications import application as publication_service
from pubshare.services.domains.publications import counters as counter_service
from pubshare.services.domains.publications import workflows as workflow_service
from pubshare.services.domains.publications.drafts import PersistedItem
from pubshare.services.domains.publications.reconcile import ReconciliationReport
from pubshare.services.domains.publications.types import PublicationFields
from pubshare.services.results import OperationResult
from pubshare.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/publications", tags=["api-publications"])


def publication_form(
    title: Annotated[str, Form()] = "",
    type: Annotated[str, Form()] = "",
    abstract: Annotated[str, Form()] = "",
    publication_date: Annotated[str, Form()] = "",
    doi: Annotated[str, Form()] = "",
    journal: Annotated[str, Form()] = "",
    conference: Annotated[str, Form()] = "",
    volume: Annotated[str, Form()] = "",
    issue: Annotated[str, Form()] = "",
    pages: Annotated[str, Form()] = "",
    publisher: Annotated[str, Form()] = "",
    keywords: Annotated[str, Form()] = "",
    public: Annotated[bool, Form()] = True,
) -> PublicationFields:
    return validate_publication_fields(
        PublicationFields(
            title=title.strip(),
            type=type.strip(),
            abstract=abstract,
            publication_date=publication_date.strip(),
            doi=doi.strip(),
            journal=journal,
            conference=conference,
            volume=volume.strip(),
            issue=issue.strip(),
            pages=pages.strip(),
            publisher=publisher,
            keywords=keywords,
            public=public,
        )
    )


def _serialize_publication(client: RemoteCollectionClient, record: dict) -> dict[str, object]:
    return {
        **record,
        "preview_image_urls": publication_service.preview_image_urls(client, record),
    }


def _serialize_file(client: RemoteCollectionClient, record: dict) -> dict[str, object]:
    return {**record, "download_url": file_service.download_url(client, record)}


def _serialize_report(report: ReconciliationReport) -> dict[str, object]:
    return {
        "call_count": len(report.outcomes),
        "failures": [
            {
                "action": outcome.action,
                "kind": outcome.kind,
                "record_id": outcome.record_id,
                "error": outcome.result.error,
                "details": outcome.result.details,
            }
            for outcome in report.failures
        ],
    }


def _list_data(client: RemoteCollectionClient, result: OperationResult) -> dict[str, object]:
    page = result.data
    return {
        "items": [_serialize_publication(client, item) for item in page.items],
        "page": page.page,
        "per_page": page.per_page,
        "has_more": page.has_more,
    }


async def _require_publication(client: RemoteCollectionClient, publication_id: str) -> dict:
    result = await publication_service.get_publication_by_id(client, publication_id)
    if not result.success:
        raise ApiException(
            status_code=404,
            code="publication_not_found",
            message=result.error or "Publication not found.",
        )
    return result.data


def _require_owner(publication: dict, current_user: dict) -> None:
    if publication.get("user") != current_user.get("id"):
        raise ApiException(
            status_code=403,
            code="forbidden",
            message="Only the owner can modify this publication.",
        )


@router.get(
    "",
    response_model=PublicationListEnvelope,
)
async def list_publications(
    request: Request,
    page: int = Query(default=1, ge=1),
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    result = await publication_service.get_publications(
        client,
        page=page,
        per_page=settings.feed_page_size,
    )
    if not result.success:
        raise ApiException.from_result(result, status_code=502, code="feed_unavailable")
    return success_payload(request, data=_list_data(client, result))


@router.get(
    "/search",
    response_model=PublicationListEnvelope,
)
async def search_publications(
    request: Request,
    q: str = Query(min_length=1, max_length=200),
    page: int = Query(default=1, ge=1),
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    result = await publication_service.search_publications(
        client,
        q.strip(),
        page=page,
        per_page=settings.feed_page_size,
    )
    if not result.success:
        raise ApiException.from_result(result, status_code=502, code="search_failed")
    return success_payload(request, data=_list_data(client, result))


@router.post(
    "",
    response_model=ApiEnvelope,
    status_code=201,
)
async def create_publication(
    request: Request,
    fields: PublicationFields = Depends(publication_form),
    preview_img: Annotated[list[UploadFile], File()] = [],
    co_authors: Annotated[str, Form()] = "[]",
    files: Annotated[list[UploadFile], File()] = [],
    files_meta: Annotated[str, Form()] = "[]",
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    co_author_drafts = parse_co_author_drafts(co_authors)
    file_drafts = add_file_drafts([], await read_uploads(files), files_meta)
    outcome = await workflow_service.create_publication_workflow(
        client,
        owner_id=str(current_user["id"]),
        fields=fields,
        preview_images=await read_uploads(preview_img),
        co_authors=co_author_drafts,
        files=file_drafts,
    )
    if not outcome.success:
        raise ApiException.from_result(outcome.result, status_code=400, code="publication_create_failed")
    return success_payload(
        request,
        data={
            "publication": _serialize_publication(client, outcome.result.data),
            "publication_id": outcome.publication_id,
            "related": _serialize_report(outcome.report),
        },
    )


@router.get(
    "/{publication_id}",
    response_model=ApiEnvelope,
)
async def get_publication(
    publication_id: str,
    request: Request,
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    publication = await _require_publication(client, publication_id)
    await counter_service.increment_view_count(client, publication_id)
    co_authors = await co_author_service.get_co_authors(
        client,
        publication_id,
        per_page=settings.related_page_size,
    )
    files = await file_service.get_publication_files(
        client,
        publication_id,
        per_page=settings.related_page_size,
    )
    comments = await comment_service.get_comments(
        client,
        publication_id,
        per_page=settings.related_page_size,
    )
    return success_payload(
        request,
        data={
            "publication": _serialize_publication(client, publication),
            "co_authors": co_authors.data.items if co_authors.success else [],
            "files": [_serialize_file(client, item) for item in files.data.items] if files.success else [],
            "comments": comments.data.items if comments.success else [],
            "is_owner": publication.get("user") == current_user.get("id"),
        },
    )


@router.patch(
    "/{publication_id}",
    response_model=ApiEnvelope,
)
async def edit_publication(
    publication_id: str,
    request: Request,
    fields: PublicationFields = Depends(publication_form),
    preview_img: Annotated[list[UploadFile], File()] = [],
    co_authors: Annotated[str | None, Form()] = None,
    existing_files: Annotated[str | None, Form()] = None,
    files: Annotated[list[UploadFile], File()] = [],
    files_meta: Annotated[str, Form()] = "[]",
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    # Omitted co_authors/existing_files keep the stored lists as they are.
    snapshot_result = await workflow_service.load_edit_snapshot(
        client,
        publication_id,
        per_page=settings.related_page_size,
    )
    if not snapshot_result.success:
        raise ApiException(
            status_code=404,
            code="publication_not_found",
            message=snapshot_result.error or "Publication not found.",
        )
    snapshot = snapshot_result.data
    _require_owner(snapshot.publication, current_user)

    if existing_files is None:
        current_files = list(snapshot.files)
    else:
        kept_file_ids = set(parse_kept_ids(existing_files))
        current_files = [
            item
            for item in snapshot.files
            if isinstance(item, PersistedItem) and item.id in kept_file_ids
        ]
    current_files = add_file_drafts(current_files, await read_uploads(files), files_meta)
    current_co_authors = snapshot.co_authors if co_authors is None else parse_co_author_drafts(co_authors)

    outcome = await workflow_service.edit_publication_workflow(
        client,
        publication_id=publication_id,
        fields=fields,
        preview_images=await read_uploads(preview_img),
        original_co_authors=snapshot.co_authors,
        current_co_authors=current_co_authors,
        original_files=snapshot.files,
        current_files=current_files,
    )
    if not outcome.success:
        raise ApiException.from_result(outcome.result, status_code=400, code="publication_update_failed")
    logger.info(
        "api.publications.updated",
        extra={
            "event": "api.publications.updated",
            "user_id": current_user.get("id"),
            "publication_id": publication_id,
            "related_failure_count": len(outcome.report.failures),
        },
    )
    return success_payload(
        request,
        data={
            "publication": _serialize_publication(client, outcome.result.data),
            "publication_id": publication_id,
            "related": _serialize_report(outcome.report),
        },
    )


@router.delete(
    "/{publication_id}",
    response_model=MessageEnvelope,
)
async def delete_publication(
    publication_id: str,
    request: Request,
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    publication = await _require_publication(client, publication_id)
    _require_owner(publication, current_user)
    result = await publication_service.delete_publication(client, publication_id)
    if not result.success:
        raise ApiException.from_result(result, status_code=400, code="publication_delete_failed")
    return success_payload(request, data={"message": "Publication deleted."})


@router.post(
    "/{publication_id}/downloads",
    response_model=ApiEnvelope,
)
async def record_download(
    publication_id: str,
    request: Request,
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    result = await counter_service.increment_download_count(client, publication_id)
    if not result.success:
        raise ApiException.from_result(result, status_code=400, code="download_count_failed")
    return success_payload(request, data=result.data)


@router.get(
    "/{publication_id}/comments",
    response_model=CommentListEnvelope,
)
async def list_comments(
    publication_id: str,
    request: Request,
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    result = await comment_service.get_comments(
        client,
        publication_id,
        per_page=settings.related_page_size,
    )
    if not result.success:
        raise ApiException.from_result(result, status_code=502, code="comments_unavailable")
    return success_payload(request, data={"comments": result.data.items})


@router.post(
    "/{publication_id}/comments",
    response_model=ApiEnvelope,
    status_code=201,
)
async def create_comment(
    publication_id: str,
    payload: CommentCreateRequest,
    request: Request,
    client: RemoteCollectionClient = Depends(get_remote_client),
    current_user: dict = Depends(get_api_current_user),
):
    try:
        result = await comment_service.create_comment(
            client,
            publication_id=publication_id,
            user_id=str(current_user["id"]),
            content=payload.content,
        )
    except comment_service.CommentServiceError as exc:
        raise ApiException(
            status_code=400,
            code="invalid_comment",
            message=str(exc),
        ) from exc
    if not result.success:
        raise ApiException.from_result(result, status_code=400, code="comment_create_failed")
    return success_payload(request, data={"comment": result.data})

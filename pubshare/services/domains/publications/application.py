from __future__ import annotations

import logging

from pubshare.remote.client import RecordData, RemoteCollectionClient
from pubshare.remote.errors import RemoteError
from pubshare.remote.filters import Contains, Equals, all_of, any_of
from pubshare.services.domains.publications.types import (
    FEED_SORT,
    PUBLICATION_EXPAND,
    PUBLICATIONS_COLLECTION,
    PublicationPage,
    has_more_results,
)
from pubshare.services.results import OperationResult

logger = logging.getLogger(__name__)

SEARCH_FIELDS: tuple[str, ...] = ("title", "abstract", "keywords")
PUBLIC_ONLY = Equals("public", True)


def search_filter(query: str):
    return all_of(
        any_of(*(Contains(field, query) for field in SEARCH_FIELDS)),
        PUBLIC_ONLY,
    )


async def _list_page(
    client: RemoteCollectionClient,
    *,
    page: int,
    per_page: int,
    filter,
) -> OperationResult:
    try:
        records = await client.list(
            PUBLICATIONS_COLLECTION,
            page=page,
            per_page=per_page,
            expand=PUBLICATION_EXPAND,
            sort=FEED_SORT,
            filter=filter,
        )
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc)
    return OperationResult.ok(
        PublicationPage(
            items=records.items,
            page=page,
            per_page=per_page,
            has_more=has_more_results(records.items, per_page),
        )
    )


async def get_publications(
    client: RemoteCollectionClient,
    *,
    page: int = 1,
    per_page: int = 20,
) -> OperationResult:
    return await _list_page(client, page=page, per_page=per_page, filter=PUBLIC_ONLY)


async def search_publications(
    client: RemoteCollectionClient,
    query: str,
    *,
    page: int = 1,
    per_page: int = 20,
) -> OperationResult:
    return await _list_page(client, page=page, per_page=per_page, filter=search_filter(query))


async def get_user_publications(
    client: RemoteCollectionClient,
    user_id: str,
    *,
    page: int = 1,
    per_page: int = 20,
) -> OperationResult:
    return await _list_page(client, page=page, per_page=per_page, filter=Equals("user", user_id))


async def get_publication_by_id(client: RemoteCollectionClient, publication_id: str) -> OperationResult:
    try:
        record = await client.get(PUBLICATIONS_COLLECTION, publication_id, expand=PUBLICATION_EXPAND)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc)
    return OperationResult.ok(record)


async def create_publication(client: RemoteCollectionClient, data: RecordData) -> OperationResult:
    try:
        record = await client.create(PUBLICATIONS_COLLECTION, data)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc, with_details=True)
    return OperationResult.ok(record)


async def update_publication(
    client: RemoteCollectionClient,
    publication_id: str,
    data: RecordData,
) -> OperationResult:
    try:
        record = await client.update(PUBLICATIONS_COLLECTION, publication_id, data)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc, with_details=True)
    return OperationResult.ok(record)


async def delete_publication(client: RemoteCollectionClient, publication_id: str) -> OperationResult:
    try:
        await client.delete(PUBLICATIONS_COLLECTION, publication_id)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc)
    logger.info(
        "publications.deleted",
        extra={"event": "publications.deleted", "publication_id": publication_id},
    )
    return OperationResult.ok()


def image_url(client: RemoteCollectionClient, record: dict, filename: str) -> str:
    return client.file_url(record, filename)


def preview_image_urls(client: RemoteCollectionClient, record: dict) -> list[str]:
    images = record.get("preview_img") or []
    if isinstance(images, str):
        images = [images]
    return [client.file_url(record, name) for name in images if name]

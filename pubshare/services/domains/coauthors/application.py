from __future__ import annotations

from pubshare.remote.client import RecordData, RemoteCollectionClient
from pubshare.remote.errors import RemoteError
from pubshare.remote.filters import Equals
from pubshare.services.results import OperationResult

CO_AUTHORS_COLLECTION = "co_authors"
RELATED_PAGE_SIZE = 50


async def create_co_author(client: RemoteCollectionClient, data: RecordData) -> OperationResult:
    try:
        record = await client.create(CO_AUTHORS_COLLECTION, data)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc, with_details=True)
    return OperationResult.ok(record)


async def get_co_authors(
    client: RemoteCollectionClient,
    publication_id: str,
    *,
    per_page: int = RELATED_PAGE_SIZE,
) -> OperationResult:
    try:
        records = await client.list(
            CO_AUTHORS_COLLECTION,
            page=1,
            per_page=per_page,
            expand="user",
            sort="order",
            filter=Equals("publication", publication_id),
        )
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc)
    return OperationResult.ok(records)


async def delete_co_author(client: RemoteCollectionClient, co_author_id: str) -> OperationResult:
    try:
        await client.delete(CO_AUTHORS_COLLECTION, co_author_id)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc)
    return OperationResult.ok()

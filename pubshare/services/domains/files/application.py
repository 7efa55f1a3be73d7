from __future__ import annotations

from pubshare.remote.client import RecordData, RemoteCollectionClient
from pubshare.remote.errors import RemoteError
from pubshare.remote.filters import Equals
from pubshare.services.results import OperationResult

PUBLICATION_FILES_COLLECTION = "publication_files"
RELATED_PAGE_SIZE = 50


async def create_publication_file(client: RemoteCollectionClient, data: RecordData) -> OperationResult:
    try:
        record = await client.create(PUBLICATION_FILES_COLLECTION, data)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc, with_details=True)
    return OperationResult.ok(record)


async def get_publication_files(
    client: RemoteCollectionClient,
    publication_id: str,
    *,
    per_page: int = RELATED_PAGE_SIZE,
) -> OperationResult:
    try:
        records = await client.list(
            PUBLICATION_FILES_COLLECTION,
            page=1,
            per_page=per_page,
            sort="created",
            filter=Equals("publication", publication_id),
        )
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc)
    return OperationResult.ok(records)


async def delete_publication_file(client: RemoteCollectionClient, file_id: str) -> OperationResult:
    try:
        await client.delete(PUBLICATION_FILES_COLLECTION, file_id)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc)
    return OperationResult.ok()


def download_url(client: RemoteCollectionClient, record: dict) -> str:
    return client.file_url(record, str(record.get("file") or ""))

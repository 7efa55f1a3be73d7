from __future__ import annotations

from pubshare.remote.client import RemoteCollectionClient
from pubshare.remote.errors import RemoteError
from pubshare.remote.filters import Equals
from pubshare.services.results import OperationResult

COMMENTS_COLLECTION = "comments"
RELATED_PAGE_SIZE = 50


class CommentServiceError(ValueError):
    """Raised for comment input that never reaches the backend."""


def normalize_content(value: str) -> str:
    content = value.strip()
    if not content:
        raise CommentServiceError("Comment cannot be empty.")
    return content


async def get_comments(
    client: RemoteCollectionClient,
    publication_id: str,
    *,
    per_page: int = RELATED_PAGE_SIZE,
) -> OperationResult:
    try:
        records = await client.list(
            COMMENTS_COLLECTION,
            page=1,
            per_page=per_page,
            expand="user",
            sort="created",
            filter=Equals("publication", publication_id),
        )
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc)
    return OperationResult.ok(records)


async def create_comment(
    client: RemoteCollectionClient,
    *,
    publication_id: str,
    user_id: str,
    content: str,
) -> OperationResult:
    data = {
        "publication": publication_id,
        "user": user_id,
        "content": normalize_content(content),
    }
    try:
        record = await client.create(COMMENTS_COLLECTION, data)
    except RemoteError as exc:
        return OperationResult.from_remote_error(exc, with_details=True)
    return OperationResult.ok(record)

"""View and download counters.

Both increments are read-modify-write against the backend: two callers that
read the same value both write ``value + 1`` and one increment is lost. The
backend offers no atomic increment through this client, so the race is
accepted.
"""

from __future__ import annotations

import logging

from pubshare.remote.client import RemoteCollectionClient
from pubshare.remote.errors import RemoteError
from pubshare.services.domains.publications.types import (
    DOWNLOADS_COUNT,
    PUBLICATIONS_COLLECTION,
    VIEWS_COUNT,
)
from pubshare.services.results import OperationResult

logger = logging.getLogger(__name__)


def _current_count(record: dict, counter_field: str) -> int:
    try:
        return int(record.get(counter_field) or 0)
    except (TypeError, ValueError):
        return 0


async def _increment(
    client: RemoteCollectionClient,
    publication_id: str,
    counter_field: str,
) -> OperationResult:
    try:
        record = await client.get(PUBLICATIONS_COLLECTION, publication_id)
        new_count = _current_count(record, counter_field) + 1
        await client.update(PUBLICATIONS_COLLECTION, publication_id, {counter_field: new_count})
    except RemoteError as exc:
        logger.info(
            "publications.counter_increment_failed",
            extra={
                "event": "publications.counter_increment_failed",
                "publication_id": publication_id,
                "counter": counter_field,
                "status_code": exc.status,
            },
        )
        return OperationResult.from_remote_error(exc)
    return OperationResult.ok({counter_field: new_count})


async def increment_view_count(client: RemoteCollectionClient, publication_id: str) -> OperationResult:
    return await _increment(client, publication_id, VIEWS_COUNT)


async def increment_download_count(client: RemoteCollectionClient, publication_id: str) -> OperationResult:
    return await _increment(client, publication_id, DOWNLOADS_COUNT)

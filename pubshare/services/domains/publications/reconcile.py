"""Converge a publication's remote co-authors and files to the local draft.

Only creates and deletes are issued. Every call is awaited before the next
one starts, a failed call never stops the ones after it, and nothing is rolled
back. Each call's outcome is recorded in a ``ReconciliationReport``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from pubshare.remote.client import RemoteCollectionClient
from pubshare.services.domains.coauthors import application as co_author_service
from pubshare.services.domains.files import application as file_service
from pubshare.services.domains.publications.drafts import (
    CoAuthorFields,
    DraftItem,
    FileFields,
    co_author_payload,
    file_payload,
    new_items,
    persisted_ids,
)
from pubshare.services.results import OperationResult

logger = logging.getLogger(__name__)

ACTION_CREATE = "create"
ACTION_DELETE = "delete"
KIND_CO_AUTHOR = "co_author"
KIND_FILE = "file"


@dataclass(frozen=True)
class ItemOutcome:
    action: str
    kind: str
    record_id: str | None
    result: OperationResult


@dataclass
class ReconciliationReport:
    outcomes: list[ItemOutcome] = field(default_factory=list)

    def record(self, outcome: ItemOutcome) -> None:
        self.outcomes.append(outcome)
        event = f"publications.reconcile.{outcome.kind}_{outcome.action}"
        logger.info(
            event,
            extra={
                "event": event,
                "record_id": outcome.record_id,
                "success": outcome.result.success,
                "error": outcome.result.error,
            },
        )

    @property
    def failures(self) -> list[ItemOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.result.success]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def count(self, *, action: str, kind: str) -> int:
        return sum(
            1
            for outcome in self.outcomes
            if outcome.action == action and outcome.kind == kind and outcome.result.success
        )


def removed_ids(original: Sequence[DraftItem], current: Sequence[DraftItem]) -> list[str]:
    current_ids = set(persisted_ids(current))
    return [record_id for record_id in persisted_ids(original) if record_id not in current_ids]


async def create_co_authors(
    client: RemoteCollectionClient,
    *,
    publication_id: str,
    drafts: Sequence[CoAuthorFields],
    report: ReconciliationReport,
) -> None:
    for fields in drafts:
        result = await co_author_service.create_co_author(
            client,
            co_author_payload(fields, publication_id),
        )
        created_id = result.data.get("id") if result.success and isinstance(result.data, dict) else None
        report.record(ItemOutcome(ACTION_CREATE, KIND_CO_AUTHOR, created_id, result))


async def create_files(
    client: RemoteCollectionClient,
    *,
    publication_id: str,
    drafts: Sequence[FileFields],
    report: ReconciliationReport,
) -> None:
    for fields in drafts:
        if fields.upload is None:
            logger.info(
                "publications.reconcile.file_skipped_without_upload",
                extra={
                    "event": "publications.reconcile.file_skipped_without_upload",
                    "publication_id": publication_id,
                },
            )
            continue
        result = await file_service.create_publication_file(
            client,
            file_payload(fields, publication_id),
        )
        created_id = result.data.get("id") if result.success and isinstance(result.data, dict) else None
        report.record(ItemOutcome(ACTION_CREATE, KIND_FILE, created_id, result))


async def reconcile_co_authors(
    client: RemoteCollectionClient,
    *,
    publication_id: str,
    original: Sequence[DraftItem],
    current: Sequence[DraftItem],
    report: ReconciliationReport,
) -> None:
    for record_id in removed_ids(original, current):
        result = await co_author_service.delete_co_author(client, record_id)
        report.record(ItemOutcome(ACTION_DELETE, KIND_CO_AUTHOR, record_id, result))
    await create_co_authors(
        client,
        publication_id=publication_id,
        drafts=[item.fields for item in new_items(current)],
        report=report,
    )


async def reconcile_files(
    client: RemoteCollectionClient,
    *,
    publication_id: str,
    original: Sequence[DraftItem],
    current: Sequence[DraftItem],
    report: ReconciliationReport,
) -> None:
    for record_id in removed_ids(original, current):
        result = await file_service.delete_publication_file(client, record_id)
        report.record(ItemOutcome(ACTION_DELETE, KIND_FILE, record_id, result))
    await create_files(
        client,
        publication_id=publication_id,
        drafts=[item.fields for item in new_items(current)],
        report=report,
    )


async def reconcile_publication(
    client: RemoteCollectionClient,
    *,
    publication_id: str,
    original_co_authors: Sequence[DraftItem],
    current_co_authors: Sequence[DraftItem],
    original_files: Sequence[DraftItem],
    current_files: Sequence[DraftItem],
) -> ReconciliationReport:
    report = ReconciliationReport()
    await reconcile_co_authors(
        client,
        publication_id=publication_id,
        original=original_co_authors,
        current=current_co_authors,
        report=report,
    )
    await reconcile_files(
        client,
        publication_id=publication_id,
        original=original_files,
        current=current_files,
        report=report,
    )
    logger.info(
        "publications.reconcile.completed",
        extra={
            "event": "publications.reconcile.completed",
            "publication_id": publication_id,
            "call_count": len(report.outcomes),
            "failure_count": len(report.failures),
        },
    )
    return report

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from pubshare.remote.client import RemoteCollectionClient
from pubshare.remote.payload import FileUpload
from pubshare.services.domains.coauthors import application as co_author_service
from pubshare.services.domains.files import application as file_service
from pubshare.services.domains.publications import application as publication_service
from pubshare.services.domains.publications.drafts import (
    DraftItem,
    co_author_drafts_from_records,
    file_drafts_from_records,
    publication_payload,
)
from pubshare.services.domains.publications.reconcile import (
    ReconciliationReport,
    create_co_authors,
    create_files,
    reconcile_publication,
)
from pubshare.services.domains.publications.types import COUNTER_FIELDS, PublicationFields
from pubshare.services.results import OperationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowOutcome:
    result: OperationResult
    publication_id: str | None = None
    report: ReconciliationReport = field(default_factory=ReconciliationReport)

    @property
    def success(self) -> bool:
        return self.result.success


@dataclass(frozen=True)
class EditSnapshot:
    publication: dict
    co_authors: list[DraftItem]
    files: list[DraftItem]


async def create_publication_workflow(
    client: RemoteCollectionClient,
    *,
    owner_id: str,
    fields: PublicationFields,
    preview_images: Sequence[FileUpload] = (),
    co_authors: Sequence[DraftItem] = (),
    files: Sequence[DraftItem] = (),
) -> WorkflowOutcome:
    payload = publication_payload(fields, preview_images)
    payload.append("user", owner_id)
    for counter_field in COUNTER_FIELDS:
        payload.append(counter_field, 0)

    result = await publication_service.create_publication(client, payload)
    if not result.success:
        logger.info(
            "publications.create_failed",
            extra={"event": "publications.create_failed", "user_id": owner_id, "error": result.error},
        )
        return WorkflowOutcome(result=result)

    publication_id = str(result.data["id"])
    report = ReconciliationReport()
    await create_co_authors(
        client,
        publication_id=publication_id,
        drafts=[item.fields for item in co_authors],
        report=report,
    )
    await create_files(
        client,
        publication_id=publication_id,
        drafts=[item.fields for item in files],
        report=report,
    )
    logger.info(
        "publications.created",
        extra={
            "event": "publications.created",
            "user_id": owner_id,
            "publication_id": publication_id,
            "related_failure_count": len(report.failures),
        },
    )
    return WorkflowOutcome(result=result, publication_id=publication_id, report=report)


async def load_edit_snapshot(
    client: RemoteCollectionClient,
    publication_id: str,
    *,
    per_page: int = co_author_service.RELATED_PAGE_SIZE,
) -> OperationResult:
    publication = await publication_service.get_publication_by_id(client, publication_id)
    if not publication.success:
        return publication
    co_authors = await co_author_service.get_co_authors(client, publication_id, per_page=per_page)
    if not co_authors.success:
        return co_authors
    files = await file_service.get_publication_files(client, publication_id, per_page=per_page)
    if not files.success:
        return files
    return OperationResult.ok(
        EditSnapshot(
            publication=publication.data,
            co_authors=co_author_drafts_from_records(co_authors.data.items),
            files=file_drafts_from_records(files.data.items),
        )
    )


async def edit_publication_workflow(
    client: RemoteCollectionClient,
    *,
    publication_id: str,
    fields: PublicationFields,
    preview_images: Sequence[FileUpload] = (),
    original_co_authors: Sequence[DraftItem] = (),
    current_co_authors: Sequence[DraftItem] = (),
    original_files: Sequence[DraftItem] = (),
    current_files: Sequence[DraftItem] = (),
) -> WorkflowOutcome:
    result = await publication_service.update_publication(
        client,
        publication_id,
        publication_payload(fields, preview_images),
    )
    if not result.success:
        logger.info(
            "publications.update_failed",
            extra={
                "event": "publications.update_failed",
                "publication_id": publication_id,
                "error": result.error,
            },
        )
        return WorkflowOutcome(result=result, publication_id=publication_id)

    report = await reconcile_publication(
        client,
        publication_id=publication_id,
        original_co_authors=original_co_authors,
        current_co_authors=current_co_authors,
        original_files=original_files,
        current_files=current_files,
    )
    return WorkflowOutcome(result=result, publication_id=publication_id, report=report)

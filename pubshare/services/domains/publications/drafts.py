"""Local draft state for a publication being authored or edited.

Co-author and file drafts are either ``NewItem`` (never sent to the backend)
or ``PersistedItem`` (carries the backend record id). Field edits on a
``PersistedItem`` stay local; only the variant decides what the
reconciliation workflow does with an item.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Generic, TypeVar

from pubshare.remote.payload import FileUpload, FormPayload
from pubshare.services.domains.publications.types import PublicationFields

FILE_TYPES: tuple[str, ...] = ("Main file", "supplementary material", "dataset")
FILE_VISIBILITIES: tuple[str, ...] = ("Public", "private", "both")
DEFAULT_FILE_TYPE = "Main file"
DEFAULT_FILE_VISIBILITY = "Public"
DEFAULT_FILE_VERSION = "1.0"

FieldsT = TypeVar("FieldsT")


@dataclass(frozen=True)
class CoAuthorFields:
    name: str
    email: str = ""
    institution: str = ""
    order: int | None = None
    is_corresponding: bool = False


@dataclass(frozen=True)
class FileFields:
    file_type: str = DEFAULT_FILE_TYPE
    visibility: str = DEFAULT_FILE_VISIBILITY
    version: str = DEFAULT_FILE_VERSION
    description: str = ""
    upload: FileUpload | None = None
    filename: str | None = None


@dataclass(frozen=True)
class NewItem(Generic[FieldsT]):
    fields: FieldsT


@dataclass(frozen=True)
class PersistedItem(Generic[FieldsT]):
    id: str
    fields: FieldsT


DraftItem = NewItem | PersistedItem


def persisted_ids(drafts: Sequence[DraftItem]) -> list[str]:
    return [item.id for item in drafts if isinstance(item, PersistedItem)]


def new_items(drafts: Sequence[DraftItem]) -> list[NewItem]:
    return [item for item in drafts if isinstance(item, NewItem)]


def add_co_author(drafts: Sequence[DraftItem], fields: CoAuthorFields) -> list[DraftItem]:
    if not fields.name.strip():
        return list(drafts)
    return [*drafts, NewItem(replace(fields, order=len(drafts) + 1))]


def add_file(
    drafts: Sequence[DraftItem],
    upload: FileUpload | None,
    *,
    file_type: str = DEFAULT_FILE_TYPE,
    visibility: str = DEFAULT_FILE_VISIBILITY,
    version: str = DEFAULT_FILE_VERSION,
    description: str = "",
) -> list[DraftItem]:
    if upload is None:
        return list(drafts)
    fields = FileFields(
        file_type=file_type,
        visibility=visibility,
        version=version,
        description=description,
        upload=upload,
        filename=upload.filename,
    )
    return [*drafts, NewItem(fields)]


def remove_draft(drafts: Sequence[DraftItem], index: int) -> list[DraftItem]:
    return [item for position, item in enumerate(drafts) if position != index]


def update_draft(drafts: Sequence[DraftItem], index: int, **changes: object) -> list[DraftItem]:
    updated: list[DraftItem] = []
    for position, item in enumerate(drafts):
        if position == index:
            item = replace(item, fields=replace(item.fields, **changes))
        updated.append(item)
    return updated


def _optional_int(value: object) -> int | None:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def co_author_drafts_from_records(records: Sequence[dict]) -> list[DraftItem]:
    return [
        PersistedItem(
            id=str(record["id"]),
            fields=CoAuthorFields(
                name=str(record.get("name") or ""),
                email=str(record.get("email") or ""),
                institution=str(record.get("institution") or ""),
                order=_optional_int(record.get("order")),
                is_corresponding=bool(record.get("is_corresponding")),
            ),
        )
        for record in records
        if record.get("id")
    ]


def file_drafts_from_records(records: Sequence[dict]) -> list[DraftItem]:
    return [
        PersistedItem(
            id=str(record["id"]),
            fields=FileFields(
                file_type=str(record.get("file_type") or DEFAULT_FILE_TYPE),
                visibility=str(record.get("visibility") or DEFAULT_FILE_VISIBILITY),
                version=str(record.get("version") or DEFAULT_FILE_VERSION),
                description=str(record.get("description") or ""),
                filename=record.get("file") or None,
            ),
        )
        for record in records
        if record.get("id")
    ]


def publication_payload(
    fields: PublicationFields,
    preview_images: Sequence[FileUpload] = (),
) -> FormPayload:
    payload = FormPayload()
    for name, value in fields.non_empty_items():
        payload.append(name, value)
    for image in preview_images:
        payload.append("preview_img", image)
    return payload


def co_author_payload(fields: CoAuthorFields, publication_id: str) -> dict[str, object]:
    payload: dict[str, object] = {
        "name": fields.name,
        "email": fields.email,
        "institution": fields.institution,
        "is_corresponding": fields.is_corresponding,
        "publication": publication_id,
    }
    if fields.order is not None:
        payload["order"] = fields.order
    return payload


def file_payload(fields: FileFields, publication_id: str) -> FormPayload:
    payload = FormPayload()
    payload.append("publication", publication_id)
    if fields.upload is not None:
        payload.append("file", fields.upload)
    payload.append("file_type", fields.file_type)
    payload.append("visibility", fields.visibility)
    payload.append("version", fields.version)
    payload.append("description", fields.description)
    return payload

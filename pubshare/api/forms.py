"""Multipart form parsing for the publication create and edit endpoints."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import UploadFile
from pydantic import TypeAdapter, ValidationError

from pubshare.api.errors import ApiException
from pubshare.api.schemas import CoAuthorDraftIn, FileMetaIn
from pubshare.remote.payload import FileUpload
from pubshare.services.domains.publications.drafts import (
    CoAuthorFields,
    DraftItem,
    PersistedItem,
    add_co_author,
    add_file,
)
from pubshare.services.domains.publications.types import PUBLICATION_TYPES, PublicationFields

_co_authors_adapter = TypeAdapter(list[CoAuthorDraftIn])
_file_meta_adapter = TypeAdapter(list[FileMetaIn])
_id_list_adapter = TypeAdapter(list[str])


def _invalid_form(field: str, exc: ValidationError) -> ApiException:
    errors = exc.errors()
    reason = str(errors[0].get("msg", "invalid")) if errors else "invalid"
    return ApiException(
        status_code=422,
        code="invalid_form",
        message=f"Invalid {field} payload.",
        details={field: reason},
    )


def validate_publication_fields(fields: PublicationFields) -> PublicationFields:
    if not fields.title.strip():
        raise ApiException(
            status_code=422,
            code="invalid_form",
            message="Title is required.",
            details={"title": "Title is required."},
        )
    if fields.type and fields.type not in PUBLICATION_TYPES:
        raise ApiException(
            status_code=422,
            code="invalid_form",
            message="Unknown publication type.",
            details={"type": f"Must be one of: {', '.join(PUBLICATION_TYPES)}"},
        )
    return fields


async def read_upload(upload: UploadFile) -> FileUpload:
    content = await upload.read()
    return FileUpload(
        filename=upload.filename or "upload",
        content=content,
        content_type=upload.content_type or "application/octet-stream",
    )


async def read_uploads(uploads: Sequence[UploadFile]) -> list[FileUpload]:
    return [await read_upload(upload) for upload in uploads if upload.filename]


def parse_co_author_drafts(raw_value: str) -> list[DraftItem]:
    try:
        entries = _co_authors_adapter.validate_json(raw_value or "[]")
    except ValidationError as exc:
        raise _invalid_form("co_authors", exc) from exc
    drafts: list[DraftItem] = []
    for position, entry in enumerate(entries, start=1):
        name = entry.name.strip()
        if not name:
            raise ApiException(
                status_code=422,
                code="invalid_form",
                message="Invalid co_authors payload.",
                details={"co_authors": f"Co-author {position} needs a name."},
            )
        fields = CoAuthorFields(
            name=name,
            email=entry.email.strip(),
            institution=entry.institution.strip(),
            order=entry.order if entry.order is not None else position,
            is_corresponding=entry.is_corresponding,
        )
        if entry.id:
            drafts.append(PersistedItem(entry.id, fields))
        else:
            drafts = add_co_author(drafts, fields)
    return drafts


def parse_kept_ids(raw_value: str) -> list[str]:
    try:
        return _id_list_adapter.validate_json(raw_value or "[]")
    except ValidationError as exc:
        raise _invalid_form("existing_files", exc) from exc


def add_file_drafts(
    drafts: Sequence[DraftItem],
    uploads: Sequence[FileUpload],
    raw_meta: str,
) -> list[DraftItem]:
    """Append one new file draft per upload, paired by index with ``files_meta``."""
    try:
        metas = _file_meta_adapter.validate_json(raw_meta or "[]")
    except ValidationError as exc:
        raise _invalid_form("files_meta", exc) from exc
    updated = list(drafts)
    for index, upload in enumerate(uploads):
        meta = metas[index] if index < len(metas) else FileMetaIn()
        updated = add_file(
            updated,
            upload,
            file_type=meta.file_type,
            visibility=meta.visibility,
            version=meta.version,
            description=meta.description,
        )
    return updated

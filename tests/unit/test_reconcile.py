from __future__ import annotations

import pytest

from pubshare.remote.payload import FileUpload
from pubshare.services.domains.publications.drafts import (
    CoAuthorFields,
    FileFields,
    NewItem,
    PersistedItem,
    co_author_drafts_from_records,
    file_drafts_from_records,
    update_draft,
)
from pubshare.services.domains.publications.reconcile import (
    ACTION_CREATE,
    ACTION_DELETE,
    KIND_CO_AUTHOR,
    KIND_FILE,
    reconcile_publication,
    removed_ids,
)
from tests.unit.helpers import InMemoryCollectionClient


def _seed_co_authors(client: InMemoryCollectionClient, publication_id: str, names: list[str]) -> list[dict]:
    return [
        client.seed(
            "co_authors",
            {"id": str(position), "publication": publication_id, "name": name, "order": position},
        )
        for position, name in enumerate(names, start=1)
    ]


@pytest.mark.asyncio
async def test_removed_co_author_is_deleted_new_one_created_and_untouched_one_ignored() -> None:
    client = InMemoryCollectionClient()
    records = _seed_co_authors(client, "X", ["A", "B"])
    original = co_author_drafts_from_records(records)
    current = [original[0], NewItem(CoAuthorFields(name="C"))]

    report = await reconcile_publication(
        client,
        publication_id="X",
        original_co_authors=original,
        current_co_authors=current,
        original_files=[],
        current_files=[],
    )

    mutations = client.mutation_calls()
    assert mutations == [
        ("delete", "co_authors", "2", None),
        (
            "create",
            "co_authors",
            None,
            {"name": "C", "email": "", "institution": "", "is_corresponding": False, "publication": "X"},
        ),
    ]
    assert not any(call[2] == "1" for call in client.calls)
    assert report.succeeded
    assert report.count(action=ACTION_DELETE, kind=KIND_CO_AUTHOR) == 1
    assert report.count(action=ACTION_CREATE, kind=KIND_CO_AUTHOR) == 1
    assert sorted(record["name"] for record in client.records["co_authors"].values()) == ["A", "C"]


@pytest.mark.asyncio
async def test_local_edits_to_persisted_items_produce_no_remote_calls() -> None:
    client = InMemoryCollectionClient()
    original = co_author_drafts_from_records(_seed_co_authors(client, "X", ["A", "B"]))
    edited = update_draft(original, 1, name="B. Renamed", institution="CERN")

    report = await reconcile_publication(
        client,
        publication_id="X",
        original_co_authors=original,
        current_co_authors=edited,
        original_files=[],
        current_files=[],
    )

    assert isinstance(edited[1], PersistedItem)
    assert client.calls == []
    assert report.outcomes == []
    assert client.records["co_authors"]["2"]["name"] == "B"


@pytest.mark.asyncio
async def test_failed_delete_does_not_stop_remaining_work() -> None:
    client = InMemoryCollectionClient()
    original = co_author_drafts_from_records(_seed_co_authors(client, "X", ["A", "B", "C"]))
    client.fail_on("delete", "co_authors", "1", message="Record is locked.")
    file_record = client.seed("publication_files", {"id": "f1", "publication": "X", "file": "old.pdf"})

    report = await reconcile_publication(
        client,
        publication_id="X",
        original_co_authors=original,
        current_co_authors=[NewItem(CoAuthorFields(name="D", order=1))],
        original_files=file_drafts_from_records([file_record]),
        current_files=[],
    )

    deleted = [call[2] for call in client.mutation_calls() if call[0] == "delete"]
    assert deleted == ["1", "2", "3", "f1"]
    assert len(report.failures) == 1
    failure = report.failures[0]
    assert (failure.action, failure.kind, failure.record_id) == (ACTION_DELETE, KIND_CO_AUTHOR, "1")
    assert failure.result.error == "Record is locked."
    assert report.count(action=ACTION_CREATE, kind=KIND_CO_AUTHOR) == 1
    assert report.count(action=ACTION_DELETE, kind=KIND_FILE) == 1


@pytest.mark.asyncio
async def test_new_files_are_uploaded_with_parent_and_metadata() -> None:
    client = InMemoryCollectionClient()
    upload = FileUpload("dataset.csv", b"a,b\n1,2\n", "text/csv")
    current_files = [
        NewItem(
            FileFields(
                file_type="dataset",
                visibility="both",
                version="2.1",
                description="Raw measurements",
                upload=upload,
                filename=upload.filename,
            )
        ),
        NewItem(FileFields(description="no upload attached")),
    ]

    report = await reconcile_publication(
        client,
        publication_id="pub9",
        original_co_authors=[],
        current_co_authors=[],
        original_files=[],
        current_files=current_files,
    )

    assert client.mutation_calls() == [
        (
            "create",
            "publication_files",
            None,
            {
                "publication": "pub9",
                "file": "dataset.csv",
                "file_type": "dataset",
                "visibility": "both",
                "version": "2.1",
                "description": "Raw measurements",
            },
        )
    ]
    assert report.count(action=ACTION_CREATE, kind=KIND_FILE) == 1


def test_removed_ids_only_lists_persisted_ids_missing_from_current() -> None:
    original = [PersistedItem("1", CoAuthorFields(name="A")), PersistedItem("2", CoAuthorFields(name="B"))]
    current = [NewItem(CoAuthorFields(name="B")), PersistedItem("1", CoAuthorFields(name="A"))]

    assert removed_ids(original, current) == ["2"]

from __future__ import annotations

import pytest

from pubshare.services.domains.comments.application import CommentServiceError, create_comment, get_comments
from pubshare.services.domains.publications import application as publications
from pubshare.services.domains.publications.types import PublicationFields
from pubshare.services.results import OperationResult, flatten_details, format_error_message
from tests.unit.helpers import InMemoryCollectionClient


def _seed_library(client: InMemoryCollectionClient) -> None:
    client.seed(
        "publications",
        {"id": "p1", "title": "Neural Rendering", "abstract": "", "keywords": "graphics", "public": True, "user": "u1"},
    )
    client.seed(
        "publications",
        {"id": "p2", "title": "Private neural notes", "abstract": "", "keywords": "", "public": False, "user": "u1"},
    )
    client.seed(
        "publications",
        {"id": "p3", "title": "Soil Chemistry", "abstract": "Field samples", "keywords": "soil", "public": True, "user": "u2"},
    )


@pytest.mark.asyncio
async def test_search_returns_only_public_matches() -> None:
    client = InMemoryCollectionClient()
    _seed_library(client)

    result = await publications.search_publications(client, "neural", per_page=10)

    assert result.success
    assert [item["id"] for item in result.data.items] == ["p1"]
    assert result.data.has_more is False
    list_call = client.calls[-1]
    assert list_call[3]["filter"].render() == (
        "(title ~ 'neural' || abstract ~ 'neural' || keywords ~ 'neural') && public = true"
    )


@pytest.mark.asyncio
async def test_feed_lists_public_publications_newest_first() -> None:
    client = InMemoryCollectionClient()
    _seed_library(client)

    result = await publications.get_publications(client, page=1, per_page=2)

    assert [item["id"] for item in result.data.items] == ["p3", "p1"]
    assert result.data.has_more is True
    assert client.calls[-1][3]["sort"] == "-created"


@pytest.mark.asyncio
async def test_user_publications_include_private_records() -> None:
    client = InMemoryCollectionClient()
    _seed_library(client)

    result = await publications.get_user_publications(client, "u1", per_page=10)

    assert sorted(item["id"] for item in result.data.items) == ["p1", "p2"]


@pytest.mark.asyncio
async def test_create_failure_carries_field_details() -> None:
    client = InMemoryCollectionClient()
    client.fail_on(
        "create",
        "publications",
        message="Failed to create record",
        data={
            "title": {"code": "validation_required", "message": "Missing required value."},
            "type": {"code": "validation_invalid_value", "message": "Invalid value."},
        },
    )

    result = await publications.create_publication(client, {"title": ""})

    assert result.details == {"title": "Missing required value.", "type": "Invalid value."}
    assert format_error_message(result) == (
        "Failed to create record. Details: title: Missing required value., type: Invalid value."
    )


@pytest.mark.asyncio
async def test_read_failures_have_no_details() -> None:
    client = InMemoryCollectionClient()
    client.fail_on("get", "publications", message="Not found.", status=404, data={"id": {"message": "x"}})

    result = await publications.get_publication_by_id(client, "p404")

    assert result == OperationResult(success=False, error="Not found.")


@pytest.mark.asyncio
async def test_delete_publication_removes_record() -> None:
    client = InMemoryCollectionClient()
    _seed_library(client)

    result = await publications.delete_publication(client, "p2")

    assert result.success
    assert "p2" not in client.records["publications"]


def test_preview_image_urls_point_at_record_files() -> None:
    client = InMemoryCollectionClient()
    record = {"id": "p1", "collectionName": "publications", "preview_img": ["a.png", "", "b.png"]}

    assert publications.preview_image_urls(client, record) == [
        "http://backend.test/api/files/publications/p1/a.png",
        "http://backend.test/api/files/publications/p1/b.png",
    ]


def test_error_message_falls_back_when_missing() -> None:
    assert format_error_message(OperationResult.fail("")) == "An unexpected error occurred"
    assert flatten_details({"email": "taken"}) == {"email": "taken"}
    assert flatten_details(None) == {}


def test_publication_fields_round_trip_from_record() -> None:
    fields = PublicationFields.from_record({"title": "T", "type": "Thesis", "public": False, "doi": None})

    assert fields.title == "T"
    assert fields.public is False
    assert ("public", False) in fields.non_empty_items()
    assert all(name != "doi" for name, _value in fields.non_empty_items())


@pytest.mark.asyncio
async def test_comments_are_created_with_trimmed_content() -> None:
    client = InMemoryCollectionClient()

    created = await create_comment(client, publication_id="p1", user_id="u1", content="  Great work!  ")
    listed = await get_comments(client, "p1")

    assert created.success
    assert [item["content"] for item in listed.data.items] == ["Great work!"]
    with pytest.raises(CommentServiceError):
        await create_comment(client, publication_id="p1", user_id="u1", content="   ")


def test_image_url_uses_record_collection() -> None:
    client = InMemoryCollectionClient()

    assert publications.image_url(client, {"id": "p1", "collectionName": "publications"}, "fig.png") == (
        "http://backend.test/api/files/publications/p1/fig.png"
    )
    assert publications.image_url(client, {"id": "p1"}, "") == ""

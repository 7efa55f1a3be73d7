from __future__ import annotations

import pytest

from pubshare.services.domains.publications import application as publications
from pubshare.services.domains.publications.feed import FeedPager
from pubshare.services.domains.publications.types import PublicationPage, has_more_results
from pubshare.services.results import OperationResult
from tests.unit.helpers import InMemoryCollectionClient


def _seed_public(client: InMemoryCollectionClient, count: int) -> None:
    for index in range(count):
        client.seed("publications", {"id": f"p{index:02d}", "title": f"Paper {index}", "public": True})


@pytest.mark.asyncio
async def test_load_more_appends_second_page_after_full_first_page() -> None:
    client = InMemoryCollectionClient()
    _seed_public(client, 14)
    pager = FeedPager(lambda page, per_page: publications.get_publications(client, page=page, per_page=per_page))

    await pager.load()
    assert len(pager.items) == 10
    assert pager.has_more

    await pager.load_more()

    assert pager.page == 2
    assert len(pager.items) == 14
    assert len({item["id"] for item in pager.items}) == 14
    assert pager.has_more is False
    assert pager.loading is False


@pytest.mark.asyncio
async def test_reloading_first_page_replaces_items() -> None:
    client = InMemoryCollectionClient()
    _seed_public(client, 12)
    pager = FeedPager(lambda page, per_page: publications.get_publications(client, page=page, per_page=per_page))

    await pager.load()
    await pager.load_more()
    await pager.reset()

    assert pager.page == 1
    assert len(pager.items) == 10


@pytest.mark.asyncio
async def test_failed_page_keeps_existing_items_and_reports_error() -> None:
    pages = {
        1: OperationResult.ok(PublicationPage(items=[{"id": "a"}, {"id": "b"}], page=1, per_page=2, has_more=True)),
        2: OperationResult.fail("Something went wrong while processing your request."),
    }

    async def loader(page: int, per_page: int) -> OperationResult:
        return pages[page]

    pager = FeedPager(loader, per_page=2)
    await pager.load()
    result = await pager.load_more()

    assert not result.success
    assert pager.error == "Something went wrong while processing your request."
    assert [item["id"] for item in pager.items] == ["a", "b"]
    assert pager.page == 1
    assert pager.has_more


def test_has_more_only_for_full_pages() -> None:
    assert has_more_results([1] * 10, 10)
    assert not has_more_results([1] * 9, 10)
    assert not has_more_results([], 10)

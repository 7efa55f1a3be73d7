from __future__ import annotations

from collections.abc import Awaitable, Callable

from pubshare.services.results import OperationResult

PageLoader = Callable[[int, int], Awaitable[OperationResult]]


class FeedPager:
    """Paging state for a "load more" publication listing.

    Page 1 replaces the items, later pages append. ``has_more`` turns false
    as soon as a page comes back shorter than ``per_page``.
    """

    def __init__(self, loader: PageLoader, *, per_page: int = 10) -> None:
        self._loader = loader
        self.per_page = per_page
        self.page = 1
        self.items: list[dict] = []
        self.has_more = True
        self.loading = False
        self.error: str | None = None

    async def load(self, page: int = 1) -> OperationResult:
        self.loading = True
        try:
            result = await self._loader(page, self.per_page)
        finally:
            self.loading = False
        if not result.success:
            self.error = result.error
            return result
        self.error = None
        self.page = page
        page_items = list(result.data.items)
        if page == 1:
            self.items = page_items
        else:
            self.items = [*self.items, *page_items]
        self.has_more = result.data.has_more
        return result

    async def load_more(self) -> OperationResult:
        return await self.load(self.page + 1)

    async def reset(self) -> OperationResult:
        self.items = []
        self.has_more = True
        return await self.load(1)

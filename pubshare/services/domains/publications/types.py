from __future__ import annotations

from dataclasses import dataclass, fields

PUBLICATIONS_COLLECTION = "publications"
PUBLICATION_EXPAND = "user,co_authors_list,co_authors_list.user"
FEED_SORT = "-created"

PUBLICATION_TYPES: tuple[str, ...] = (
    "Article",
    "Book",
    "Chapter",
    "Code",
    "Conference Paper",
    "Cover Page",
    "Data",
    "Experiment Findings",
    "Method",
    "Negative Results",
    "Patent",
    "Poster",
    "Preprint",
    "Presentation",
    "Raw Data",
    "Research Proposal",
    "Technical Report",
    "Thesis",
)

VIEWS_COUNT = "views_count"
DOWNLOADS_COUNT = "downloads_count"
CITATIONS_COUNT = "citations_count"
COUNTER_FIELDS: tuple[str, ...] = (VIEWS_COUNT, DOWNLOADS_COUNT, CITATIONS_COUNT)


@dataclass(frozen=True)
class PublicationFields:
    title: str = ""
    type: str = ""
    abstract: str = ""
    publication_date: str = ""
    doi: str = ""
    journal: str = ""
    conference: str = ""
    volume: str = ""
    issue: str = ""
    pages: str = ""
    publisher: str = ""
    keywords: str = ""
    public: bool = True

    def non_empty_items(self) -> list[tuple[str, object]]:
        items: list[tuple[str, object]] = []
        for field in fields(self):
            value = getattr(self, field.name)
            if value is None or value == "":
                continue
            items.append((field.name, value))
        return items

    @classmethod
    def from_record(cls, record: dict) -> PublicationFields:
        values: dict[str, object] = {}
        for field in fields(cls):
            raw = record.get(field.name)
            if field.name == "public":
                values["public"] = bool(raw)
            elif raw is not None:
                values[field.name] = str(raw)
        return cls(**values)


@dataclass(frozen=True)
class PublicationPage:
    items: list[dict]
    page: int
    per_page: int
    has_more: bool


def has_more_results(items: list, per_page: int) -> bool:
    # A full page means there may be more; a short or empty page is the end.
    return per_page > 0 and len(items) == per_page

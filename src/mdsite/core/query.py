"""Read-only queries over a built document collection: taxonomy filters, paging, search, related"""

import math
from typing import Iterable, Optional

from markupsafe import Markup
from pydantic import BaseModel

from mdsite.core.models import Document, TaxonomyKind
from mdsite.core.paginate import OLDEST, sort_by_modified
from mdsite.crud.cache import CacheStore


TAG_WEIGHT = 2
CATEGORY_WEIGHT = 3


class PaginatedResult(BaseModel):
    documents: list[Document]
    current_page: int
    total_pages: int
    total_count: int
    page_size: int


def _unique_terms(documents: Iterable[Document], kind: TaxonomyKind) -> list[str]:
    return list(dict.fromkeys(t for d in documents for t in d.terms(kind)))


def searchable_text(doc: Document) -> str:
    """Title, description and markup-free content, lowercased."""
    content = Markup(doc.rendered_content).striptags() if doc.rendered_content else doc.body
    return f"{doc.title} {doc.description} {content}".lower()


class QueryEngine:
    """Queries over a fixed document snapshot. Nothing here mutates the collection or the cache."""

    def __init__(self, documents: Iterable[Document]):
        self.documents: list[Document] = list(documents)

    @classmethod
    def from_cache(cls, store: CacheStore, key: str) -> "QueryEngine":
        """Load the snapshot stored under key by the last build; missing/expired -> empty."""
        raw = store.get(key, default=[]) or []
        return cls(Document.model_validate(item) for item in raw)

    def by_tag(self, tag: str) -> list[Document]:
        return [d for d in self.documents if tag in d.tags]

    def by_category(self, category: str) -> list[Document]:
        return [d for d in self.documents if category in d.categories]

    def all_tags(self) -> list[str]:
        return _unique_terms(self.documents, TaxonomyKind.tags)

    def all_categories(self) -> list[str]:
        return _unique_terms(self.documents, TaxonomyKind.categories)

    def paginate(self, page_size: int = 12, page: int = 1) -> PaginatedResult:
        """Newest-first slice for page; out-of-range pages are empty, not errors."""
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        ordered = sort_by_modified(self.documents)
        start = (page - 1) * page_size
        return PaginatedResult(
            documents=ordered[start:start + page_size] if page >= 1 else [],
            current_page=page,
            total_pages=math.ceil(len(ordered) / page_size),
            total_count=len(ordered),
            page_size=page_size,
        )

    def search(self, query: str) -> list[Document]:
        """Case-insensitive substring match; no tokenization or ranking."""
        needle = query.lower()
        return [d for d in self.documents if needle in searchable_text(d)]

    def score(self, source: Document, other: Document) -> int:
        """2 points per shared tag, 3 per shared category."""
        tags, categories = other.tags, other.categories
        return (
            TAG_WEIGHT * sum(1 for t in source.tags if t in tags)
            + CATEGORY_WEIGHT * sum(1 for c in source.categories if c in categories)
        )

    def related_to(self, document: Document, limit: int = 5) -> list[Document]:
        """Highest-scoring other documents, newer first on ties; zero scores are dropped."""
        scored = [
            (self.score(document, other), other)
            for other in self.documents
            if other.url_key != document.url_key
        ]
        scored = [(s, d) for s, d in scored if s > 0]
        scored.sort(key=lambda sd: (sd[0], sd[1].modified or OLDEST), reverse=True)
        return [d for _, d in scored[:limit]]

    def find(self, url: str) -> Optional[Document]:
        """Document whose generated or absolute URL equals url."""
        return next(
            (d for d in self.documents if url in (d.generated_url, d.absolute_url)),
            None,
        )

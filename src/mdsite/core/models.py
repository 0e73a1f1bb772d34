"""Document, page and taxonomy models shared by the build pipeline and query engine"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from mdsite.core.utils.dates import parse_date


class TaxonomyKind(str, Enum):
    """Supported taxonomy schemes; the value is the front-matter key they index."""
    tags = "tags"
    categories = "categories"


class Document(BaseModel):
    """One source file: front-matter fields, raw body and (after a build) rendered output."""
    model_config = ConfigDict(frozen=True)

    source_path: str                        # relative POSIX path from the source root
    fields: dict[str, Any] = Field(default_factory=dict)
    body: str = ""
    rendered_content: Optional[str] = None  # None until the markdown renderer has run
    generated_url: Optional[str] = None     # relative, trailing slash
    absolute_url: Optional[str] = None

    @property
    def title(self) -> str:
        return str(self.fields.get("title") or "")

    @property
    def description(self) -> str:
        return str(self.fields.get("description") or "")

    def terms(self, kind: TaxonomyKind | str) -> list[str]:
        """Non-empty string terms listed under kind; non-list values yield []."""
        values = self.fields.get(TaxonomyKind(kind).value)
        if not isinstance(values, list):
            return []
        return [str(v) for v in values if v is not None and str(v) != ""]

    @property
    def tags(self) -> list[str]:
        return self.terms(TaxonomyKind.tags)

    @property
    def categories(self) -> list[str]:
        return self.terms(TaxonomyKind.categories)

    @property
    def modified(self) -> datetime | None:
        return parse_date(self.fields.get("modified"))

    @property
    def published(self) -> datetime | None:
        return parse_date(self.fields.get("published"))

    @property
    def url_key(self) -> str:
        """Identity used to match a document across snapshots."""
        return self.absolute_url or self.generated_url or self.source_path


class Page(BaseModel):
    """One chunk of a paginated listing."""
    documents: list[Document]
    current_page: int
    total_pages: int
    base_url: str
    url: str


class TermSummary(BaseModel):
    """A taxonomy term as shown on an overview page."""
    name: str
    slug: str
    count: int
    url: str

"""Chunking of listing pages"""

import math
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Iterable

from mdsite.core.models import Document, Page


OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def sort_by_modified(documents: Iterable[Document]) -> list[Document]:
    """Newest `modified` first; stable, undated documents last."""
    return sorted(documents, key=lambda d: d.modified or OLDEST, reverse=True)


def under_directory(document: Document, directory: str) -> bool:
    """True when the document's source file lives in directory or below it ('' is the root)."""
    directory = directory.strip('/')
    if not directory:
        return True
    parents = PurePosixPath(document.source_path).parent.parts
    return parents[:len(PurePosixPath(directory).parts)] == PurePosixPath(directory).parts


def page_url(base_url: str, number: int) -> str:
    """Page 1 lives at base_url, page n at base_url + 'n/'."""
    return base_url if number == 1 else f"{base_url}{number}/"


def paginate(
    documents: Iterable[Document],
    page_size: int,
    directory: str = '',
    base_url: str = '',
    ) -> list[Page]:
    """Filter to directory, sort newest first and split into pages of at most page_size.

    Always returns at least one page; an empty listing is a single empty page.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    selected = sort_by_modified(d for d in documents if under_directory(d, directory))
    total = max(1, math.ceil(len(selected) / page_size))
    return [
        Page(
            documents=selected[(n - 1) * page_size:n * page_size],
            current_page=n,
            total_pages=total,
            base_url=base_url,
            url=page_url(base_url, n),
        )
        for n in range(1, total + 1)
    ]

"""Output URL resolution for source files and duplicate-URL detection"""

from collections import Counter
from pathlib import PurePosixPath
from typing import Any, Iterable

from mdsite.core.models import Document
from mdsite.core.parse import LIST_INDEX_STEM
from mdsite.core.utils.slug import slugify


SLUG_SOURCES = ('filename', 'frontmatter')


def _directory_prefix(path: PurePosixPath) -> str:
    """'blog/a/post.md' -> 'blog/a/'; root-level files -> ''."""
    parent = path.parent.as_posix()
    return '' if parent == '.' else f"{parent}/"


def list_url(path: str) -> str:
    """URL of a listing page: the directory containing its index file."""
    return _directory_prefix(PurePosixPath(path))


def resolve_url(path: str, fields: dict[str, Any], slug_source: str = 'filename') -> str:
    """Return the relative output URL (trailing slash) for a source file.

    With slug_source='frontmatter' a non-empty `slug` field is sanitized and placed
    under the file's directory. Otherwise the filename minus its extension is used
    verbatim. Index files map to their containing directory.
    """
    p = PurePosixPath(path)
    prefix = _directory_prefix(p)
    if slug_source == 'frontmatter':
        raw = fields.get('slug')
        slug = slugify(raw) if isinstance(raw, str) else ''
        if slug:
            return f"{prefix}{slug}/"
    if p.stem == LIST_INDEX_STEM:
        return prefix
    return f"{prefix}{p.stem}/"


def detect_conflicts(documents: Iterable[Document]) -> dict[str, int]:
    """Return {url: count} for generated URLs shared by more than one document."""
    counts = Counter(d.generated_url for d in documents)
    return {url: n for url, n in counts.items() if n > 1}

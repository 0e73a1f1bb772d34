"""Tag/category indexing and archive/overview page generation"""

import logging
from typing import Any, Callable, Iterable

from mdsite.config import TaxonomySettings
from mdsite.core.models import Document, TaxonomyKind, TermSummary
from mdsite.core.paginate import sort_by_modified
from mdsite.core.render import TemplateRenderer
from mdsite.core.utils.slug import slugify
from mdsite.core.utils.urls import make_absolute


logger = logging.getLogger(__name__)

# (url, template_id, page fields, extra template variables) -> None
PageRenderer = Callable[[str, str, dict[str, Any], dict[str, Any]], None]


def build_index(kind: TaxonomyKind | str, documents: Iterable[Document]) -> dict[str, list[Document]]:
    """Map each term to the documents listing it; terms in first-seen order, exact match."""
    index: dict[str, list[Document]] = {}
    for doc in documents:
        for term in doc.terms(kind):
            index.setdefault(term, []).append(doc)
    return index


def term_url(route_prefix: str, term: str) -> str:
    return f"{route_prefix.strip('/')}/{slugify(term)}/"


def summarize_terms(index: dict[str, list[Document]], route_prefix: str) -> list[TermSummary]:
    """Terms with document counts, most-used first (ties keep first-seen order)."""
    summaries = [
        TermSummary(name=term, slug=slugify(term), count=len(docs), url=term_url(route_prefix, term))
        for term, docs in index.items()
    ]
    return sorted(summaries, key=lambda s: s.count, reverse=True)


def alphabetical(summaries: list[TermSummary]) -> list[TermSummary]:
    return sorted(summaries, key=lambda s: s.name.lower())


def generate_taxonomy(
    kind: TaxonomyKind,
    documents: list[Document],
    config: TaxonomySettings,
    fallback_template: str,
    templates: TemplateRenderer,
    render_page: PageRenderer,
    base_url: str,
    site_name: str,
    ) -> list[str]:
    """Render one archive page per term plus the kind's overview page. Returns written URLs.

    A kind without terms writes nothing.
    """
    index = build_index(kind, documents)
    if not index:
        logger.info("- %s: no terms, skipping", kind.value)
        return []

    prefix = config.route_prefix.strip('/')
    label = kind.value.capitalize()
    logger.info("- %s: %d terms found", kind.value, len(index))

    archive_template = templates.resolve(
        [config.archive_template, fallback_template], f"{kind.value} archive")
    written = []
    seen: dict[str, str] = {}
    for term, docs in index.items():
        if not slugify(term):
            logger.warning("Skipping %s term %r: it has no URL-safe characters", kind.value, term)
            continue
        url = term_url(prefix, term)
        if url in seen:
            logger.warning("%s terms %r and %r share the archive %s; the later one overwrites it",
                           label, seen[url], term, url)
        seen[url] = term
        absolute = make_absolute(url, base_url)
        fields = {
            'title': f"{label}: {term}",
            'description': f"Articles tagged with {term}",
            'canonical': absolute,
        }
        render_page(url, archive_template, fields, {
            'content': '',
            'articles': sort_by_modified(docs),
            'taxonomy_type': kind.value,
            'taxonomy_term': term,
            'base_url': absolute,
            'total_pages': 1,
            'current_page': 1,
        })
        written.append(url)

    overview_template = templates.resolve(
        [config.overview_template, config.archive_template, fallback_template], f"{kind.value} overview")
    url = f"{prefix}/"
    summaries = [s for s in summarize_terms(index, prefix) if s.slug]
    fields = {
        'title': f"{label} - {site_name}",
        'description': f"Browse all {kind.value} and explore articles by topic.",
        'canonical': make_absolute(url, base_url),
    }
    render_page(url, overview_template, fields, {
        'content': '',
        'taxonomy_type': kind.value,
        'taxonomy_data': summaries,
        'taxonomy_alphabetical': alphabetical(summaries),
        'total_terms': len(summaries),
    })
    written.append(url)
    logger.info("Generated overview page: %s", url)
    return written

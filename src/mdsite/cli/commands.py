"""CLI command implementations"""

from typing import Annotated, Optional

import typer

from mdsite.config import Settings, load_config
from mdsite.core.models import Document, TaxonomyKind
from mdsite.core.pipeline import BuildError, run_build
from mdsite.core.query import QueryEngine
from mdsite.crud.cache import CacheStore
from mdsite.crud.database import init_db, make_engine, reset_db


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _engine(settings: Settings) -> QueryEngine:
    """QueryEngine over the snapshot cached by the last build."""
    if not settings.cache_key:
        _fail("No cache_key configured; set it in config.yaml or MDSITE_CACHE_KEY and rebuild.")
    engine = make_engine(settings.db_url)
    init_db(engine)
    return QueryEngine.from_cache(CacheStore(engine), settings.cache_key)


def _echo_docs(docs: list[Document]) -> None:
    for doc in docs:
        typer.echo(f"  {doc.generated_url}  {doc.title}")


def build_cmd(
    source_path: Annotated[Optional[str], typer.Argument(help="Source directory; defaults to source_path in config")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    base_url: Annotated[Optional[str], typer.Option("--base-url", help="Absolute site URL")] = None,
    slug_source: Annotated[Optional[str], typer.Option("--slug-source", help="filename or frontmatter")] = None,
    cache_key: Annotated[Optional[str], typer.Option("--cache-key", help="Cache the built documents under this key")] = None,
    ):
    """Build the site: release embargoes, convert articles, lists and taxonomy archives."""
    settings = _settings(overrides={
        "source_path": source_path, "output_dir": out, "base_url": base_url,
        "slug_source": slug_source, "cache_key": cache_key,
    })
    try:
        result = run_build(settings)
    except BuildError as e:
        _fail("Build failed", e)

    if result.released:
        typer.echo(f"Released {result.released} embargoed file(s)")
    for url, count in result.conflicts.items():
        typer.echo(f"  WARNING: URL '{url}' is used by {count} articles", err=True)
    typer.echo(
        f"Build completed - "
        f"{len(result.documents)} article(s), "
        f"{result.pages_written} page(s) written to {settings.output_dir}/"
    )


def list_cmd(
    page: Annotated[int, typer.Option("--page", help="1-based page number")] = 1,
    per_page: Annotated[int, typer.Option("--per-page", help="Documents per page")] = 12,
    ):
    """List cached documents, newest first, one page at a time."""
    settings = _settings()
    try:
        result = _engine(settings).paginate(per_page, page)
    except ValueError as e:
        _fail(str(e))
    _echo_docs(result.documents)
    typer.echo(f"Page {result.current_page} of {result.total_pages} ({result.total_count} total)")


def search_cmd(
    query: Annotated[str, typer.Argument(help="Case-insensitive text to look for")],
    ):
    """Search cached documents by title, description and content."""
    docs = _engine(_settings()).search(query)
    _echo_docs(docs)
    typer.echo(f"{len(docs)} match(es)")


def terms_cmd(
    kind: Annotated[TaxonomyKind, typer.Argument(help="tags or categories")] = TaxonomyKind.tags,
    ):
    """List every tag or category with its document count."""
    engine = _engine(_settings())
    if kind == TaxonomyKind.tags:
        terms, lookup = engine.all_tags(), engine.by_tag
    else:
        terms, lookup = engine.all_categories(), engine.by_category
    if not terms:
        typer.echo(f"No {kind.value} found.")
        raise typer.Exit(1)
    for term in terms:
        typer.echo(f"{term} ({len(lookup(term))})")


def related_cmd(
    url: Annotated[str, typer.Argument(help="Generated or absolute URL of a cached document")],
    limit: Annotated[int, typer.Option("--limit", help="Maximum number of results")] = 5,
    ):
    """Show documents related to URL through shared tags and categories."""
    engine = _engine(_settings())
    doc = engine.find(url)
    if doc is None:
        _fail(f"No cached document at {url}")
    _echo_docs(engine.related_to(doc, limit))


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate the cache tables")] = False,
    ):
    """Initialize the cache database schema. Use --reset to clear cached builds."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing cache cleared.")
    else:
        init_db(engine)
    typer.echo(f"Cache database initialized at: {settings.db_url}")

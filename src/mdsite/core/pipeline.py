"""Build orchestration: discovery -> release -> convert -> lists -> taxonomies -> conflicts -> cache"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from mdsite.config import SectionTemplates, Settings
from mdsite.core.embargo import find_embargoed, release_embargoed
from mdsite.core.header import build_header
from mdsite.core.models import Document, TaxonomyKind
from mdsite.core.paginate import paginate
from mdsite.core.parse import ParseError, discover_files, parse_file, partition_files
from mdsite.core.render import (
    MarkdownRenderer,
    RenderError,
    TemplateNotFoundError,
    TemplateRenderer,
    write_page,
)
from mdsite.core.slugs import detect_conflicts, list_url, resolve_url
from mdsite.core.taxonomy import generate_taxonomy
from mdsite.core.utils.dates import is_past
from mdsite.core.utils.urls import make_absolute
from mdsite.crud.cache import CacheStore
from mdsite.crud.database import init_db, make_engine


logger = logging.getLogger(__name__)


class BuildState(str, Enum):
    idle = "idle"
    discovering = "discovering"
    releasing = "releasing"
    converting = "converting"
    listing = "listing"
    indexing_taxonomies = "indexing_taxonomies"
    detecting_conflicts = "detecting_conflicts"
    caching = "caching"
    done = "done"


class BuildError(RuntimeError):
    """A fatal error that aborted the build."""


@dataclass
class BuildResult:
    documents: list[Document]
    pages_written: int
    released: int
    conflicts: dict[str, int] = field(default_factory=dict)


class SiteBuilder:
    """Runs one build of source_path into settings.output_dir.

    The run is linear; the first fatal error aborts it with BuildError and leaves
    `state` at the step that failed. A new run starts again from discovery.
    """

    def __init__(
        self,
        settings: Settings,
        source_path: Optional[str] = None,
        markdown: Optional[MarkdownRenderer] = None,
        templates: Optional[TemplateRenderer] = None,
        cache: Optional[CacheStore] = None,
        now: Optional[datetime] = None,
        ):
        source = source_path or settings.source_path
        if not source:
            raise BuildError("No source path defined.")
        self.settings = settings
        self.source = Path(source)
        self.output_dir = Path(settings.output_dir)
        self.markdown = markdown or MarkdownRenderer(settings.parser_config)
        self.templates = templates or TemplateRenderer(Path(settings.templates_dir))
        self.cache = cache
        self.now = now
        self.state = BuildState.idle
        self.pages_written = 0

    def _enter(self, state: BuildState) -> None:
        logger.debug("Build state: %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self) -> BuildResult:
        logger.info("Building from %s", self.source)
        try:
            self._enter(BuildState.discovering)
            content, lists, embargoed = self.discover()

            self._enter(BuildState.releasing)
            released = self.release(embargoed)
            if released:
                content, lists, _ = self.discover()

            self._enter(BuildState.converting)
            documents = self.convert_all(content)

            self._enter(BuildState.listing)
            self.build_lists(lists, documents)

            self._enter(BuildState.indexing_taxonomies)
            self.build_taxonomies(documents)

            self._enter(BuildState.detecting_conflicts)
            conflicts = self.report_conflicts(documents)

            self._enter(BuildState.caching)
            self.populate_cache(documents)
        except BuildError:
            raise
        except (ParseError, RenderError, TemplateNotFoundError, OSError) as e:
            raise BuildError(f"Build failed while {self.state.value}: {e}") from e

        self._enter(BuildState.done)
        logger.info("Build completed.")
        return BuildResult(documents, self.pages_written, released, conflicts)

    # --- discovering / releasing ---

    def discover(self) -> tuple[list[str], list[str], list[str]]:
        """Return (content files, list files, embargo files) under the source root."""
        if not self.source.is_dir():
            raise BuildError(f"Source path does not exist or is not a directory: {self.source}")
        content, lists = partition_files(discover_files(self.source))
        return content, lists, find_embargoed(self.source)

    def release(self, embargoed: list[str]) -> int:
        if not embargoed:
            return 0
        return release_embargoed(self.source, self.settings.embargo_field, self.now)

    # --- rendering helpers ---

    def _section(self, rel: str) -> SectionTemplates:
        section = self.settings.section_templates(rel)
        if section is None:
            raise BuildError(f"No templates configured for {rel} (and no 'default' entry)")
        return section

    def _listing_fallback(self) -> Optional[str]:
        default = self.settings.templates.get("default")
        return default.list if default else None

    def render_page(self, url: str, template_id: str, fields: dict[str, Any], extra: dict[str, Any]) -> bytes:
        """Merge defaults, synthesize the header, render template_id and write it at url."""
        variables = {**self.settings.defaults, **fields}
        variables["header"] = build_header(variables, self.settings.base_url, self.settings.hreflang_default)
        variables["site_name"] = self.settings.site_name
        variables["site_url"] = self.settings.base_url
        variables.update(extra)
        html = self.templates.render(template_id, variables)
        write_page(self.output_dir, url, html)
        self.pages_written += 1
        return html

    # --- converting ---

    def convert_all(self, files: list[str]) -> list[Document]:
        logger.info("%d articles considered for conversion", len(files))
        documents = []
        for rel in files:
            doc = self.convert_document(rel)
            if doc is not None:
                documents.append(doc)
        return documents

    def convert_document(self, rel: str) -> Optional[Document]:
        """Parse, render and write one content file; None when it is not yet published."""
        try:
            parsed = parse_file(self.source, rel)
        except ParseError as e:
            raise BuildError(f"Failed to convert {rel}: {e}") from e

        fields = {**self.settings.defaults, **parsed.fields}
        if not is_past(fields.get("published"), self.now):
            logger.debug("Skipping unpublished %s", rel)
            return None

        logger.info("- %s", rel)
        url = resolve_url(rel, fields, self.settings.slug_source)
        template = self.templates.resolve([self._section(rel).article], f"article {rel}")
        try:
            content = self.markdown.render(parsed.body)
            description = fields.get("description")
            description_html = self.markdown.render(str(description)) if description else ""
        except RenderError as e:
            raise BuildError(f"Failed to convert {rel}: {e}") from e

        doc = parsed.model_copy(update={
            "fields": fields,
            "rendered_content": content,
            "generated_url": url,
            "absolute_url": make_absolute(url, self.settings.base_url),
        })
        self.render_page(url, template, dict(parsed.fields), {
            "content": content,
            "description_html": description_html,
            "document": doc,
            "absolute_url": doc.absolute_url,
            "generated_url": url,
        })
        return doc

    # --- listing ---

    def build_lists(self, lists: list[str], documents: list[Document]) -> None:
        logger.info("%d lists to convert", len(lists))
        for rel in lists:
            self.build_list(rel, documents)

    def build_list(self, rel: str, documents: list[Document]) -> None:
        """Render every page of one listing; page 1 is also written under '1/'."""
        try:
            page_doc = parse_file(self.source, rel)
        except ParseError as e:
            raise BuildError(f"Failed to convert list {rel}: {e}") from e

        section = self._section(rel)
        template = self.templates.resolve([section.list], f"list {rel}")
        base = list_url(rel)
        logger.info("- %s", base or "/")
        content = self.markdown.render(page_doc.body)

        pages = paginate(documents, section.list_per_page, directory=base, base_url=base)
        for page in pages:
            logger.info("  creating page %d of %d", page.current_page, page.total_pages)
            fields = dict(page_doc.fields)
            if page.current_page > 1:
                fields.pop("hreflang", None)
            fields["canonical"] = make_absolute(page.url, self.settings.base_url)
            html = self.render_page(page.url, template, fields, {
                "content": content,
                "base_url": make_absolute(base, self.settings.base_url),
                "articles": page.documents,
                "total_pages": page.total_pages,
                "current_page": page.current_page,
                "page": page,
            })
            if page.current_page == 1:
                write_page(self.output_dir, f"{base}1/", html)
                self.pages_written += 1

    # --- taxonomies ---

    def build_taxonomies(self, documents: list[Document]) -> None:
        logger.info("Generating taxonomy archives")
        for kind in TaxonomyKind:
            config = self.settings.taxonomies.get(kind.value)
            if config is None or not config.enabled:
                continue
            generate_taxonomy(
                kind, documents, config, self._listing_fallback(), self.templates,
                self.render_page, self.settings.base_url, self.settings.site_name,
            )

    # --- conflicts / cache ---

    def report_conflicts(self, documents: list[Document]) -> dict[str, int]:
        conflicts = detect_conflicts(documents)
        if conflicts:
            logger.warning("Slug conflicts detected!")
            for url, count in conflicts.items():
                logger.warning("- URL '%s' is used by %d articles", url, count)
            logger.warning("This may cause articles to overwrite each other.")
        return conflicts

    def populate_cache(self, documents: list[Document]) -> bool:
        """Replace the cached snapshot when a cache key is configured."""
        if not self.settings.cache_key:
            return False
        if self.cache is None:
            engine = make_engine(self.settings.db_url)
            init_db(engine)
            self.cache = CacheStore(engine)
        self.cache.put(
            self.settings.cache_key,
            [d.model_dump(mode="json") for d in documents],
            self.settings.cache_expiry,
        )
        logger.info("Stored %d generated articles in cache", len(documents))
        return True


def run_build(settings: Settings, source_path: Optional[str] = None, **kwargs) -> BuildResult:
    """Build the site described by settings; see SiteBuilder for keyword arguments."""
    return SiteBuilder(settings, source_path, **kwargs).run()

"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDSITE_"


class SectionTemplates(BaseModel):
    """Templates for one top-level source directory (e.g. blog/)."""
    article: str = "article.html"
    list: str = "list.html"
    list_per_page: int = Field(default=12, ge=1, description="Documents per listing page")


class TaxonomySettings(BaseModel):
    enabled: bool = True
    route_prefix: str
    archive_template: Optional[str] = None
    overview_template: Optional[str] = None


def _default_taxonomies() -> dict[str, TaxonomySettings]:
    return {
        "tags": TaxonomySettings(
            route_prefix="tags",
            archive_template="tag_archive.html",
            overview_template="tags_overview.html",
        ),
        "categories": TaxonomySettings(
            route_prefix="categories",
            archive_template="category_archive.html",
            overview_template="categories_overview.html",
        ),
    }


class Settings(BaseModel):
    site_name:     str = "Blog"
    base_url:      str = Field(default="http://localhost", description="Absolute site URL used for canonical links")
    source_path:   Optional[str] = Field(default=None, description="Root directory of the markdown sources")
    output_dir:    str = Field(default="public",    description="Directory the rendered site is written to")
    templates_dir: str = Field(default="templates", description="Jinja2 templates; packaged defaults fill gaps")
    slug_source:   str = Field(default="filename", pattern="^(filename|frontmatter)$", description="filename or frontmatter")
    parser_config: str = Field(default="commonmark", description="MarkdownIt parser preset name")
    embargo_field: str = Field(default="modified", description="Front-matter field holding an embargo release time")
    hreflang_default: Optional[str] = Field(default=None, description="Language mirrored as hreflang x-default")
    defaults:      dict[str, Any] = Field(default_factory=dict, description="Fields merged under every front-matter")
    templates:     dict[str, SectionTemplates] = Field(default_factory=lambda: {"default": SectionTemplates()})
    taxonomies:    dict[str, TaxonomySettings] = Field(default_factory=_default_taxonomies)
    cache_key:     Optional[str] = Field(default=None, description="Cache key for the built documents; None disables")
    cache_expiry:  int = Field(default=86400, ge=0, description="Cache lifetime in seconds")
    db_url:        str = Field(default="sqlite:///mdsite.db", description="Cache database URL")

    def section_templates(self, source_path: str) -> Optional[SectionTemplates]:
        """Templates for the file's top-level directory, else the 'default' entry."""
        section = source_path.split("/", 1)[0] if "/" in source_path else ""
        return self.templates.get(section) or self.templates.get("default")


_SCALAR_FIELDS = {
    name for name, f in Settings.model_fields.items()
    if f.annotation in (str, int, Optional[str])
}


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in _SCALAR_FIELDS:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValueError as e:
        raise ValueError(f"Invalid settings: {e}") from e

"""Markdown and template rendering, and page output"""

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)
from markdown_it import MarkdownIt


logger = logging.getLogger(__name__)

PACKAGE_TEMPLATES = Path(__file__).resolve().parent.parent / 'templates'
INDEX_FILE = 'index.htm'


class RenderError(RuntimeError):
    """The markdown renderer failed on a piece of text."""


class TemplateNotFoundError(LookupError):
    """No template in a fallback chain could be loaded."""


class MarkdownRenderer:
    """Markdown -> HTML through a MarkdownIt preset."""

    def __init__(self, preset: str = 'commonmark'):
        self._md = MarkdownIt(preset, options_update={"linkify": False})

    def render(self, text: str) -> str:
        try:
            return self._md.render(text or '')
        except Exception as e:
            raise RenderError(f"Markdown rendering failed: {e}") from e


class TemplateRenderer:
    """Jinja2 templates looked up in templates_dir first, then the packaged defaults."""

    def __init__(self, templates_dir: Optional[Path] = None):
        loaders = []
        if templates_dir is not None and Path(templates_dir).is_dir():
            loaders.append(FileSystemLoader(str(templates_dir)))
        loaders.append(FileSystemLoader(str(PACKAGE_TEMPLATES)))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(['html', 'htm']),
        )

    def exists(self, template_id: Optional[str]) -> bool:
        if not template_id:
            return False
        try:
            self.env.get_template(template_id)
        except TemplateNotFound:
            return False
        return True

    def resolve(self, candidates: Iterable[Optional[str]], purpose: str) -> str:
        """Return the first loadable template of a fallback chain."""
        tried = []
        for template_id in candidates:
            if not template_id:
                continue
            if self.exists(template_id):
                if tried:
                    logger.warning("Template(s) %s missing for %s; using %s", tried, purpose, template_id)
                return template_id
            tried.append(template_id)
        raise TemplateNotFoundError(f"No usable template for {purpose} (tried: {', '.join(tried) or 'none'})")

    def render(self, template_id: str, variables: dict[str, Any]) -> bytes:
        try:
            template = self.env.get_template(template_id)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(f"Template not found: {template_id}") from e
        try:
            return template.render(**variables).encode("utf-8")
        except TemplateError as e:
            raise RenderError(f"Template {template_id} failed to render: {e}") from e


def target_dir(output_dir: Path, url: str) -> Path:
    """Directory a relative URL is written to ('' is output_dir itself)."""
    return output_dir.joinpath(*[part for part in url.split('/') if part])


def write_page(output_dir: Path, url: str, content: bytes) -> Path:
    """Write content to {output_dir}/{url}/index.htm, creating parents as needed."""
    dest = target_dir(output_dir, url)
    dest.mkdir(parents=True, exist_ok=True)
    path = dest / INDEX_FILE
    path.write_bytes(content)
    return path

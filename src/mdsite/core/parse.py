"""File discovery and YAML front-matter parsing"""

import re
from pathlib import Path, PurePosixPath
from typing import Any, Iterable

import yaml

from mdsite.core.models import Document


DELIMITER = '---'
MD_EXTENSIONS = {'.md', '.mdx'}
LIST_INDEX_STEM = 'index'
EMBARGO_RE = re.compile(r'\.(\d+)\.emb(\.[^./]+)$')


class ParseError(ValueError):
    """Malformed front-matter block."""


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body). Raises ParseError on a malformed header."""
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != DELIMITER:
        return {}, text

    end = next((i for i in range(1, len(lines)) if lines[i].strip() == DELIMITER), None)
    if end is None:
        raise ParseError("Unterminated front-matter: missing closing '---'")

    try:
        fm = yaml.safe_load(''.join(lines[1:end])) or {}
    except yaml.YAMLError as e:
        raise ParseError(f"Invalid YAML front-matter: {e}") from e
    if not isinstance(fm, dict):
        raise ParseError(f"Invalid YAML front-matter: expected a mapping, got {type(fm).__name__}")
    # YAML keys such as 2024 or `on` load as int/bool
    return {str(k): v for k, v in fm.items()}, ''.join(lines[end + 1:])


def parse_text(text: str, source_path: str = '') -> Document:
    """Parse raw file content into a Document with fields and body populated."""
    fields, body = split_frontmatter(text)
    return Document(source_path=source_path, fields=fields, body=body)


def parse_file(root: Path, relative: str) -> Document:
    """Parse root/relative; ParseError messages carry the relative path."""
    try:
        raw = (root / relative).read_text(encoding='utf-8-sig')
    except UnicodeDecodeError as e:
        raise ParseError(f"{relative}: not valid UTF-8: {e}") from e
    try:
        return parse_text(raw, relative)
    except ParseError as e:
        raise ParseError(f"{relative}: {e}") from e


def is_embargoed(path: str) -> bool:
    return EMBARGO_RE.search(path) is not None


def discover_files(root: Path, extensions: Iterable[str] = MD_EXTENSIONS) -> list[str]:
    """Return sorted relative POSIX paths of content files under root, embargo files excluded."""
    exts = set(extensions)
    return sorted(
        p.relative_to(root).as_posix()
        for p in root.rglob('*')
        if p.is_file() and p.suffix in exts and not is_embargoed(p.name)
    )


def is_list_index(path: str) -> bool:
    """True for files named exactly index.<ext>."""
    return PurePosixPath(path).stem == LIST_INDEX_STEM


def partition_files(files: list[str]) -> tuple[list[str], list[str]]:
    """Split discovered files into (content, lists), each in discovery order."""
    content = [f for f in files if not is_list_index(f)]
    lists = [f for f in files if is_list_index(f)]
    return content, lists

"""Release of time-delayed draft files (name.<n>.emb.md) once their timestamp has passed"""

import logging
from datetime import datetime
from pathlib import Path

from mdsite.core.parse import EMBARGO_RE, MD_EXTENSIONS, parse_file
from mdsite.core.utils.dates import is_past


logger = logging.getLogger(__name__)


def canonical_name(path: str) -> str:
    """Strip the '.<n>.emb' marker: 'post.2.emb.md' -> 'post.md'."""
    return EMBARGO_RE.sub(r'\2', path)


def variant(path: str) -> int:
    """The numeric marker of an embargo file: 'post.2.emb.md' -> 2."""
    return int(EMBARGO_RE.search(path).group(1))


def find_embargoed(root: Path) -> list[str]:
    """Return relative paths of embargo files, grouped by canonical name, highest variant first."""
    found = [
        p.relative_to(root).as_posix()
        for p in root.rglob('*')
        if p.is_file() and p.suffix in MD_EXTENSIONS and EMBARGO_RE.search(p.name)
    ]
    return sorted(found, key=lambda rel: (canonical_name(rel), -variant(rel)))


def due_for_release(root: Path, candidates: list[str], field: str, now: datetime | None = None) -> list[str]:
    """Return candidates whose front-matter release field is not in the future."""
    due = []
    for rel in candidates:
        doc = parse_file(root, rel)
        if is_past(doc.fields.get(field), now):
            due.append(rel)
        else:
            logger.debug("Embargo holds for %s (%s=%r)", rel, field, doc.fields.get(field))
    return due


def release_embargoed(root: Path, field: str = 'modified', now: datetime | None = None) -> int:
    """Rename due embargo files to their canonical name. Returns the release count.

    Files are moved in reverse discovery order, so 'post.1.emb.md' lands first and
    'post.2.emb.md' then replaces it: the highest due variant wins. Nothing is ever deleted.
    """
    due = due_for_release(root, find_embargoed(root), field, now)
    logger.info("%d files to release", len(due))
    for rel in reversed(due):
        target = canonical_name(rel)
        logger.info("- %s -> %s", rel, target)
        (root / rel).replace(root / target)
    return len(due)

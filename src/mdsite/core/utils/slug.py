"""Slug generation for URLs and taxonomy terms"""

import re


_NON_ALNUM_RE = re.compile(r'[^a-z0-9]+')


def slugify(text: str) -> str:
    """Lowercase text and collapse every run of non-alphanumerics into a single hyphen."""
    return _NON_ALNUM_RE.sub('-', str(text).lower()).strip('-')

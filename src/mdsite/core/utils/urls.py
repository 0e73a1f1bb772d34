"""Absolute URL helpers"""


def make_absolute(uri: str, base_url: str) -> str:
    """Join a site-relative uri onto base_url; http(s) URLs pass through unchanged."""
    if uri.startswith('http'):
        return uri
    return f"{base_url.rstrip('/')}/{uri.lstrip('/')}"

"""URL canonicalization and validation."""

from __future__ import annotations

from urllib.parse import urldefrag, urlparse

ALLOWED_SCHEMES = frozenset({"http", "https"})


def canonicalize_url(url: object) -> str:
    """Strip surrounding whitespace and any fragment, including ``#:~:text=``.

    Never raises; non-string input yields an empty string.
    """
    if not isinstance(url, str):
        return ""
    url = url.strip()
    try:
        return urldefrag(url).url
    except ValueError:
        return url.split("#", 1)[0]


def validate_url(url: object) -> bool:
    """Return True only for parseable http(s) URLs with a host."""
    if not isinstance(url, str) or not url or any(ch.isspace() for ch in url):
        return False
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return False
    return parsed.scheme in ALLOWED_SCHEMES and bool(hostname)

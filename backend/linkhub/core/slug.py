"""Utility helpers for working with slugs.

A raw slug is what a user types. The canonical slug is the raw slug escaped as
a single URL path segment; it is the form stored in ``entries.slug`` and the
form routes are looked up by.
"""

from __future__ import annotations

from urllib.parse import quote, unquote

MAX_RAW_SLUG_BYTES = 255
MAX_SLUG_LENGTH = 765

# Reserved characters that need no escaping inside a single path segment.
_PATH_SEGMENT_SAFE = "$&+:=@"


def canonical_slug(raw: str) -> str:
    """Escape a raw slug into its canonical path-segment form."""

    return quote(raw, safe=_PATH_SEGMENT_SAFE, encoding="utf-8", errors="strict")


def raw_slug(slug: str) -> str:
    """Reverse :func:`canonical_slug`. Raises ``ValueError`` on undecodable input."""

    try:
        return unquote(slug, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise ValueError("slug is not valid percent-encoded UTF-8") from exc


def is_canonical(slug: str) -> bool:
    """Return True when the slug survives an unescape/escape round trip unchanged."""

    try:
        return canonical_slug(raw_slug(slug)) == slug
    except (ValueError, UnicodeEncodeError):
        return False

"""URL comparison helpers."""

from __future__ import annotations

# Locations a page script cannot reach; history back is unreliable there.
UNSCRIPTABLE_PREFIXES = ("chrome-extension://", "chrome://", "edge://", "devtools://", "blob:", "about:", "data:")


def normalize_url(url: str) -> str:
    return url.rstrip("/")


def urls_match(a: str, b: str) -> bool:
    """Compare two URLs ignoring trailing slashes."""
    return normalize_url(a) == normalize_url(b)


def is_unscriptable(url: str) -> bool:
    return url.startswith(UNSCRIPTABLE_PREFIXES)

"""Shared URL utilities."""

from __future__ import annotations

from urllib.parse import urlparse


def is_valid_target_url(url: str) -> bool:
    """Accept absolute http(s) URLs with a host."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)

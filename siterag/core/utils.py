"""Utility functions."""

import hashlib
import re
from typing import Iterator, Optional, Sequence, TypeVar
from urllib.parse import urljoin, urlparse

import tldextract

T = TypeVar("T")


def normalize_url(url: str, base_url: Optional[str] = None) -> str:
    """Normalize and canonicalize URL.

    Scheme and host are lowercased; the path keeps its case since the site's
    routes are case-sensitive.
    """
    url = url.strip()
    if base_url:
        url = urljoin(base_url, url)
    parsed = urlparse(url)

    # Remove trailing slash, so the root and "/" are the same page
    path = parsed.path.rstrip("/")
    normalized = f"{parsed.scheme.lower()}://{parsed.netloc.lower()}{path}"
    if parsed.query:
        normalized += f"?{parsed.query}"
    if parsed.fragment:
        normalized += f"#{parsed.fragment}"

    return normalized


def origin(url: str) -> str:
    """Return scheme://host[:port] for a URL."""
    parsed = urlparse(url)
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"


def is_same_origin(url: str, base_url: str) -> bool:
    """Check if URL is served from the same origin as base_url."""
    try:
        return origin(url) == origin(base_url)
    except ValueError:
        return False


def registered_domain(url: str) -> str:
    """Return the registrable domain of a URL (e.g. facebook.com)."""
    extracted = tldextract.extract(url)
    if not extracted.suffix:
        return extracted.domain
    return f"{extracted.domain}.{extracted.suffix}"


def compute_content_hash(content: str | bytes) -> str:
    """Compute SHA256 hash of content."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def normalize_text(text: str) -> str:
    """Normalize whitespace in text."""
    # Replace multiple whitespace with single space
    text = re.sub(r"\s+", " ", text)
    # Remove leading/trailing whitespace
    return text.strip()


def truncate_text(text: str, max_length: int, suffix: str = "") -> str:
    """Truncate text to max length with suffix."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size <= 0:
        raise ValueError("batch size must be positive")
    for start in range(0, len(items), size):
        yield items[start : start + size]

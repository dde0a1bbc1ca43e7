"""Filtering of raw content items into normalized, identified records.

Pure functions only: no I/O and no shared state, so ingestion can be
re-run idempotently and tested without a browser.
"""

import re
from typing import Iterable, Optional

from siterag.core.constants import GRAPH_TYPES, ID_PREFIX_CHARS, MIN_TEXT_CHARS
from siterag.ingestion.models import ContentItem, ContentType, NormalizedContent

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

GRAPH_CONTENT_TYPES = frozenset(ContentType(t) for t in GRAPH_TYPES)
ALL_CONTENT_TYPES = frozenset(ContentType)


def content_id(url: str, text: str) -> str:
    """Derive the stable content id for a (url, text) pair.

    The id is ``<url>-<prefix>`` where prefix is the first 50 characters of
    ``text`` with every character outside ASCII letters and digits replaced
    by ``_``. Non-ASCII letters therefore collapse to ``_``; texts sharing a
    url and their first 50 characters (after replacement) share an id.
    """
    prefix = _NON_ALNUM.sub("_", text[:ID_PREFIX_CHARS])
    return f"{url}-{prefix}"


def is_valid(item: ContentItem, types: Iterable[ContentType] = GRAPH_CONTENT_TYPES) -> bool:
    text = item.text
    return isinstance(text, str) and len(text) > MIN_TEXT_CHARS and item.type in types


def normalize(
    items: Iterable[ContentItem],
    types: Optional[Iterable[ContentType]] = None,
) -> list[NormalizedContent]:
    """Keep items with text longer than 10 chars and an allowed type, and assign ids.

    Order is preserved. ``types`` defaults to the graph-eligible set.
    """
    allowed = frozenset(types) if types is not None else GRAPH_CONTENT_TYPES
    return [
        NormalizedContent(
            id=content_id(item.source_url, item.text),
            text=item.text,
            type=item.type,
            url=item.source_url,
        )
        for item in items
        if is_valid(item, allowed)
    ]

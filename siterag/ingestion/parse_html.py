"""HTML parsing and extraction of typed content items."""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from siterag.core.constants import MAX_LABEL_CHARS, MIN_TEXT_CHARS, TEXT_SELECTORS
from siterag.core.utils import normalize_text, normalize_url
from siterag.ingestion.models import ContentItem, ContentType

logger = logging.getLogger(__name__)


def _is_http(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


def _resolve(href: str, page_url: str) -> Optional[str]:
    """Resolve ``href`` against the page URL; None when the href is malformed."""
    try:
        return normalize_url(href, page_url)
    except ValueError:
        logger.debug(f"Skipping malformed URL on {page_url}: {href!r}")
        return None


def extract_text_items(soup: BeautifulSoup, page_url: str) -> list[ContentItem]:
    """Extract heading, paragraph, list and span text longer than the minimum, in document order."""
    items = []
    for tag in soup.find_all(list(TEXT_SELECTORS)):
        text = normalize_text(tag.get_text(" "))
        if len(text) > MIN_TEXT_CHARS:
            items.append(ContentItem(type=ContentType(tag.name), text=text, source_url=page_url))
    return items


def extract_images(soup: BeautifulSoup, page_url: str) -> list[ContentItem]:
    """Extract images with alt text; the item URL is the absolute image URL."""
    items = []
    for img in soup.find_all("img"):
        src = img.get("src") or img.get("data-src")
        alt = normalize_text(img.get("alt") or "")[:MAX_LABEL_CHARS]
        if not src or not alt:
            continue
        url = src if _is_http(src) else _resolve(src, page_url)
        if url:
            items.append(ContentItem(type=ContentType.IMAGE, text=alt, source_url=url))
    return items


def extract_links(soup: BeautifulSoup, page_url: str) -> list[str]:
    """Return every anchor href resolved against the page URL, in document order."""
    links = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href or href.lower().startswith(("javascript:", "mailto:", "tel:")):
            continue
        url = _resolve(href, page_url)
        if url:
            links.append(url)
    return links


def extract_link_items(soup: BeautifulSoup, page_url: str) -> list[ContentItem]:
    """Extract anchors as link items labelled by their text, or the URL when empty."""
    items = []
    for a in soup.find_all("a", href=True):
        href = _resolve(a["href"], page_url)
        if not href or not _is_http(href):
            continue
        label = normalize_text(a.get_text(" ")) or href[:MAX_LABEL_CHARS]
        items.append(ContentItem(type=ContentType.LINK, text=label, source_url=href))
    return items


def parse_page(html: str, page_url: str) -> tuple[list[ContentItem], list[str]]:
    """Parse rendered HTML into content items and outbound links."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()

    items = extract_text_items(soup, page_url)
    items.extend(extract_images(soup, page_url))
    items.extend(extract_link_items(soup, page_url))
    links = extract_links(soup, page_url)

    logger.debug(f"Parsed {page_url}: {len(items)} items, {len(links)} links")
    return items, links

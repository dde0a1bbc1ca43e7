"""Data models for the acquisition pipeline."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from siterag.core.errors import SiteRAGError


class ContentType(str, Enum):
    """Content type enumeration. Values mirror the element the item came from."""

    HEADING1 = "h1"
    HEADING2 = "h2"
    HEADING3 = "h3"
    HEADING4 = "h4"
    PARAGRAPH = "p"
    LIST_ITEM = "li"
    SPAN = "span"
    IMAGE = "image"
    LINK = "link"

    @property
    def is_heading(self) -> bool:
        return self in (ContentType.HEADING1, ContentType.HEADING2, ContentType.HEADING3, ContentType.HEADING4)

    @property
    def is_body(self) -> bool:
        return self in (ContentType.PARAGRAPH, ContentType.LIST_ITEM)


class ContentItem(BaseModel):
    """Model for a single piece of extracted page content."""

    model_config = ConfigDict(frozen=True)

    type: ContentType
    text: str
    source_url: str


class NormalizedContent(BaseModel):
    """Validated content record with a stable id."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    type: ContentType
    url: str

    def to_row(self) -> dict[str, str]:
        """Flat parameter row for batched graph writes."""
        return {"id": self.id, "text": self.text, "type": self.type.value, "url": self.url}


class SearchDocument(BaseModel):
    """Index-side projection of a content record."""

    id: str
    text: str
    url: str
    category: str


class PageResult(BaseModel):
    """Outcome of crawling a single page."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    url: str
    items: int = 0
    links: int = 0
    error: Optional[SiteRAGError] = Field(default=None, exclude=True)

    @property
    def ok(self) -> bool:
        return self.error is None


class CrawlSummary(BaseModel):
    """Aggregated crawl outcome."""

    pages_visited: int = 0
    pages_failed: int = 0
    urls_skipped: int = 0
    items_extracted: int = 0
    failed_urls: list[str] = Field(default_factory=list)


class CrawlResult(BaseModel):
    """Raw crawl output: every extracted item in visit order plus a summary."""

    items: list[ContentItem] = Field(default_factory=list)
    summary: CrawlSummary = Field(default_factory=CrawlSummary)
    visited: list[str] = Field(default_factory=list)


class BatchReport(BaseModel):
    """Outcome of a batched write to an external store."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    total_batches: int = 0
    succeeded_batches: int = 0
    written: int = 0
    errors: list[SiteRAGError] = Field(default_factory=list, exclude=True)

    @property
    def failed_batches(self) -> int:
        return len(self.errors)

    def merge(self, other: "BatchReport") -> "BatchReport":
        return BatchReport(
            total_batches=self.total_batches + other.total_batches,
            succeeded_batches=self.succeeded_batches + other.succeeded_batches,
            written=self.written + other.written,
            errors=[*self.errors, *other.errors],
        )


class GraphReport(BaseModel):
    """Outcome of one graph ingestion run."""

    nodes: BatchReport = Field(default_factory=BatchReport)
    edges: BatchReport = Field(default_factory=BatchReport)


class CrawlSnapshot(BaseModel):
    """Versioned result of one full-site acquisition, held by the caller."""

    version: str
    created_at: datetime
    pages_visited: int
    item_count: int
    items: list[NormalizedContent] = Field(default_factory=list)
    index_items: list[NormalizedContent] = Field(default_factory=list)
    crawl: CrawlSummary = Field(default_factory=CrawlSummary)
    graph: Optional[GraphReport] = None
    index: Optional[BatchReport] = None

"""Bounded single-page-at-a-time site crawler."""

import logging
import time
from typing import Callable, Optional, Protocol

from siterag.core.config import settings
from siterag.core.errors import FetchError
from siterag.core.utils import normalize_url
from siterag.ingestion.frontier import FrontierTracker
from siterag.ingestion.models import ContentItem, CrawlResult, NormalizedContent, PageResult
from siterag.ingestion.normalizer import normalize

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    def __enter__(self) -> "Extractor": ...

    def __exit__(self, *exc_info) -> None: ...

    def extract(self, url: str) -> tuple[list[ContentItem], list[str]]: ...


def prioritize_links(links: list[str], pattern: str) -> list[str]:
    """Move links containing ``pattern`` to the front, keeping relative order otherwise."""
    if not pattern:
        return list(links)
    return sorted(links, key=lambda link: 0 if pattern in link else 1)


class CrawlScheduler:
    """Drives a FrontierTracker with an extractor, one page at a time.

    Per-page failures are recorded and the crawl moves on. A failure to
    start the extractor (``FatalInitError``) propagates to the caller.
    """

    def __init__(
        self,
        extractor_factory: Callable[[], Extractor],
        base_url: Optional[str] = None,
        max_pages: Optional[int] = None,
        delay_seconds: Optional[float] = None,
        priority_pattern: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.extractor_factory = extractor_factory
        self.base_url = normalize_url(base_url or settings.crawl_base)
        self.max_pages = settings.max_pages if max_pages is None else max_pages
        self.delay_seconds = settings.crawl_delay_seconds if delay_seconds is None else delay_seconds
        self.priority_pattern = settings.priority_pattern if priority_pattern is None else priority_pattern
        self.sleep = sleep
        self.frontier = FrontierTracker(self.base_url, max_pages=self.max_pages)
        self.pages: list[PageResult] = []

    def _visit(self, extractor: Extractor, url: str) -> tuple[list[ContentItem], PageResult]:
        try:
            items, links = extractor.extract(url)
        except FetchError as e:
            logger.error(str(e))
            return [], PageResult(url=url, error=e)
        except Exception as e:
            error = FetchError(url, f"{type(e).__name__}: {e}")
            logger.error(str(error), exc_info=True)
            return [], PageResult(url=url, error=error)

        queued = 0
        for link in prioritize_links(links, self.priority_pattern):
            if self.frontier.enqueue(link):
                queued += 1
        return items, PageResult(url=url, items=len(items), links=queued)

    def crawl(self) -> CrawlResult:
        """Crawl from the base URL and return every extracted item in visit order."""
        self.frontier.reset(seed=self.base_url)
        self.pages = []
        result = CrawlResult()

        with self.extractor_factory() as extractor:
            while self.frontier.has_next():
                url = self.frontier.dequeue()
                if not self.frontier.admit(url):
                    result.summary.urls_skipped += 1
                    continue

                logger.info(f"Crawling ({self.frontier.visited_count + 1}/{self.max_pages}): {url}")
                self.frontier.mark_visited(url)
                result.visited.append(url)

                items, page = self._visit(extractor, url)
                self.pages.append(page)
                result.items.extend(items)
                if not page.ok:
                    result.summary.pages_failed += 1
                    result.summary.failed_urls.append(url)

                if self.delay_seconds > 0 and self.frontier.has_next():
                    self.sleep(self.delay_seconds)

        result.summary.pages_visited = self.frontier.visited_count
        result.summary.items_extracted = len(result.items)
        logger.info(
            f"Scraped {len(result.items)} items from {result.summary.pages_visited} pages "
            f"({result.summary.pages_failed} failed)"
        )
        return result

    def run(self) -> list[NormalizedContent]:
        """Crawl and return normalized, graph-eligible content."""
        return normalize(self.crawl().items)

"""Full-site acquisition: crawl, normalize, then fan out to graph and index."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Optional

from neo4j import Driver
from qdrant_client import QdrantClient
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_fixed

from siterag.core.config import settings
from siterag.core.errors import FatalInitError
from siterag.core.utils import compute_content_hash
from siterag.graph.ingestor import GraphIngestor
from siterag.graph.neo4j_client import get_driver, verify_connectivity
from siterag.ingestion.crawler import CrawlScheduler, Extractor
from siterag.ingestion.extractor import PageExtractor
from siterag.ingestion.models import BatchReport, CrawlSnapshot, GraphReport, NormalizedContent
from siterag.ingestion.normalizer import ALL_CONTENT_TYPES, GRAPH_CONTENT_TYPES, normalize
from siterag.ingestion.storage import StorageManager
from siterag.search.publisher import IndexPublisher
from siterag.search.qdrant_client import ensure_index, get_client

logger = logging.getLogger(__name__)


def snapshot_version(items: list[NormalizedContent], now: datetime) -> str:
    """Timestamped version with a fingerprint of the content ids."""
    fingerprint = compute_content_hash("\n".join(sorted(item.id for item in items)))[:8]
    return f"{now:%Y%m%dT%H%M%S%fZ}-{fingerprint}"


class AcquisitionPipeline:
    """Runs one acquisition with bounded retries on FatalInitError."""

    def __init__(
        self,
        extractor_factory: Callable[[], Extractor] = PageExtractor,
        graph_driver: Optional[Driver] = None,
        index_client: Optional[QdrantClient] = None,
        ingestor: Optional[GraphIngestor] = None,
        publisher: Optional[IndexPublisher] = None,
        storage: Optional[StorageManager] = None,
        base_url: Optional[str] = None,
        max_pages: Optional[int] = None,
        delay_seconds: Optional[float] = None,
        retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        include_media_in_index: Optional[bool] = None,
    ):
        self.extractor_factory = extractor_factory
        self.graph_driver = graph_driver or get_driver()
        self.index_client = index_client or get_client()
        self.ingestor = ingestor or GraphIngestor(self.graph_driver)
        self.publisher = publisher or IndexPublisher(self.index_client)
        self.storage = storage
        self.base_url = base_url
        self.max_pages = max_pages
        self.delay_seconds = delay_seconds
        self.retries = retries or settings.init_retries
        self.backoff_seconds = settings.init_backoff_seconds if backoff_seconds is None else backoff_seconds
        self.include_media_in_index = (
            settings.index_include_media if include_media_in_index is None else include_media_in_index
        )

    def prepare(self) -> None:
        """Check both stores and ensure their schemas. Raises FatalInitError."""
        verify_connectivity(self.graph_driver)
        self.ingestor.ensure_schema()
        ensure_index(self.index_client, self.publisher.collection)

    def _fan_out(
        self,
        graph_content: list[NormalizedContent],
        index_content: list[NormalizedContent],
    ) -> tuple[Optional[GraphReport], Optional[BatchReport]]:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="acquire") as executor:
            graph_future = executor.submit(self.ingestor.ingest, graph_content)
            index_future = executor.submit(self.publisher.publish, index_content)

            graph_report = index_report = None
            try:
                graph_report = graph_future.result()
            except Exception as e:
                logger.error(f"Error ingesting content: {e}", exc_info=True)
            try:
                index_report = index_future.result()
            except Exception as e:
                logger.error(f"Search upload failed: {e}", exc_info=True)
        return graph_report, index_report

    def acquire_once(self) -> CrawlSnapshot:
        self.prepare()
        scheduler = CrawlScheduler(
            self.extractor_factory,
            base_url=self.base_url,
            max_pages=self.max_pages,
            delay_seconds=self.delay_seconds,
        )
        result = scheduler.crawl()

        graph_content = normalize(result.items, GRAPH_CONTENT_TYPES)
        index_types = ALL_CONTENT_TYPES if self.include_media_in_index else GRAPH_CONTENT_TYPES
        index_content = normalize(result.items, index_types)

        graph_report = index_report = None
        if graph_content or index_content:
            graph_report, index_report = self._fan_out(graph_content, index_content)
        else:
            logger.warning("Crawl finished without any usable content")

        now = datetime.now(timezone.utc)
        return CrawlSnapshot(
            version=snapshot_version(graph_content, now),
            created_at=now,
            pages_visited=result.summary.pages_visited,
            item_count=len(graph_content),
            items=graph_content,
            index_items=index_content,
            crawl=result.summary,
            graph=graph_report,
            index=index_report,
        )

    def run(self) -> CrawlSnapshot:
        """Acquire the whole site, retrying start-up failures a bounded number of times."""
        retrying = Retrying(
            stop=stop_after_attempt(self.retries),
            wait=wait_fixed(self.backoff_seconds),
            retry=retry_if_exception_type(FatalInitError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                snapshot = self.acquire_once()

        if self.storage is not None:
            self.storage.save_snapshot(snapshot)
        logger.info(
            f"Initial website scraping completed: {snapshot.item_count} items from "
            f"{snapshot.pages_visited} pages (version {snapshot.version})"
        )
        return snapshot


def ingest_full_site(**kwargs) -> CrawlSnapshot:
    """Caller-facing entry point: crawl the configured site and load both stores."""
    return AcquisitionPipeline(**kwargs).run()


"""Batched upload of normalized content into the search index."""

import logging
import time
import uuid
from typing import Callable, Optional, Sequence

from qdrant_client import QdrantClient
from qdrant_client.models import Document, PointStruct

from siterag.core.config import settings
from siterag.core.constants import BM25_VECTOR, UNKNOWN_CATEGORY
from siterag.core.errors import IndexWriteError
from siterag.core.utils import chunked, truncate_text
from siterag.ingestion.models import BatchReport, NormalizedContent, SearchDocument

logger = logging.getLogger(__name__)


def to_search_documents(content: Sequence[NormalizedContent], text_limit: int) -> list[SearchDocument]:
    """Project content onto index documents with a fresh upload id each."""
    return [
        SearchDocument(
            id=str(uuid.uuid4()),
            text=truncate_text(item.text, text_limit),
            url=item.url,
            category=item.type.value if item.type else UNKNOWN_CATEGORY,
        )
        for item in content
        if item.text
    ]


class IndexPublisher:
    """Uploads documents in batches no larger than the per-call ceiling.

    A failed batch is logged and recorded; later batches still run.
    """

    def __init__(
        self,
        client: QdrantClient,
        collection: Optional[str] = None,
        batch_size: Optional[int] = None,
        text_limit: Optional[int] = None,
        pause_seconds: Optional[float] = None,
        bm25_model: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.collection = collection or settings.index_name
        self.batch_size = batch_size or settings.index_batch_size
        self.text_limit = text_limit or settings.index_text_limit
        self.pause_seconds = settings.index_batch_pause_seconds if pause_seconds is None else pause_seconds
        self.bm25_model = bm25_model or settings.bm25_model
        self.sleep = sleep

    def _to_point(self, doc: SearchDocument) -> PointStruct:
        return PointStruct(
            id=doc.id,
            vector={BM25_VECTOR: Document(text=doc.text, model=self.bm25_model)},
            payload={"text": doc.text, "url": doc.url, "category": doc.category},
        )

    def publish(self, content: Sequence[NormalizedContent]) -> BatchReport:
        """Upload content; returns a per-batch report."""
        documents = to_search_documents(content, self.text_limit)
        batches = list(chunked(documents, self.batch_size))
        report = BatchReport(total_batches=len(batches))
        logger.info(f"Preparing to upload {len(documents)} documents in {len(batches)} batches")

        for number, batch in enumerate(batches, start=1):
            try:
                self.client.upsert(
                    collection_name=self.collection,
                    points=[self._to_point(doc) for doc in batch],
                    wait=True,
                )
                report.succeeded_batches += 1
                report.written += len(batch)
                logger.info(f"Uploaded batch {number} with {len(batch)} documents")
            except Exception as e:
                error = IndexWriteError(number, str(e))
                logger.error(str(error))
                report.errors.append(error)
            if number < len(batches) and self.pause_seconds > 0:
                self.sleep(self.pause_seconds)

        logger.info(f"Finished uploading {report.written} documents to {self.collection}")
        return report

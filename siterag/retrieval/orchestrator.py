"""Hybrid retrieval: lexical snippets plus graph relations in one bundle."""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, Optional, TypeVar

from siterag.core.config import settings
from siterag.core.schemas import ContextBundle, Relation, Snippet
from siterag.graph.neo4j_client import get_driver
from siterag.graph.query import RelatedConceptQuery
from siterag.search.lexical import LexicalSearch
from siterag.search.qdrant_client import get_client

logger = logging.getLogger(__name__)

T = TypeVar("T")

LexicalSource = Callable[[str], list[Snippet]]
GraphSource = Callable[[str], list[Relation]]


class RetrievalOrchestrator:
    """Queries the index and the graph concurrently and fuses the results.

    Each source has its own timeout. A source that fails or times out
    contributes nothing; the other source's results are still returned.
    Lexical snippets always precede graph relations and each keeps its
    own order. Entries without a source URL are dropped.
    """

    def __init__(
        self,
        lexical: LexicalSource,
        graph: GraphSource,
        lexical_timeout: Optional[float] = None,
        graph_timeout: Optional[float] = None,
    ):
        self.lexical = lexical
        self.graph = graph
        self.lexical_timeout = settings.search_timeout_seconds if lexical_timeout is None else lexical_timeout
        self.graph_timeout = settings.graph_timeout_seconds if graph_timeout is None else graph_timeout

    @staticmethod
    def _collect(name: str, future: "Future[list[T]]", deadline: float) -> list[T]:
        try:
            return future.result(timeout=max(0.0, deadline - time.monotonic()))
        except FutureTimeout:
            future.cancel()
            logger.warning(f"{name} query timed out; continuing without it")
        except Exception as e:
            logger.error(f"{name} query failed: {e}", exc_info=True)
        return []

    def retrieve(self, question: str) -> ContextBundle:
        """Build the context bundle for ``question``."""
        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="retrieve")
        try:
            started = time.monotonic()
            lexical_future = executor.submit(self.lexical, question)
            graph_future = executor.submit(self.graph, question)
            snippets = self._collect("Lexical", lexical_future, started + self.lexical_timeout)
            relations = self._collect("Graph", graph_future, started + self.graph_timeout)
        finally:
            # A stalled source must not hold up the caller
            executor.shutdown(wait=False, cancel_futures=True)

        snippets = [s for s in snippets if s.url]
        relations = [r for r in relations if r.source_url or r.target_url]
        logger.info(f"Retrieved {len(snippets)} snippets and {len(relations)} relations")
        return ContextBundle(snippets=snippets, relations=relations)


def build_orchestrator(index_client=None, graph_driver=None) -> RetrievalOrchestrator:
    """Wire the orchestrator to the configured Qdrant index and Neo4j graph."""
    return RetrievalOrchestrator(
        lexical=LexicalSearch(index_client or get_client()),
        graph=RelatedConceptQuery(graph_driver or get_driver()),
    )


def retrieve(question: str) -> ContextBundle:
    """Caller-facing entry point."""
    return build_orchestrator().retrieve(question)

"""Graph-side retrieval of related concepts."""

import logging
from typing import Optional

from neo4j import READ_ACCESS, Driver, Query

from siterag.core.config import settings
from siterag.core.constants import CONTENT_LABEL, DEFAULT_RELATIONSHIP, RELATED_TO
from siterag.core.schemas import Relation
from siterag.graph.relations import TextSimilarity, cleaned_jaro_winkler

logger = logging.getLogger(__name__)

CANDIDATE_QUERY = f"""
MATCH (n:{CONTENT_LABEL})-[r:{RELATED_TO}]->(m:{CONTENT_LABEL})
WHERE n.text CONTAINS $query OR m.text CONTAINS $query
RETURN n.text AS source,
       r.context AS relationship,
       m.text AS target,
       n.url AS sourceUrl,
       m.url AS targetUrl
"""


def rank_relations(
    records: list[dict],
    similarity: TextSimilarity = cleaned_jaro_winkler,
    threshold: float = 0.6,
    limit: int = 10,
) -> list[Relation]:
    """Score candidate edges, keep those above threshold, best first.

    Confidence is rounded to two decimals before the threshold is applied, so
    every returned confidence is strictly greater than ``threshold``.
    """
    scored = []
    for record in records:
        source = record.get("source") or ""
        target = record.get("target") or ""
        confidence = round(similarity(source, target), 2)
        if confidence <= threshold:
            continue
        scored.append(
            Relation(
                source=source,
                relationship=record.get("relationship") or DEFAULT_RELATIONSHIP,
                target=target,
                source_url=record.get("sourceUrl") or "",
                target_url=record.get("targetUrl") or "",
                confidence=confidence,
            )
        )
    # sorted() is stable, so ties keep store order
    scored.sort(key=lambda rel: rel.confidence, reverse=True)
    return scored[:limit]


class RelatedConceptQuery:
    """Finds RELATED_TO edges whose endpoints mention the question text."""

    def __init__(
        self,
        driver: Driver,
        database: Optional[str] = None,
        similarity: TextSimilarity = cleaned_jaro_winkler,
        threshold: Optional[float] = None,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.driver = driver
        self.database = database or settings.neo4j_database
        self.similarity = similarity
        self.threshold = settings.similarity_threshold if threshold is None else threshold
        self.limit = limit or settings.max_relations
        self.timeout = settings.graph_timeout_seconds if timeout is None else timeout

    def fetch_candidates(self, question: str) -> list[dict]:
        query = Query(CANDIDATE_QUERY, timeout=self.timeout or None)
        with self.driver.session(database=self.database, default_access_mode=READ_ACCESS) as session:
            result = session.run(query, {"query": question})
            return [record.data() for record in result]

    def __call__(self, question: str) -> list[Relation]:
        if not question or not question.strip():
            return []
        candidates = self.fetch_candidates(question)
        relations = rank_relations(candidates, self.similarity, self.threshold, self.limit)
        logger.info(f"Graph query matched {len(candidates)} edges, kept {len(relations)}")
        return relations

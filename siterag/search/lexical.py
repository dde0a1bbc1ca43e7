"""Lexical (BM25) retrieval from the search index."""

import logging
import math
import re
from typing import Optional

from qdrant_client import QdrantClient
from qdrant_client.models import Document

from siterag.core.config import settings
from siterag.core.constants import BM25_VECTOR
from siterag.core.schemas import Snippet

logger = logging.getLogger(__name__)

_WORD = re.compile(r"\w+", re.UNICODE)


def highlight(text: str, question: str, window: int = 80, max_fragments: int = 3) -> Optional[str]:
    """Wrap query terms found in ``text`` with <em> tags.

    Returns up to ``max_fragments`` fragments joined with "...", or None when
    no query term occurs in the text.
    """
    terms = {t.lower() for t in _WORD.findall(question) if len(t) > 2}
    if not terms or not text:
        return None
    pattern = re.compile(r"\b(" + "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True)) + r")\b", re.IGNORECASE)

    fragments = []
    last_end = -1
    for match in pattern.finditer(text):
        if match.start() < last_end:
            continue
        start = max(0, match.start() - window)
        end = min(len(text), match.end() + window)
        fragments.append(pattern.sub(r"<em>\1</em>", text[start:end]).strip())
        last_end = end
        if len(fragments) >= max_fragments:
            break
    return "...".join(fragments) or None


class LexicalSearch:
    """Top-k full-text query, ranked by the index's BM25 scoring."""

    def __init__(
        self,
        client: QdrantClient,
        collection: Optional[str] = None,
        top_k: Optional[int] = None,
        timeout: Optional[float] = None,
        bm25_model: Optional[str] = None,
    ):
        self.client = client
        self.collection = collection or settings.index_name
        self.top_k = top_k or settings.top_k
        self.timeout = settings.search_timeout_seconds if timeout is None else timeout
        self.bm25_model = bm25_model or settings.bm25_model

    def __call__(self, question: str) -> list[Snippet]:
        if not question or not question.strip():
            return []
        response = self.client.query_points(
            collection_name=self.collection,
            query=Document(text=question, model=self.bm25_model),
            using=BM25_VECTOR,
            limit=self.top_k,
            with_payload=True,
            timeout=max(1, math.ceil(self.timeout)) if self.timeout else None,
        )
        points = response.points if hasattr(response, "points") else response

        results = []
        for point in points:
            payload = point.payload or {}
            text = payload.get("text", "")
            results.append(
                Snippet(
                    text=text,
                    url=payload.get("url", ""),
                    highlight=highlight(text, question),
                    score=point.score,
                )
            )
        logger.info(f"Lexical search returned {len(results)} documents")
        return results

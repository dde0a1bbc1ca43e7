"""Pydantic schemas for query-time results."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from siterag.core.constants import CONTEXT_PREVIEW_CHARS


class Snippet(BaseModel):
    """Lexical search hit."""

    text: str
    url: str
    highlight: Optional[str] = None
    score: Optional[float] = None


class Relation(BaseModel):
    """Graph relation between two content nodes."""

    model_config = ConfigDict(populate_by_name=True)

    source: str
    relationship: str
    target: str
    source_url: str = Field("", alias="sourceUrl")
    target_url: str = Field("", alias="targetUrl")
    confidence: float = Field(..., ge=0.0, le=1.0)


class ContextBundle(BaseModel):
    """Fused retrieval result handed to the answer generator. Never persisted."""

    snippets: list[Snippet] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.snippets and not self.relations

    def to_context(self) -> str:
        """Render the bundle as a source-attributed context string."""
        lines = [
            f"Relevant content (from {s.url}): {s.highlight or s.text[:CONTEXT_PREVIEW_CHARS]}"
            for s in self.snippets
        ]
        lines.extend(
            f"Related concept: {r.source} ({r.source_url}) {r.relationship} {r.target} ({r.target_url})"
            for r in self.relations
        )
        return "\n\n".join(lines)

    def sources(self) -> list[dict[str, str]]:
        """Citation list: one entry per snippet and relation."""
        out = [{"text": f"{s.text[:CONTEXT_PREVIEW_CHARS]}...", "url": s.url} for s in self.snippets]
        out.extend(
            {"text": f"{r.source} {r.relationship} {r.target}", "url": r.source_url or r.target_url}
            for r in self.relations
        )
        return out

"""Heuristic relation inference and text similarity.

Both are lexical heuristics, kept behind small interfaces so a different
rule or similarity function can be swapped in without touching ingestion
or query control flow.
"""

import re
import unicodedata
from collections import defaultdict
from typing import Callable, Iterable, Protocol

from siterag.ingestion.models import NormalizedContent

TextSimilarity = Callable[[str, str], float]


class RelationRule(Protocol):
    def related(self, heading: NormalizedContent, body: NormalizedContent) -> bool: ...


class ContainmentRule:
    """A heading relates to body content on the same page that quotes its text."""

    def __init__(self, min_heading_chars: int = 5):
        self.min_heading_chars = min_heading_chars

    def related(self, heading: NormalizedContent, body: NormalizedContent) -> bool:
        return (
            heading.url == body.url
            and heading.id != body.id
            and body.type.is_body
            and len(heading.text) > self.min_heading_chars
            and heading.text in body.text
        )


def infer_pairs(
    headings: Iterable[NormalizedContent],
    content: Iterable[NormalizedContent],
    rule: RelationRule,
) -> list[tuple[str, str]]:
    """Return distinct (heading id, body id) pairs the rule accepts.

    Candidates are grouped by url first; pairs across urls are never produced.
    """
    by_url: dict[str, list[NormalizedContent]] = defaultdict(list)
    for item in content:
        if item.type.is_body:
            by_url[item.url].append(item)

    pairs: list[tuple[str, str]] = []
    seen: set[tuple[str, str]] = set()
    for heading in headings:
        if not heading.type.is_heading:
            continue
        for body in by_url.get(heading.url, ()):
            pair = (heading.id, body.id)
            if pair in seen or heading.url != body.url:
                continue
            if rule.related(heading, body):
                seen.add(pair)
                pairs.append(pair)
    return pairs


def clean_text(text: str) -> str:
    """Lowercase, strip accents and drop everything but letters and digits."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"[^0-9a-z]", "", stripped.lower())


def jaro_similarity(a: str, b: str) -> float:
    if a == b:
        return 1.0
    len_a, len_b = len(a), len(b)
    if not len_a or not len_b:
        return 0.0

    window = max(max(len_a, len_b) // 2 - 1, 0)
    matched_a = [False] * len_a
    matched_b = [False] * len_b
    matches = 0
    for i, ch in enumerate(a):
        lo, hi = max(0, i - window), min(i + window + 1, len_b)
        for j in range(lo, hi):
            if not matched_b[j] and b[j] == ch:
                matched_a[i] = matched_b[j] = True
                matches += 1
                break
    if not matches:
        return 0.0

    transpositions = 0
    j = 0
    for i in range(len_a):
        if not matched_a[i]:
            continue
        while not matched_b[j]:
            j += 1
        if a[i] != b[j]:
            transpositions += 1
        j += 1

    m = float(matches)
    return (m / len_a + m / len_b + (m - transpositions / 2) / m) / 3


def jaro_winkler_similarity(a: str, b: str, prefix_scale: float = 0.1, max_prefix: int = 4) -> float:
    """Jaro-Winkler similarity in [0, 1]."""
    jaro = jaro_similarity(a, b)
    prefix = 0
    for ch_a, ch_b in zip(a[:max_prefix], b[:max_prefix]):
        if ch_a != ch_b:
            break
        prefix += 1
    return jaro + prefix * prefix_scale * (1 - jaro)


def cleaned_jaro_winkler(a: str, b: str) -> float:
    """Default similarity: Jaro-Winkler over case/punctuation-insensitive text."""
    return jaro_winkler_similarity(clean_text(a), clean_text(b))

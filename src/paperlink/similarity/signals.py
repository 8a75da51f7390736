"""Pairwise similarity signals.

Each signal compares two documents along one axis and returns a value in
[0, 1]. Missing metadata never raises; it resolves to a fixed fallback.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import TYPE_CHECKING

from paperlink.models import Document

if TYPE_CHECKING:
    from paperlink.similarity.relations import RelationshipIndex

# exp(-gap / 5): same year = 1.0, 5 years = ~0.37, 10 years = ~0.14
YEAR_DECAY_YEARS = 5.0

# Score when either publication year is unknown
NEUTRAL_YEAR_SCORE = 0.5

RELATED_ROLE_SCORE = 0.5

RELATED_ROLES = frozenset(
    {
        frozenset({"supports", "background"}),
        frozenset({"contradicts", "background"}),
        frozenset({"method", "supports"}),
        frozenset({"method", "contradicts"}),
    }
)

# Common English and academic filler words
STOPWORDS = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "had", "her",
        "was", "one", "our", "out", "has", "have", "been", "were", "being", "their",
        "this", "that", "with", "they", "from", "which", "will", "would", "there",
        "what", "about", "into", "more", "other", "than", "then", "these", "some",
        "could", "them", "also", "only", "such", "both", "most", "very", "just",
        "using", "used", "study", "studies", "research", "results", "method", "methods",
        "based", "however", "therefore", "although", "thus", "show", "shown", "shows",
        "found", "present", "analysis", "data", "effect", "effects", "model", "system",
    }
)  # fmt: skip

_NON_WORD = re.compile(r"[^\w\s]")


def jaccard(a: set, b: set) -> float:
    """Jaccard index, defined as 0 when both sets are empty."""
    if not a and not b:
        return 0.0
    return len(a & b) / len(a | b)


def tokenize(text: str) -> list[str]:
    """Lower-case, strip punctuation, drop short tokens and stopwords."""
    words = _NON_WORD.sub(" ", text.lower()).split()
    return [w for w in words if len(w) > 2 and w not in STOPWORDS]


def tag_similarity(doc_a: Document, doc_b: Document) -> float:
    """Jaccard overlap of the case-insensitive tag sets."""
    return jaccard(doc_a.tag_set, doc_b.tag_set)


def token_counts(doc: Document) -> Counter[str]:
    """Token frequencies of title + abstract."""
    return Counter(tokenize(f"{doc.title} {doc.abstract}"))


def text_similarity(doc_a: Document, doc_b: Document) -> float:
    """Weighted overlap of title + abstract token frequencies.

    sum(min(freq_a, freq_b)) / sum(max(freq_a, freq_b)) over all tokens, so
    terms repeated in both documents count for more than a single shared word.
    """
    return frequency_overlap(token_counts(doc_a), token_counts(doc_b))


def frequency_overlap(freq_a: Counter[str], freq_b: Counter[str]) -> float:
    """Weighted overlap of two precomputed token frequency maps."""
    if not freq_a or not freq_b:
        return 0.0

    overlap = sum((freq_a & freq_b).values())
    total = sum((freq_a | freq_b).values())
    return overlap / total if total > 0 else 0.0


def year_proximity(
    doc_a: Document,
    doc_b: Document,
    decay: float = YEAR_DECAY_YEARS,
) -> float:
    """Exponential decay over the gap in publication years."""
    if doc_a.year is None or doc_b.year is None:
        return NEUTRAL_YEAR_SCORE
    return math.exp(-abs(doc_a.year - doc_b.year) / decay)


def role_similarity(doc_a: Document, doc_b: Document) -> float:
    """1.0 for the same role, 0.5 for a related pair of roles, else 0."""
    if doc_a.role == doc_b.role:
        return 1.0
    if frozenset({doc_a.role, doc_b.role}) in RELATED_ROLES:
        return RELATED_ROLE_SCORE
    return 0.0


def connection_overlap(doc_a: Document, doc_b: Document, index: RelationshipIndex) -> float:
    """Bibliographic-coupling-style overlap of explicit neighbors.

    Neighbor sets exclude both documents themselves, so a direct link
    between A and B neither helps nor hurts.
    """
    exclude = {doc_a.id, doc_b.id}
    neighbors_a = index.neighbors(doc_a.id) - exclude
    neighbors_b = index.neighbors(doc_b.id) - exclude
    return jaccard(neighbors_a, neighbors_b)

"""Composite similarity: a weighted sum of the five signals."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Mapping, Sequence

from paperlink.config import SimilarityWeights, WeightsLike, resolve_weights
from paperlink.models import (
    Document,
    MetadataQuality,
    SimilarityBreakdown,
    SimilarityResult,
)
from paperlink.similarity.relations import RelationshipIndex
from paperlink.similarity.signals import (
    connection_overlap,
    frequency_overlap,
    role_similarity,
    tag_similarity,
    text_similarity,
    year_proximity,
)

logger = logging.getLogger(__name__)


def score_pair(
    doc_a: Document,
    doc_b: Document,
    index: RelationshipIndex,
    weights: SimilarityWeights,
    tokens: Mapping[str, Counter[str]] | None = None,
) -> SimilarityResult:
    """Score one pair against a prebuilt index and already-validated weights.

    Batch operations call this in their inner loop with ``tokens``, a map of
    document id to :func:`token_counts` built once per pass; use
    :func:`compute_pair_similarity` for one-off comparisons.
    """
    if tokens is None:
        text = text_similarity(doc_a, doc_b)
    else:
        text = frequency_overlap(tokens[doc_a.id], tokens[doc_b.id])
    breakdown = SimilarityBreakdown(
        tag=tag_similarity(doc_a, doc_b),
        text=text,
        year=year_proximity(doc_a, doc_b),
        role=role_similarity(doc_a, doc_b),
        connection=connection_overlap(doc_a, doc_b, index),
    )
    score = (
        weights.tag * breakdown.tag
        + weights.text * breakdown.text
        + weights.year * breakdown.year
        + weights.role * breakdown.role
        + weights.connection * breakdown.connection
    )
    return SimilarityResult(id_a=doc_a.id, id_b=doc_b.id, score=score, breakdown=breakdown)


def compute_pair_similarity(
    doc_a: Document,
    doc_b: Document,
    relationships: Iterable[Sequence[str]] = (),
    weights: WeightsLike = None,
) -> SimilarityResult:
    """Composite similarity between two documents.

    Args:
        doc_a: First document.
        doc_b: Second document.
        relationships: Explicit (source_id, target_id) links, used for
            connection overlap. Endpoints outside the two documents are
            expected here and are not validated.
        weights: Signal weights; ``None`` uses the defaults
            (tag 0.25, text 0.30, year 0.15, role 0.15, connection 0.15).

    Returns:
        SimilarityResult with the weighted score and per-signal breakdown.

    Raises:
        ConfigurationError: If ``weights`` is malformed.
    """
    resolved = resolve_weights(weights)
    return score_pair(doc_a, doc_b, RelationshipIndex(relationships), resolved)


def analyze_metadata_quality(documents: Sequence[Document]) -> MetadataQuality:
    """Summarize how much usable metadata the collection has.

    Useful as a caveat next to similarity output: a collection with no
    abstracts or tags leans almost entirely on year and role.
    """
    if not documents:
        return MetadataQuality(0.0, 0.0, 0.0, "poor")

    n = len(documents)
    text_coverage = sum(1 for d in documents if d.has_text_content) / n
    tag_coverage = sum(1 for d in documents if d.has_tags) / n
    year_coverage = sum(1 for d in documents if d.year is not None) / n

    avg_coverage = text_coverage * 0.4 + tag_coverage * 0.3 + year_coverage * 0.3
    if avg_coverage >= 0.8:
        quality = "excellent"
    elif avg_coverage >= 0.5:
        quality = "good"
    elif avg_coverage >= 0.25:
        quality = "limited"
    else:
        quality = "poor"

    logger.debug(
        "Metadata coverage: text=%.2f tags=%.2f year=%.2f -> %s",
        text_coverage,
        tag_coverage,
        year_coverage,
        quality,
    )
    return MetadataQuality(text_coverage, tag_coverage, year_coverage, quality)

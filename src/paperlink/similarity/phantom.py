"""Phantom edges: inferred links between similar, unlinked documents.

Candidate pairs are walked from most to least similar and accepted only
while both endpoints are under a per-document cap. This is a greedy
approximation of a degree-bounded selection; it keeps a few strongly
similar hubs from absorbing every inferred link while still preferring the
best pair when capacity is scarce.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Sequence

from paperlink.config import WeightsLike, check_count, check_threshold, resolve_weights
from paperlink.models import Document, PhantomEdge
from paperlink.similarity.matrix import iter_pair_scores
from paperlink.similarity.relations import validate_collection

logger = logging.getLogger(__name__)


def generate_phantom_edges(
    documents: Sequence[Document],
    relationships: Iterable[Sequence[str]] = (),
    min_similarity: float = 0.3,
    max_per_document: int = 3,
    weights: WeightsLike = None,
) -> list[PhantomEdge]:
    """Infer edges between documents that are similar but not linked.

    Args:
        documents: The collection snapshot.
        relationships: Explicit (source_id, target_id) links; linked pairs
            never receive a phantom edge.
        min_similarity: Minimum composite score for a candidate pair.
        max_per_document: Maximum phantom edges touching any one document.
        weights: Signal weights override.

    Returns:
        Accepted edges in acceptance order (descending similarity, ties
        broken by the ordered id pair).

    Raises:
        ConfigurationError: If a threshold or the weights are malformed.
        CollectionIntegrityError: On duplicate ids or dangling relationships.
    """
    min_similarity = check_threshold("min_similarity", min_similarity)
    check_count("max_per_document", max_per_document)
    resolved = resolve_weights(weights)
    index = validate_collection(documents, relationships)

    candidates = [
        result
        for _, _, result in iter_pair_scores(documents, index, resolved, skip_linked=True)
        if result.score >= min_similarity
    ]
    candidates.sort(key=lambda r: (-r.score, r.pair))

    degree: Counter[str] = Counter()
    edges: list[PhantomEdge] = []
    for result in candidates:
        id_a, id_b = result.pair
        if degree[id_a] >= max_per_document or degree[id_b] >= max_per_document:
            continue
        edges.append(PhantomEdge.between(id_a, id_b, result.score))
        degree[id_a] += 1
        degree[id_b] += 1

    logger.info(
        "Accepted %d of %d phantom candidates (threshold=%.2f, cap=%d)",
        len(edges),
        len(candidates),
        min_similarity,
        max_per_document,
    )
    return edges

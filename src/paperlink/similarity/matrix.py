"""Pairwise similarity over a whole collection."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Mapping, Sequence

import numpy as np
from scipy import sparse
from tqdm import tqdm

from paperlink.config import (
    SimilarityWeights,
    WeightsLike,
    check_count,
    check_threshold,
    resolve_weights,
)
from paperlink.models import Document, SimilarityResult, pair_key
from paperlink.similarity.relations import RelationshipIndex, validate_collection
from paperlink.similarity.scoring import score_pair
from paperlink.similarity.signals import token_counts

logger = logging.getLogger(__name__)

SimilarityMatrix = dict[tuple[str, str], SimilarityResult]


def iter_pair_scores(
    documents: Sequence[Document],
    index: RelationshipIndex,
    weights: SimilarityWeights,
    skip_linked: bool = False,
    show_progress: bool = False,
) -> Iterator[tuple[int, int, SimilarityResult]]:
    """Yield ``(i, j, result)`` for every pair ``i < j`` in input order.

    Args:
        skip_linked: Skip pairs already joined by an explicit relationship.
        show_progress: Show a tqdm bar over the outer loop.
    """
    tokens = {doc.id: token_counts(doc) for doc in documents}
    n = len(documents)
    rows = tqdm(range(n), desc="Scoring pairs", disable=not show_progress)
    for i in rows:
        doc_a = documents[i]
        for j in range(i + 1, n):
            doc_b = documents[j]
            if skip_linked and index.are_linked(doc_a.id, doc_b.id):
                continue
            yield i, j, score_pair(doc_a, doc_b, index, weights, tokens)


def build_similarity_matrix(
    documents: Sequence[Document],
    relationships: Iterable[Sequence[str]] = (),
    weights: WeightsLike = None,
    show_progress: bool = False,
) -> SimilarityMatrix:
    """Score every unordered pair in the collection.

    This is O(N^2) in the number of documents; bound N before calling on
    large collections.

    Args:
        documents: The collection snapshot.
        relationships: Explicit (source_id, target_id) links.
        weights: Signal weights override.
        show_progress: Show a progress bar.

    Returns:
        Dict keyed by :func:`~paperlink.models.pair_key` of the two ids.
        Use :func:`lookup` for order-independent access.

    Raises:
        ConfigurationError: If ``weights`` is malformed.
        CollectionIntegrityError: On duplicate ids or dangling relationships.
    """
    resolved = resolve_weights(weights)
    index = validate_collection(documents, relationships)

    matrix: SimilarityMatrix = {}
    for _, _, result in iter_pair_scores(documents, index, resolved, show_progress=show_progress):
        matrix[result.pair] = result

    logger.info("Scored %d pairs across %d documents", len(matrix), len(documents))
    return matrix


def lookup(
    matrix: Mapping[tuple[str, str], SimilarityResult], id_a: str, id_b: str
) -> SimilarityResult | None:
    """Fetch a pair from a similarity matrix regardless of argument order."""
    return matrix.get(pair_key(id_a, id_b))


def top_similar(
    target_id: str,
    documents: Sequence[Document],
    relationships: Iterable[Sequence[str]] = (),
    k: int = 5,
    min_similarity: float = 0.2,
    weights: WeightsLike = None,
) -> list[SimilarityResult]:
    """Most similar documents to one target, best first.

    Ties keep the collection's iteration order.

    Args:
        target_id: Id of the document to compare against.
        documents: The collection snapshot (may include the target).
        relationships: Explicit (source_id, target_id) links.
        k: Maximum number of results.
        min_similarity: Drop results scoring below this.
        weights: Signal weights override.

    Returns:
        Up to ``k`` results with ``id_a == target_id``, sorted by descending
        score. Empty if the target is not in ``documents``.
    """
    check_count("k", k)
    min_similarity = check_threshold("min_similarity", min_similarity)
    resolved = resolve_weights(weights)
    index = validate_collection(documents, relationships)

    target = next((d for d in documents if d.id == target_id), None)
    if target is None:
        logger.warning("Target document %s not in collection", target_id)
        return []

    target_tokens = token_counts(target)
    results = []
    for doc in documents:
        if doc.id == target_id:
            continue
        tokens = {target_id: target_tokens, doc.id: token_counts(doc)}
        result = score_pair(target, doc, index, resolved, tokens)
        if result.score >= min_similarity:
            results.append(result)

    results.sort(key=lambda r: r.score, reverse=True)
    logger.debug(
        "%d of %d documents above %.2f for %s",
        len(results),
        len(documents) - 1,
        min_similarity,
        target_id,
    )
    return results[:k]


def matrix_to_sparse(
    matrix: Mapping[tuple[str, str], SimilarityResult],
    documents: Sequence[Document],
    min_similarity: float = 0.0,
) -> tuple[dict[str, int], sparse.csr_matrix]:
    """Convert a similarity matrix into a symmetric sparse score matrix.

    Args:
        matrix: Output of :func:`build_similarity_matrix`.
        documents: Fixes the row/column order.
        min_similarity: Leave out entries below this score.

    Returns:
        Tuple of (id_to_index, scores) where ``scores[i, j]`` is the
        composite similarity of documents i and j (zero diagonal).
    """
    min_similarity = check_threshold("min_similarity", min_similarity)
    id_to_index = {doc.id: i for i, doc in enumerate(documents)}
    n = len(documents)

    rows: list[int] = []
    cols: list[int] = []
    values: list[float] = []
    for (id_a, id_b), result in matrix.items():
        if result.score < min_similarity or result.score == 0.0:
            continue
        i, j = id_to_index.get(id_a), id_to_index.get(id_b)
        if i is None or j is None:
            continue
        rows.extend((i, j))
        cols.extend((j, i))
        values.extend((result.score, result.score))

    data = np.asarray(values, dtype=np.float64)
    coords = (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))
    scores = sparse.csr_matrix((data, coords), shape=(n, n))
    logger.debug("Sparse similarity matrix: %d x %d, %d non-zeros", n, n, scores.nnz)
    return id_to_index, scores

"""Cluster suggestions via single-threshold agglomerative merging.

Pairs at or above the threshold are merged strongest-first with a
union-find over document indices (union by size). Clusters smaller than
the minimum size are dropped as noise.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from typing import Iterable, Sequence

import numpy as np

from paperlink.config import (
    SimilarityWeights,
    WeightsLike,
    check_count,
    check_threshold,
    resolve_weights,
)
from paperlink.models import AutoCluster, ClusterAssignment, Document, pair_key
from paperlink.similarity.matrix import iter_pair_scores
from paperlink.similarity.relations import RelationshipIndex, validate_collection

logger = logging.getLogger(__name__)

# Words too generic to name a cluster by
_NAMING_STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "from", "as", "is", "was", "are", "were", "been", "be",
        "have", "has", "had", "do", "does", "did", "will", "would", "could", "should",
        "may", "might", "must", "shall", "can", "need", "dare", "ought", "used",
        "using", "based", "study", "analysis", "approach", "method", "methods",
        "results", "effect", "effects", "impact", "role", "new", "novel",
    }
)  # fmt: skip

_NON_WORD = re.compile(r"[^\w\s]")


class _DisjointSet:
    """Union-find over indices 0..n-1 with union by size."""

    def __init__(self, n: int):
        self.parent = np.arange(n, dtype=np.int64)
        self.size = np.ones(n, dtype=np.int64)

    def find(self, i: int) -> int:
        parent = self.parent
        while parent[i] != i:
            parent[i] = parent[parent[i]]  # path halving
            i = int(parent[i])
        return i

    def union(self, i: int, j: int) -> bool:
        """Merge the sets of i and j. On equal sizes, j's set joins i's."""
        root_i, root_j = self.find(i), self.find(j)
        if root_i == root_j:
            return False
        if self.size[root_i] < self.size[root_j]:
            root_i, root_j = root_j, root_i
        self.parent[root_j] = root_i
        self.size[root_i] += self.size[root_j]
        return True


def _partition(
    documents: Sequence[Document],
    index: RelationshipIndex,
    weights: SimilarityWeights,
    min_similarity: float,
    min_cluster_size: int,
    pair_scores: dict[tuple[str, str], float] | None = None,
) -> list[list[int]]:
    """Merge documents and return surviving clusters as lists of indices.

    Clusters are ordered by the first member's position in ``documents``,
    members likewise. If ``pair_scores`` is given, every pair's score is
    recorded there.
    """
    strong: list[tuple[float, tuple[str, str], int, int]] = []
    for i, j, result in iter_pair_scores(documents, index, weights):
        if pair_scores is not None:
            pair_scores[result.pair] = result.score
        if result.score >= min_similarity:
            strong.append((result.score, result.pair, i, j))
    strong.sort(key=lambda s: (-s[0], s[1]))

    forest = _DisjointSet(len(documents))
    merges = sum(1 for _, _, i, j in strong if forest.union(i, j))
    logger.debug("%d strong pairs produced %d merges", len(strong), merges)

    members: dict[int, list[int]] = {}
    for i in range(len(documents)):
        members.setdefault(forest.find(i), []).append(i)
    return [group for group in members.values() if len(group) >= min_cluster_size]


def suggest_clusters(
    documents: Sequence[Document],
    relationships: Iterable[Sequence[str]] = (),
    min_cluster_size: int = 2,
    min_similarity: float = 0.4,
    weights: WeightsLike = None,
) -> ClusterAssignment:
    """Group documents into suggested clusters.

    Args:
        documents: The collection snapshot.
        relationships: Explicit (source_id, target_id) links.
        min_cluster_size: Smallest cluster worth reporting.
        min_similarity: Pairs below this score never cause a merge.
        weights: Signal weights override.

    Returns:
        Mapping of document id to cluster id, covering only documents in
        clusters of at least ``min_cluster_size``. Cluster ids are numbered
        from 0 in discovery order and are not stable across calls.

    Raises:
        ConfigurationError: If a threshold or the weights are malformed.
        CollectionIntegrityError: On duplicate ids or dangling relationships.
    """
    check_count("min_cluster_size", min_cluster_size, minimum=1)
    min_similarity = check_threshold("min_similarity", min_similarity)
    resolved = resolve_weights(weights)
    index = validate_collection(documents, relationships)

    if len(documents) < min_cluster_size:
        return {}

    clusters = _partition(documents, index, resolved, min_similarity, min_cluster_size)
    assignment: ClusterAssignment = {}
    for cluster_id, group in enumerate(clusters):
        for i in group:
            assignment[documents[i].id] = cluster_id

    logger.info(
        "Found %d clusters covering %d of %d documents",
        len(clusters),
        len(assignment),
        len(documents),
    )
    return assignment


# ------------------------------------------------------------------
# Described clusters
# ------------------------------------------------------------------


def _common_title_terms(docs: Sequence[Document], limit: int = 3) -> list[str]:
    """Title words shared by at least half the cluster (and at least two docs)."""
    counts: Counter[str] = Counter()
    for doc in docs:
        words = _NON_WORD.sub(" ", doc.title.lower()).split()
        # once per document, in first-seen order
        terms = dict.fromkeys(w for w in words if len(w) > 3 and w not in _NAMING_STOPWORDS)
        counts.update(list(terms))

    min_occurrence = max(2, math.floor(len(docs) * 0.5))
    return [w for w, c in counts.most_common() if c >= min_occurrence][:limit]


def _dominant_role(docs: Sequence[Document]) -> str:
    counts = Counter(doc.role for doc in docs)
    return counts.most_common(1)[0][0] if counts else "other"


def _year_range(docs: Sequence[Document]) -> tuple[int, int] | None:
    years = [doc.year for doc in docs if doc.year is not None]
    return (min(years), max(years)) if years else None


def _cluster_name(docs: Sequence[Document]) -> str:
    terms = _common_title_terms(docs)
    if terms:
        return " & ".join(term.capitalize() for term in terms)

    role = _dominant_role(docs)
    years = _year_range(docs)
    if years:
        return f"{role} ({years[0]}-{years[1]})"
    return f"{len(docs)} {role}"


def _representative(docs: Sequence[Document], index: RelationshipIndex) -> str:
    """Most cited member, then the one in the most relationship records."""
    best = sorted(docs, key=lambda d: (-d.citation_count, -index.link_count(d.id)))
    return best[0].id


def generate_auto_clusters(
    documents: Sequence[Document],
    relationships: Iterable[Sequence[str]] = (),
    min_cluster_size: int = 2,
    min_similarity: float = 0.45,
    max_clusters: int = 10,
    weights: WeightsLike = None,
) -> list[AutoCluster]:
    """Suggest clusters with names, representatives, and cohesion stats.

    Uses the same merge as :func:`suggest_clusters` with a slightly
    stricter default threshold.

    Returns:
        Up to ``max_clusters`` clusters, most-cited first.
    """
    check_count("min_cluster_size", min_cluster_size, minimum=1)
    min_similarity = check_threshold("min_similarity", min_similarity)
    check_count("max_clusters", max_clusters)
    resolved = resolve_weights(weights)
    index = validate_collection(documents, relationships)

    if len(documents) < min_cluster_size:
        return []

    pair_scores: dict[tuple[str, str], float] = {}
    groups = _partition(
        documents, index, resolved, min_similarity, min_cluster_size, pair_scores=pair_scores
    )

    clusters: list[AutoCluster] = []
    for n, group in enumerate(groups):
        docs = [documents[i] for i in group]
        sims = [
            pair_scores[pair_key(docs[a].id, docs[b].id)]
            for a in range(len(docs))
            for b in range(a + 1, len(docs))
        ]
        clusters.append(
            AutoCluster(
                id=f"auto_cluster_{n}",
                document_ids=[d.id for d in docs],
                representative_id=_representative(docs, index),
                name=_cluster_name(docs),
                avg_similarity=sum(sims) / len(sims) if sims else 0.0,
                dominant_role=_dominant_role(docs),
                year_range=_year_range(docs),
                total_citations=sum(d.citation_count for d in docs),
            )
        )

    clusters.sort(key=lambda c: c.total_citations, reverse=True)
    logger.info("Generated %d auto-clusters (keeping %d)", len(clusters), max_clusters)
    return clusters[:max_clusters]

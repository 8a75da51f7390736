"""Tests for cluster suggestion and described auto-clusters."""

from __future__ import annotations

import pytest

from paperlink.config import ConfigurationError
from paperlink.models import Document
from paperlink.similarity.clustering import (
    _DisjointSet,
    generate_auto_clusters,
    suggest_clusters,
)
from paperlink.similarity.relations import DanglingRelationshipError

# ---------------------------------------------------------------------------
# Fixtures: synthetic collections
# ---------------------------------------------------------------------------


def _tagged_group(prefix: str, tag: str, year: int, role: str, n: int = 3) -> list[Document]:
    """n documents sharing tag, year and role (pairwise score 0.55)."""
    return [
        Document(id=f"{prefix}{i}", title=f"{prefix}word{i}", tags=[tag], year=year, role=role)
        for i in range(n)
    ]


def _outlier(doc_id: str = "outlier") -> Document:
    return Document(id=doc_id, title="unrelated", tags=["y"], year=1900, role="other")


def _zebrafish_group() -> list[Document]:
    titles = [
        "Zebrafish heart regeneration",
        "Zebrafish fin regeneration",
        "Zebrafish retina regeneration",
    ]
    return [
        Document(
            id=f"zf{i}",
            title=title,
            tags=["zebrafish"],
            year=2020,
            role="method",
            citation_count=citations,
        )
        for i, (title, citations) in enumerate(zip(titles, [10, 50, 5]))
    ]


# ---------------------------------------------------------------------------
# Tests: _DisjointSet
# ---------------------------------------------------------------------------


class TestDisjointSet:
    def test_singletons(self):
        forest = _DisjointSet(3)
        assert [forest.find(i) for i in range(3)] == [0, 1, 2]

    def test_union(self):
        forest = _DisjointSet(4)
        assert forest.union(0, 1)
        assert forest.union(2, 3)
        assert forest.union(1, 3)
        assert len({forest.find(i) for i in range(4)}) == 1

    def test_repeat_union_is_noop(self):
        forest = _DisjointSet(2)
        assert forest.union(0, 1)
        assert not forest.union(1, 0)

    def test_equal_sizes_attach_second_to_first(self):
        forest = _DisjointSet(2)
        forest.union(0, 1)
        assert forest.find(1) == 0

    def test_smaller_set_joins_larger(self):
        forest = _DisjointSet(3)
        forest.union(1, 2)
        forest.union(0, 1)
        assert forest.find(0) == 1


# ---------------------------------------------------------------------------
# Tests: suggest_clusters
# ---------------------------------------------------------------------------


class TestSuggestClusters:
    def test_one_group_and_an_outlier(self):
        docs = _tagged_group("a", "x", 2015, "supports") + [_outlier()]
        assignment = suggest_clusters(docs, [], min_cluster_size=2, min_similarity=0.4)
        assert assignment == {"a0": 0, "a1": 0, "a2": 0}
        assert "outlier" not in assignment

    def test_two_groups_numbered_by_first_member(self):
        docs = (
            [_outlier()]
            + _tagged_group("a", "x", 2015, "supports")
            + _tagged_group("b", "z", 1950, "method", n=2)
        )
        assignment = suggest_clusters(docs, [])
        assert {assignment[d] for d in ("a0", "a1", "a2")} == {0}
        assert {assignment[d] for d in ("b0", "b1")} == {1}

    def test_min_size_drops_small_cluster(self):
        docs = _tagged_group("a", "x", 2015, "supports") + _tagged_group(
            "b", "z", 1950, "method", n=2
        )
        assignment = suggest_clusters(docs, [], min_cluster_size=3)
        assert set(assignment) == {"a0", "a1", "a2"}
        assert set(assignment.values()) == {0}

    def test_clusters_meet_min_size(self, sample_documents, sample_relationships):
        assignment = suggest_clusters(
            sample_documents, sample_relationships, min_cluster_size=2, min_similarity=0.3
        )
        sizes: dict[int, int] = {}
        for cluster_id in assignment.values():
            sizes[cluster_id] = sizes.get(cluster_id, 0) + 1
        assert all(size >= 2 for size in sizes.values())

    def test_threshold_above_every_score(self):
        docs = _tagged_group("a", "x", 2015, "supports")
        assert suggest_clusters(docs, [], min_similarity=0.9) == {}

    def test_fewer_documents_than_min_size(self):
        docs = _tagged_group("a", "x", 2015, "supports", n=2)
        assert suggest_clusters(docs, [], min_cluster_size=3) == {}

    def test_empty_collection(self):
        assert suggest_clusters([], []) == {}

    def test_min_size_of_one_keeps_singletons(self):
        docs = _tagged_group("a", "x", 2015, "supports", n=2) + [_outlier()]
        assignment = suggest_clusters(docs, [], min_cluster_size=1)
        assert assignment == {"a0": 0, "a1": 0, "outlier": 1}

    def test_zero_min_size_rejected(self):
        with pytest.raises(ConfigurationError):
            suggest_clusters(_tagged_group("a", "x", 2015, "supports"), [], min_cluster_size=0)

    def test_deterministic(self, sample_documents, sample_relationships):
        first = suggest_clusters(sample_documents, sample_relationships, min_similarity=0.3)
        second = suggest_clusters(sample_documents, sample_relationships, min_similarity=0.3)
        assert first == second

    def test_dangling_relationship_raises(self):
        with pytest.raises(DanglingRelationshipError):
            suggest_clusters(_tagged_group("a", "x", 2015, "supports"), [("a0", "ghost")])


# ---------------------------------------------------------------------------
# Tests: generate_auto_clusters
# ---------------------------------------------------------------------------


class TestGenerateAutoClusters:
    def test_named_by_shared_title_terms(self):
        clusters = generate_auto_clusters(_zebrafish_group() + [_outlier()], [])
        assert len(clusters) == 1
        cluster = clusters[0]
        assert cluster.id == "auto_cluster_0"
        assert cluster.name == "Zebrafish & Regeneration"
        assert cluster.document_ids == ["zf0", "zf1", "zf2"]
        assert cluster.size == 3

    def test_stats(self):
        cluster = generate_auto_clusters(_zebrafish_group(), [])[0]
        assert cluster.representative_id == "zf1"
        assert cluster.total_citations == 65
        assert cluster.dominant_role == "method"
        assert cluster.year_range == (2020, 2020)
        assert 0.55 < cluster.avg_similarity <= 1.0

    def test_representative_counts_repeated_relationships(self):
        # a1 has three records to one neighbor, a2 two records to two neighbors
        docs = _tagged_group("a", "x", 2015, "supports") + [
            Document(id="hub1", title="hubone"),
            Document(id="hub2", title="hubtwo"),
        ]
        relationships = [
            ("a1", "hub1"),
            ("hub1", "a1"),
            ("a1", "hub1"),
            ("a2", "hub1"),
            ("a2", "hub2"),
        ]
        cluster = generate_auto_clusters(docs, relationships)[0]
        assert cluster.document_ids == ["a0", "a1", "a2"]
        assert cluster.representative_id == "a1"

    def test_representative_falls_back_to_relationships(self):
        docs = _tagged_group("a", "x", 2015, "supports")
        extra = Document(id="hub", title="hub paper")
        cluster = generate_auto_clusters(docs + [extra], [("a2", "hub")])[0]
        assert cluster.representative_id == "a2"

    def test_fallback_name_uses_role_and_years(self):
        clusters = generate_auto_clusters(_tagged_group("b", "z", 1950, "method"), [])
        assert clusters[0].name == "method (1950-1950)"

    def test_sorted_by_citations(self):
        low = _tagged_group("a", "x", 2015, "supports")
        clusters = generate_auto_clusters(low + _zebrafish_group(), [])
        assert [c.total_citations for c in clusters] == [65, 0]
        # ids keep discovery order
        assert [c.id for c in clusters] == ["auto_cluster_1", "auto_cluster_0"]

    def test_max_clusters(self):
        docs = _tagged_group("a", "x", 2015, "supports") + _zebrafish_group()
        clusters = generate_auto_clusters(docs, [], max_clusters=1)
        assert len(clusters) == 1
        assert clusters[0].total_citations == 65

    def test_to_dict(self):
        data = generate_auto_clusters(_zebrafish_group(), [])[0].to_dict()
        assert data["name"] == "Zebrafish & Regeneration"
        assert data["document_ids"] == ["zf0", "zf1", "zf2"]

    def test_empty(self):
        assert generate_auto_clusters([], []) == []

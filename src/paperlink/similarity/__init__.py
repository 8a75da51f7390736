"""Paper similarity, phantom-edge generation, and cluster suggestions."""

from paperlink.similarity.clustering import generate_auto_clusters, suggest_clusters
from paperlink.similarity.matrix import (
    build_similarity_matrix,
    lookup,
    matrix_to_sparse,
    top_similar,
)
from paperlink.similarity.phantom import generate_phantom_edges
from paperlink.similarity.relations import (
    CollectionIntegrityError,
    DanglingRelationshipError,
    DuplicateDocumentError,
    RelationshipIndex,
)
from paperlink.similarity.scoring import analyze_metadata_quality, compute_pair_similarity

__all__ = [
    "CollectionIntegrityError",
    "DanglingRelationshipError",
    "DuplicateDocumentError",
    "RelationshipIndex",
    "analyze_metadata_quality",
    "build_similarity_matrix",
    "compute_pair_similarity",
    "generate_auto_clusters",
    "generate_phantom_edges",
    "lookup",
    "matrix_to_sparse",
    "suggest_clusters",
    "top_similar",
]

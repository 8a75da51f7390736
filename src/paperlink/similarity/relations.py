"""Lookup structures over the explicit relationship set."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Iterable, Sequence

from paperlink.models import Document, Relationship, pair_key

logger = logging.getLogger(__name__)

_EMPTY: frozenset[str] = frozenset()


class CollectionIntegrityError(ValueError):
    """Documents and relationships do not describe a consistent collection."""


class DanglingRelationshipError(CollectionIntegrityError):
    """A relationship references a document id missing from the collection."""

    def __init__(self, missing_ids: Iterable[str]):
        self.missing_ids = sorted(set(missing_ids))
        preview = ", ".join(self.missing_ids[:10])
        more = f" (+{len(self.missing_ids) - 10} more)" if len(self.missing_ids) > 10 else ""
        super().__init__(f"Relationships reference unknown documents: {preview}{more}")


class DuplicateDocumentError(CollectionIntegrityError):
    """Two documents in the collection share an id."""


class RelationshipIndex:
    """Undirected view of the explicit relationships.

    Built once per computation pass so that neighbor lookups and
    "already linked?" checks are O(1).
    """

    __slots__ = ("_neighbors", "_pairs", "_link_counts")

    def __init__(self, relationships: Iterable[Sequence[str]] = ()):
        self._neighbors: dict[str, set[str]] = defaultdict(set)
        self._pairs: set[tuple[str, str]] = set()
        self._link_counts: Counter[str] = Counter()
        for source_id, target_id in (Relationship(*rel) for rel in relationships):
            self._neighbors[source_id].add(target_id)
            self._neighbors[target_id].add(source_id)
            self._pairs.add(pair_key(source_id, target_id))
            self._link_counts[source_id] += 1
            self._link_counts[target_id] += 1

    def __len__(self) -> int:
        return len(self._pairs)

    def neighbors(self, doc_id: str) -> set[str] | frozenset[str]:
        """Ids directly linked to ``doc_id`` in either direction."""
        return self._neighbors.get(doc_id, _EMPTY)

    def link_count(self, doc_id: str) -> int:
        """Relationship records touching ``doc_id``, repeats included."""
        return self._link_counts[doc_id]

    def are_linked(self, id_a: str, id_b: str) -> bool:
        return pair_key(id_a, id_b) in self._pairs

    def document_ids(self) -> set[str]:
        """Every id that appears as an endpoint."""
        return set(self._neighbors)


def validate_collection(
    documents: Sequence[Document],
    relationships: Iterable[Sequence[str]],
) -> RelationshipIndex:
    """Index the relationships and check them against the documents.

    Returns:
        The relationship index for this pass.

    Raises:
        DuplicateDocumentError: If two documents share an id.
        DanglingRelationshipError: If a relationship endpoint is not a document.
    """
    seen: set[str] = set()
    duplicates: set[str] = set()
    for doc in documents:
        if doc.id in seen:
            duplicates.add(doc.id)
        seen.add(doc.id)
    if duplicates:
        raise DuplicateDocumentError(f"Duplicate document ids: {', '.join(sorted(duplicates))}")

    index = RelationshipIndex(relationships)
    missing = index.document_ids() - seen
    if missing:
        raise DanglingRelationshipError(missing)

    logger.debug("Indexed %d relationships over %d documents", len(index), len(documents))
    return index

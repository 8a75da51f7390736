"""Core data models for paperlink."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple, Optional

# Categorical roles a document can play relative to the collection's thesis
ROLES = ("supports", "contradicts", "method", "background", "other")


class InvalidDocumentError(ValueError):
    """A document record with a missing id or a malformed field."""


def pair_key(id_a: str, id_b: str) -> tuple[str, str]:
    """Canonical key for an unordered pair of document ids."""
    return (id_a, id_b) if id_a <= id_b else (id_b, id_a)


@dataclass
class Document:
    """A paper in the collection, as supplied by the document store.

    The engine never mutates documents; they are a read-only snapshot for
    the duration of one call.
    """

    id: str
    title: str = ""
    abstract: str = ""
    tags: list[str] = field(default_factory=list)
    year: Optional[int] = None
    role: str = "other"
    citation_count: int = 0

    def __post_init__(self):
        if not self.id:
            raise InvalidDocumentError("Document must have an id")
        if self.role not in ROLES:
            raise InvalidDocumentError(f"Unknown role {self.role!r} for document {self.id}")
        year = self.year
        if year is not None and (isinstance(year, bool) or not isinstance(year, int)):
            raise InvalidDocumentError(
                f"Year must be an integer or null for document {self.id}, got {year!r}"
            )
        # A bare string would otherwise split into single-character tags
        tags = self.tags
        if not isinstance(tags, (list, tuple)) or not all(isinstance(t, str) for t in tags):
            raise InvalidDocumentError(
                f"Tags must be a list of strings for document {self.id}, got {self.tags!r}"
            )
        self.tags = list(self.tags)

    @property
    def tag_set(self) -> set[str]:
        """Lower-cased tags (tags compare case-insensitively)."""
        return {t.lower() for t in self.tags}

    @property
    def has_text_content(self) -> bool:
        """Whether the abstract is long enough to be a useful text signal."""
        return bool(self.abstract) and len(self.abstract) > 50

    @property
    def has_tags(self) -> bool:
        return bool(self.tags)

    @classmethod
    def from_dict(cls, d: dict) -> Document:
        return cls(
            id=d["id"],
            title=d.get("title") or "",
            abstract=d.get("abstract") or "",
            tags=d.get("tags") or [],
            year=d.get("year"),
            role=d.get("role") or "other",
            citation_count=d.get("citation_count") or 0,
        )


class Relationship(NamedTuple):
    """An explicit, user-authored link between two documents.

    Direction is kept for the caller's benefit but the engine treats every
    relationship as undirected.
    """

    source_id: str
    target_id: str


@dataclass(frozen=True)
class SimilarityBreakdown:
    """Per-signal scores behind a composite similarity."""

    tag: float
    text: float
    year: float
    role: float
    connection: float

    def to_dict(self) -> dict:
        return {
            "tag": self.tag,
            "text": self.text,
            "year": self.year,
            "role": self.role,
            "connection": self.connection,
        }


@dataclass(frozen=True, eq=False)
class SimilarityResult:
    """Composite similarity between two documents.

    ``(A, B)`` and ``(B, A)`` compare and hash equal.
    """

    id_a: str
    id_b: str
    score: float
    breakdown: SimilarityBreakdown

    @property
    def pair(self) -> tuple[str, str]:
        return pair_key(self.id_a, self.id_b)

    def other(self, doc_id: str) -> str:
        """The id on the opposite side of the pair from ``doc_id``."""
        return self.id_b if doc_id == self.id_a else self.id_a

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SimilarityResult):
            return NotImplemented
        return (
            self.pair == other.pair
            and self.score == other.score
            and self.breakdown == other.breakdown
        )

    def __hash__(self) -> int:
        return hash((self.pair, self.score, self.breakdown))

    def to_dict(self) -> dict:
        return {
            "id_a": self.id_a,
            "id_b": self.id_b,
            "score": self.score,
            "breakdown": self.breakdown.to_dict(),
        }


@dataclass(frozen=True)
class PhantomEdge:
    """An inferred relationship between two documents the user never linked."""

    id: str
    source_id: str
    target_id: str
    similarity: float
    is_phantom: bool = True

    @classmethod
    def between(cls, id_a: str, id_b: str, similarity: float) -> PhantomEdge:
        """Build an edge whose id depends only on the unordered pair."""
        source, target = pair_key(id_a, id_b)
        return cls(
            id=f"phantom_{source}_{target}",
            source_id=source,
            target_id=target,
            similarity=similarity,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source": self.source_id,
            "target": self.target_id,
            "similarity": self.similarity,
            "is_phantom": self.is_phantom,
        }


# Document id -> cluster id. Cluster ids are only meaningful within one call.
ClusterAssignment = dict[str, int]


@dataclass
class AutoCluster:
    """A suggested cluster with a generated name and summary statistics."""

    id: str
    document_ids: list[str]
    representative_id: str
    name: str
    avg_similarity: float
    dominant_role: str
    year_range: Optional[tuple[int, int]]
    total_citations: int

    @property
    def size(self) -> int:
        return len(self.document_ids)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "document_ids": self.document_ids,
            "representative_id": self.representative_id,
            "name": self.name,
            "avg_similarity": self.avg_similarity,
            "dominant_role": self.dominant_role,
            "year_range": list(self.year_range) if self.year_range else None,
            "total_citations": self.total_citations,
        }


@dataclass(frozen=True)
class MetadataQuality:
    """How much usable metadata a collection carries for similarity."""

    text_coverage: float
    tag_coverage: float
    year_coverage: float
    overall_quality: str  # "excellent" | "good" | "limited" | "poor"

    def to_dict(self) -> dict:
        return {
            "text_coverage": self.text_coverage,
            "tag_coverage": self.tag_coverage,
            "year_coverage": self.year_coverage,
            "overall_quality": self.overall_quality,
        }

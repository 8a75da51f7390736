"""Preference feedback: bias adjustments learned from accept/override decisions.

The similarity engine never reads feedback. Consumers apply the learned
biases to the confidence they *display* for a suggestion. Results are held
in a caller-owned :class:`PreferenceCache` with a TTL and explicit
invalidation rather than in process-wide state.
"""

from __future__ import annotations

import logging
import time
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from paperlink.models import ROLES

logger = logging.getLogger(__name__)

FEEDBACK_KINDS = ("intake-role", "intake-takeaway", "connection", "screening", "gap", "discovery")
FEEDBACK_ACTIONS = ("accepted", "overridden", "edited", "dismissed")

# Largest confidence penalty for the most frequently corrected role
MAX_ROLE_PENALTY = 0.2

DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class FeedbackRecord:
    """One user decision on a suggestion."""

    kind: str
    collection_id: str
    action: str
    suggested_value: Optional[str] = None
    user_value: Optional[str] = None
    document_id: Optional[str] = None
    confidence: float = 0.0
    timestamp: float = 0.0

    def __post_init__(self):
        if self.kind not in FEEDBACK_KINDS:
            raise ValueError(f"Unknown feedback kind: {self.kind!r}")
        if self.action not in FEEDBACK_ACTIONS:
            raise ValueError(f"Unknown feedback action: {self.action!r}")

    @classmethod
    def from_dict(cls, d: dict) -> FeedbackRecord:
        return cls(
            kind=d["kind"],
            collection_id=d["collection_id"],
            action=d["action"],
            suggested_value=d.get("suggested_value"),
            user_value=d.get("user_value"),
            document_id=d.get("document_id"),
            confidence=d.get("confidence", 0.0),
            timestamp=d.get("timestamp", 0.0),
        )


@dataclass
class BiasAdjustments:
    """What a collection's feedback history says about suggestion quality."""

    role_biases: dict[str, float] = field(default_factory=lambda: dict.fromkeys(ROLES, 0.0))
    acceptance_rates: dict[str, float] = field(
        default_factory=lambda: dict.fromkeys(FEEDBACK_KINDS, 0.0)
    )
    total_feedback: int = 0
    acceptance_rate: float = 0.0

    def to_dict(self) -> dict:
        return {
            "role_biases": self.role_biases,
            "acceptance_rates": self.acceptance_rates,
            "total_feedback": self.total_feedback,
            "acceptance_rate": self.acceptance_rate,
        }


def learn_role_biases(records: Iterable[FeedbackRecord]) -> dict[str, float]:
    """Penalize roles the user keeps correcting.

    Each role's bias is ``-MAX_ROLE_PENALTY * wrong / max_wrong`` where
    ``wrong`` counts overrides of that suggested role.
    """
    wrong: Counter[str] = Counter()
    for record in records:
        if record.kind != "intake-role" or record.action != "overridden":
            continue
        if record.suggested_value in ROLES:
            wrong[record.suggested_value] += 1

    biases = dict.fromkeys(ROLES, 0.0)
    max_errors = max(max(wrong.values(), default=0), 1)
    for role, count in wrong.items():
        biases[role] = -MAX_ROLE_PENALTY * (count / max_errors)
    return biases


def learn_bias_adjustments(records: Iterable[FeedbackRecord]) -> BiasAdjustments:
    """Derive bias adjustments from one collection's feedback."""
    records = list(records)
    if not records:
        return BiasAdjustments()

    by_kind: dict[str, list[FeedbackRecord]] = defaultdict(list)
    for record in records:
        by_kind[record.kind].append(record)

    rates = dict.fromkeys(FEEDBACK_KINDS, 0.0)
    for kind, kind_records in by_kind.items():
        accepted = sum(1 for r in kind_records if r.action == "accepted")
        rates[kind] = accepted / len(kind_records)

    accepted_total = sum(1 for r in records if r.action == "accepted")
    return BiasAdjustments(
        role_biases=learn_role_biases(records),
        acceptance_rates=rates,
        total_feedback=len(records),
        acceptance_rate=accepted_total / len(records),
    )


def apply_confidence_bias(confidence: float, role: str, adjustments: BiasAdjustments) -> float:
    """Shift a displayed confidence by the learned bias for ``role``, clamped to [0, 1]."""
    adjusted = confidence + adjustments.role_biases.get(role, 0.0)
    return min(1.0, max(0.0, adjusted))


class PreferenceCache:
    """TTL cache of :class:`BiasAdjustments` per collection.

    Usage:
        cache = PreferenceCache(store.load_feedback)
        adjustments = cache.get("thesis-1")
        cache.invalidate("thesis-1")  # after recording new feedback
    """

    def __init__(
        self,
        loader: Callable[[str], Iterable[FeedbackRecord]],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be non-negative, got {ttl_seconds}")
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, BiasAdjustments]] = {}

    def __contains__(self, collection_id: str) -> bool:
        return collection_id in self._entries and not self._is_stale(collection_id)

    def _is_stale(self, collection_id: str) -> bool:
        computed_at, _ = self._entries[collection_id]
        return self._clock() - computed_at >= self._ttl

    def get(self, collection_id: str) -> BiasAdjustments:
        """Cached adjustments, recomputed once older than the TTL."""
        if collection_id in self:
            return self._entries[collection_id][1]

        adjustments = learn_bias_adjustments(self._loader(collection_id))
        self._entries[collection_id] = (self._clock(), adjustments)
        logger.debug(
            "Learned bias adjustments for %s from %d records",
            collection_id,
            adjustments.total_feedback,
        )
        return adjustments

    def invalidate(self, collection_id: str | None = None) -> None:
        """Drop one collection's entry, or every entry when no id is given."""
        if collection_id is None:
            self._entries.clear()
        else:
            self._entries.pop(collection_id, None)

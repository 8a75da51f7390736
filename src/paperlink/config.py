"""Similarity configuration: signal weights, thresholds, and the config file.

Settings live in ``~/.paperlink/config.json`` under the ``"similarity"`` key.
Every public operation validates its configuration before computing anything,
so a malformed value fails fast with :class:`ConfigurationError`.
"""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Mapping, Union

logger = logging.getLogger(__name__)

WEIGHT_KEYS = ("tag", "text", "year", "role", "connection")


class ConfigurationError(ValueError):
    """Malformed similarity weights or thresholds."""


def check_threshold(name: str, value: Any) -> float:
    """Validate a similarity threshold (finite, non-negative number)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError(f"{name} must be finite and non-negative, got {value!r}")
    return float(value)


def check_count(name: str, value: Any, minimum: int = 0) -> int:
    """Validate an integer limit such as ``k`` or a degree cap."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class SimilarityWeights:
    """Weights of the five signals in the composite score.

    The composite is a plain weighted sum. Weights that do not sum to 1 are
    allowed and produce scores outside [0, 1]; nothing is renormalized.
    """

    tag: float = 0.25
    text: float = 0.30
    year: float = 0.15
    role: float = 0.15
    connection: float = 0.15

    def __post_init__(self):
        for key in WEIGHT_KEYS:
            check_threshold(f"weights.{key}", getattr(self, key))

    @property
    def total(self) -> float:
        return self.tag + self.text + self.year + self.role + self.connection

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> SimilarityWeights:
        """Build weights from a mapping that names every signal.

        Raises:
            ConfigurationError: If a key is missing, unknown, or has a bad value.
        """
        missing = [k for k in WEIGHT_KEYS if k not in d]
        if missing:
            raise ConfigurationError(f"Weight map is missing keys: {', '.join(missing)}")
        unknown = sorted(set(d) - set(WEIGHT_KEYS))
        if unknown:
            raise ConfigurationError(f"Unknown weight keys: {', '.join(unknown)}")
        return cls(**{k: d[k] for k in WEIGHT_KEYS})

    def to_dict(self) -> dict:
        return asdict(self)


WeightsLike = Union[SimilarityWeights, Mapping[str, float], None]

DEFAULT_WEIGHTS = SimilarityWeights()


def resolve_weights(weights: WeightsLike) -> SimilarityWeights:
    """Accept ``None``, a full weight mapping, or a :class:`SimilarityWeights`."""
    if weights is None:
        return DEFAULT_WEIGHTS
    if isinstance(weights, SimilarityWeights):
        return weights
    if isinstance(weights, Mapping):
        return SimilarityWeights.from_dict(weights)
    raise ConfigurationError(f"Unsupported weights value: {weights!r}")


@dataclass
class SimilarityConfig:
    """Defaults for every public operation, overridable from the config file."""

    weights: SimilarityWeights = field(default_factory=SimilarityWeights)
    top_k: int = 5
    min_similarity: float = 0.2
    phantom_min_similarity: float = 0.3
    max_phantoms_per_document: int = 3
    cluster_min_similarity: float = 0.4
    min_cluster_size: int = 2

    def __post_init__(self):
        check_count("top_k", self.top_k)
        check_threshold("min_similarity", self.min_similarity)
        check_threshold("phantom_min_similarity", self.phantom_min_similarity)
        check_count("max_phantoms_per_document", self.max_phantoms_per_document)
        check_threshold("cluster_min_similarity", self.cluster_min_similarity)
        check_count("min_cluster_size", self.min_cluster_size, minimum=1)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> SimilarityConfig:
        """Parse the ``"similarity"`` section of the config file."""
        known = {f for f in cls.__dataclass_fields__}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigurationError(f"Unknown similarity settings: {', '.join(unknown)}")
        kwargs = dict(d)
        if "weights" in kwargs:
            kwargs["weights"] = resolve_weights(kwargs["weights"])
        return cls(**kwargs)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["weights"] = self.weights.to_dict()
        return data


# ------------------------------------------------------------------
# Config file
# ------------------------------------------------------------------


def get_config_dir() -> Path:
    """Config directory: ``$PAPERLINK_HOME`` or ``~/.paperlink``."""
    override = os.environ.get("PAPERLINK_HOME")
    if override:
        return Path(override)
    return Path.home() / ".paperlink"


def get_config_path() -> Path:
    return get_config_dir() / "config.json"


def get_config(path: Path | None = None) -> dict:
    """Load the raw configuration dict. Missing file means empty config."""
    config_path = Path(path) if path else get_config_path()
    if not config_path.exists():
        return {}
    try:
        return json.loads(config_path.read_text())
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e


def save_config(config: dict, path: Path | None = None) -> None:
    """Save the raw configuration dict."""
    config_path = Path(path) if path else get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config, indent=2))


def load_similarity_config(path: Path | None = None) -> SimilarityConfig:
    """Load :class:`SimilarityConfig` from the config file.

    Returns:
        Config with defaults for anything the file does not set.

    Raises:
        ConfigurationError: If the ``"similarity"`` section is malformed.
    """
    section = get_config(path).get("similarity", {})
    if not isinstance(section, Mapping):
        raise ConfigurationError("'similarity' config section must be an object")
    config = SimilarityConfig.from_dict(section)
    logger.debug("Loaded similarity config: %s", config)
    return config

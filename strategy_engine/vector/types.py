"""
Data types for term vectors, scenario features and stored analysis embeddings.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence

TermVector = Dict[str, float]

# camelCase keys used by stored pattern records
_FEATURE_ALIASES = {
    "playerCount": "player_count",
    "hasCooperation": "has_cooperation",
    "hasConflict": "has_conflict",
    "hasInformationAsymmetry": "has_information_asymmetry",
    "hasSequentialMoves": "has_sequential_moves",
    "hasRepeatedInteraction": "has_repeated_interaction",
}

BOOLEAN_FEATURES = (
    "has_cooperation",
    "has_conflict",
    "has_information_asymmetry",
    "has_sequential_moves",
    "has_repeated_interaction",
)


@dataclass
class FeatureRecord:
    """Structural attributes of a strategic scenario. None means absent."""

    player_count: Optional[int] = None
    has_cooperation: Optional[bool] = None
    has_conflict: Optional[bool] = None
    has_information_asymmetry: Optional[bool] = None
    has_sequential_moves: Optional[bool] = None
    has_repeated_interaction: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FeatureRecord":
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = _FEATURE_ALIASES.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)


@dataclass
class EmbeddingRecord:
    """A stored analysis embedding, owned by the feature store."""

    record_id: str
    vector: Sequence[float]
    created_at: Optional[datetime] = None


@dataclass
class AnalysisRecord:
    """A stored analysis run as listed by recency."""

    record_id: str
    text: Optional[str]
    created_at: datetime
    score: Optional[float] = None


@dataclass
class NeighborResult:
    """Represents a nearest-neighbor match."""

    record_id: str
    score: float
    """Cosine similarity of the match (0-1)"""


@dataclass
class StrategicPattern:
    """A known strategic pattern to compare scenarios against."""

    name: str
    description: str
    signature: Optional[str] = None
    features: Optional[FeatureRecord] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PatternMatch:
    pattern: StrategicPattern
    text_similarity: float
    structural_similarity: float
    combined_similarity: float

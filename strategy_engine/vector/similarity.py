"""
Pattern similarity scoring.

Text similarity is cosine over bag-of-terms vectors; structural similarity
compares game-theory features. Percentages carry one decimal place.
"""

import math
import re
from typing import Any, List, Mapping, Optional, Sequence, Union

from .text import vectorize_text
from .types import BOOLEAN_FEATURES, FeatureRecord, PatternMatch, StrategicPattern, TermVector

TEXT_WEIGHT = 0.6
STRUCTURAL_WEIGHT = 0.4
SIGNATURE_WEIGHT = 1.5
DEFAULT_PLAYER_COUNT = 2

# Credit awarded for a player count difference of 0, 1 and 2
PLAYER_COUNT_CREDIT = {0: 1.0, 1: 0.7, 2: 0.4}

_ROLE_NOUNS = re.compile(r"\b(player|party|country|company|actor)\b", re.IGNORECASE)
_KEYWORD_CLASSES = {
    "has_cooperation": re.compile(r"\b(cooperat\w*|alliance|partnership|collaborate|joint)\b", re.IGNORECASE),
    "has_conflict": re.compile(r"\b(conflict|compete|rival|oppose|fight|war)\b", re.IGNORECASE),
    "has_information_asymmetry": re.compile(r"\b(secret|hidden|unknown|asymmetric|information|private)\b", re.IGNORECASE),
    "has_sequential_moves": re.compile(r"\b(first|then|after|sequential|turn|move)\b", re.IGNORECASE),
    "has_repeated_interaction": re.compile(r"\b(repeated|ongoing|continuous|long-term|iterative)\b", re.IGNORECASE),
}

Features = Union[FeatureRecord, Mapping[str, Any], None]


def round_half_up(value: float, digits: int = 1) -> float:
    """Round like Math.round does: halves go up, not to even."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def _to_percentage(ratio: float) -> float:
    return math.floor(ratio * 1000 + 0.5) / 10


def _as_features(features: Features) -> FeatureRecord:
    if isinstance(features, FeatureRecord):
        return features
    return FeatureRecord.from_dict(features)


def cosine_similarity(vec_a: TermVector, vec_b: TermVector) -> float:
    """Cosine similarity of two term vectors, clamped to [0, 1].

    Returns 0 if either vector is empty or has zero magnitude.
    """
    if not vec_a or not vec_b:
        return 0.0

    dot_product = 0.0
    magnitude_a = 0.0
    magnitude_b = 0.0
    for term in set(vec_a) | set(vec_b):
        val_a = vec_a.get(term, 0.0)
        val_b = vec_b.get(term, 0.0)
        dot_product += val_a * val_b
        magnitude_a += val_a * val_a
        magnitude_b += val_b * val_b

    magnitude_a = math.sqrt(magnitude_a)
    magnitude_b = math.sqrt(magnitude_b)
    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0

    similarity = dot_product / (magnitude_a * magnitude_b)
    return max(0.0, min(1.0, similarity))


def compute_pattern_similarity(scenario_text: str, pattern_description: str,
                               pattern_signature: Optional[str] = None) -> float:
    """Text similarity between a scenario and a pattern, as a percentage.

    Signature terms are added onto the description vector at 1.5x weight.
    """
    scenario_vec = vectorize_text(scenario_text)
    pattern_vec = vectorize_text(pattern_description)

    if pattern_signature:
        for term, value in vectorize_text(pattern_signature).items():
            pattern_vec[term] = pattern_vec.get(term, 0.0) + value * SIGNATURE_WEIGHT

    return _to_percentage(cosine_similarity(scenario_vec, pattern_vec))


def compute_structural_similarity(scenario_features: Features, pattern_features: Features) -> float:
    """Agreement over the features present on both sides, as a percentage."""
    scenario = _as_features(scenario_features)
    pattern = _as_features(pattern_features)

    match_count = 0.0
    total_features = 0

    # A zero player count counts as absent
    if scenario.player_count and pattern.player_count:
        total_features += 1
        diff = abs(scenario.player_count - pattern.player_count)
        match_count += PLAYER_COUNT_CREDIT.get(diff, 0.0)

    for name in BOOLEAN_FEATURES:
        ours = getattr(scenario, name)
        theirs = getattr(pattern, name)
        if ours is not None and theirs is not None:
            total_features += 1
            if ours == theirs:
                match_count += 1

    if total_features == 0:
        return 0.0

    return _to_percentage(match_count / total_features)


def combine_similarities(text_similarity: float, structural_similarity: float) -> float:
    """Weighted 60/40 blend of two percentages, one decimal place."""
    combined = text_similarity * TEXT_WEIGHT + structural_similarity * STRUCTURAL_WEIGHT
    return round_half_up(combined, 1)


def compute_combined_similarity(scenario_text: str, pattern_description: str,
                                scenario_features: Features, pattern_features: Features,
                                pattern_signature: Optional[str] = None) -> float:
    text_similarity = compute_pattern_similarity(scenario_text, pattern_description, pattern_signature)
    structural_similarity = compute_structural_similarity(scenario_features, pattern_features)
    return combine_similarities(text_similarity, structural_similarity)


def extract_scenario_features(scenario_text: str, players: Optional[Sequence[Any]] = None) -> FeatureRecord:
    """Derive structural features from raw scenario text with keyword heuristics."""
    text = (scenario_text or "").lower()

    if players:
        player_count = len(players)
    else:
        player_count = len(_ROLE_NOUNS.findall(text)) or DEFAULT_PLAYER_COUNT

    flags = {name: bool(pattern.search(text)) for name, pattern in _KEYWORD_CLASSES.items()}
    return FeatureRecord(player_count=player_count, **flags)


def rank_patterns(scenario_text: str, patterns: Sequence[StrategicPattern],
                  players: Optional[Sequence[Any]] = None, limit: Optional[int] = None) -> List[PatternMatch]:
    """Score every pattern against a scenario, best combined match first."""
    scenario_features = extract_scenario_features(scenario_text, players)

    matches = []
    for pattern in patterns:
        text_similarity = compute_pattern_similarity(scenario_text, pattern.description, pattern.signature)
        structural_similarity = compute_structural_similarity(scenario_features, pattern.features)
        matches.append(PatternMatch(
            pattern=pattern,
            text_similarity=text_similarity,
            structural_similarity=structural_similarity,
            combined_similarity=combine_similarities(text_similarity, structural_similarity)
        ))

    matches.sort(key=lambda m: m.combined_similarity, reverse=True)
    return matches[:limit] if limit is not None else matches

"""
Pattern similarity and nearest-neighbor retrieval.
"""

# Package initialization for vector module
from .text import vectorize_text
from .similarity import (
    cosine_similarity,
    compute_pattern_similarity,
    compute_structural_similarity,
    compute_combined_similarity,
    extract_scenario_features,
    rank_patterns,
)
from .feature_store import IFeatureStore, InMemoryFeatureStore, SqliteFeatureStore
from .retriever import NearestNeighborRetriever
from .types import FeatureRecord, EmbeddingRecord, AnalysisRecord, NeighborResult, StrategicPattern, PatternMatch

__all__ = [
    'vectorize_text',
    'cosine_similarity',
    'compute_pattern_similarity',
    'compute_structural_similarity',
    'compute_combined_similarity',
    'extract_scenario_features',
    'rank_patterns',
    'IFeatureStore',
    'InMemoryFeatureStore',
    'SqliteFeatureStore',
    'NearestNeighborRetriever',
    'FeatureRecord',
    'EmbeddingRecord',
    'AnalysisRecord',
    'NeighborResult',
    'StrategicPattern',
    'PatternMatch'
]

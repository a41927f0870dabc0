"""
Nearest-neighbor retrieval over stored analysis embeddings.

A linear scan over a bounded set of recent candidates. Without a usable query
vector the retriever lists the most recent analysis records instead.
"""

from typing import Any, List, Optional, Sequence, Union

import numpy as np

from ..core import config
from ..core.errors import RetrievalError
from ..util.logging import logger
from .feature_store import IFeatureStore
from .types import AnalysisRecord, EmbeddingRecord, NeighborResult

# Score assigned to candidates that cannot be compared; always filtered out
MISMATCH_SENTINEL = -1.0


def clamp_top_k(top_k: Any, default: int = None, maximum: int = None) -> int:
    """Coerce top_k into [1, maximum]; unusable values fall back to the default."""
    default = config.RETRIEVAL_DEFAULT_TOP_K if default is None else default
    maximum = config.RETRIEVAL_MAX_TOP_K if maximum is None else maximum
    if top_k is None or isinstance(top_k, bool):
        value = default
    else:
        try:
            value = int(float(top_k))
        except (TypeError, ValueError, OverflowError):
            value = default
    return max(1, min(maximum, value))


class NearestNeighborRetriever:
    """Rank stored embeddings by cosine similarity to a query vector."""

    def __init__(self, feature_store: IFeatureStore, dimension: int = None, candidate_limit: int = None):
        self.feature_store = feature_store
        self.dimension = dimension or config.EMBEDDING_DIMENSION
        self.candidate_limit = candidate_limit or config.RETRIEVAL_CANDIDATE_LIMIT

    def is_valid_query(self, features: Optional[Sequence[float]]) -> bool:
        if features is None or isinstance(features, (str, bytes)):
            return False
        try:
            return len(features) == self.dimension
        except TypeError:
            return False

    def retrieve(self, features: Optional[Sequence[float]] = None,
                 top_k: Any = None) -> Union[List[NeighborResult], List[AnalysisRecord]]:
        """Return the top_k nearest neighbors, or the top_k most recent records.

        Raises RetrievalError if the store read fails.
        """
        k = clamp_top_k(top_k)
        if self.is_valid_query(features):
            results = self.nearest(features, k)
            logger.log_retrieval("similarity", k, len(results))
            return results

        records = self.recent(k)
        logger.log_retrieval("recent", k, len(records))
        return records

    def nearest(self, features: Sequence[float], top_k: int) -> List[NeighborResult]:
        try:
            candidates = self.feature_store.fetch_recent_embeddings(self.candidate_limit)
        except Exception as e:
            logger.log_retrieval("similarity", top_k, 0, {"error": str(e)}, status="failed")
            raise RetrievalError(f"Failed to read candidate embeddings: {e}") from e

        query = np.asarray(features, dtype=float)
        scored = [(c.record_id, self.score_candidate(query, c)) for c in candidates]

        valid = [(record_id, score) for record_id, score in scored if score > MISMATCH_SENTINEL]
        excluded = len(scored) - len(valid)
        if excluded:
            logger.debug(f"Excluded {excluded} candidates with mismatched embeddings")

        # Stable sort: equal scores keep store (recency) order
        valid.sort(key=lambda item: item[1], reverse=True)
        return [NeighborResult(record_id=record_id, score=score) for record_id, score in valid[:top_k]]

    def score_candidate(self, query: np.ndarray, candidate: EmbeddingRecord) -> float:
        """Cosine similarity in [0, 1], or the sentinel when dimensions differ."""
        try:
            vector = np.asarray(candidate.vector, dtype=float)
        except (TypeError, ValueError):
            return MISMATCH_SENTINEL
        if vector.ndim != 1 or vector.shape[0] != query.shape[0]:
            return MISMATCH_SENTINEL

        norm_product = np.linalg.norm(query) * np.linalg.norm(vector)
        if norm_product == 0 or not np.isfinite(norm_product):
            return 0.0

        similarity = float(np.dot(query, vector) / norm_product)
        if not np.isfinite(similarity):
            return 0.0
        return max(0.0, min(1.0, similarity))

    def recent(self, top_k: int) -> List[AnalysisRecord]:
        try:
            return list(self.feature_store.fetch_recent_records(top_k))
        except Exception as e:
            logger.log_retrieval("recent", top_k, 0, {"error": str(e)}, status="failed")
            raise RetrievalError(f"Failed to read recent analysis records: {e}") from e

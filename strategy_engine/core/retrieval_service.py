"""
Retrieval request handling.
Validates a {features?, top_k?} payload and returns {mode, items}.
"""

from typing import Any, Dict, Mapping

from .config import get_feature_store
from ..api.schemas import NeighborItem, RecentRecordItem, RetrievalRequest, RetrievalResponse
from ..vector.retriever import NearestNeighborRetriever


def handle_retrieval_request(payload: Mapping[str, Any], _feature_store=None) -> Dict[str, Any]:
    """
    Serve a retrieval request against the configured feature store.

    Args:
        payload: Request body with optional 'features' (128 floats) and 'top_k'
        _feature_store: Optional feature store for testing

    Returns:
        Dict with 'mode' ('similarity' or 'recent') and 'items'

    Raises:
        pydantic.ValidationError: if the payload is malformed
        RetrievalError: if the store read fails
    """
    request = RetrievalRequest.model_validate(payload or {})
    feature_store = _feature_store if _feature_store is not None else get_feature_store()
    retriever = NearestNeighborRetriever(feature_store)

    if retriever.is_valid_query(request.features):
        neighbors = retriever.retrieve(request.features, request.top_k)
        items = [NeighborItem(record_id=n.record_id, score=n.score) for n in neighbors]
        mode = "similarity"
    else:
        records = retriever.retrieve(None, request.top_k)
        items = [
            RecentRecordItem(record_id=r.record_id, text=r.text, created_at=r.created_at, score=r.score)
            for r in records
        ]
        mode = "recent"

    return RetrievalResponse(mode=mode, items=items).model_dump(mode="json")

"""
Tests for the {features?, top_k?} -> {mode, items} retrieval contract.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError
from strategy_engine.core.errors import RetrievalError
from strategy_engine.core.retrieval_service import handle_retrieval_request
from strategy_engine.vector.feature_store import InMemoryFeatureStore
from strategy_engine.vector.types import AnalysisRecord, EmbeddingRecord

BASE_TIME = datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def feature_store():
    """Feature store holding eight analyses with simple embeddings."""
    store = InMemoryFeatureStore()
    for i in range(8):
        created = BASE_TIME + timedelta(hours=i)
        vector = [0.0] * 128
        vector[i] = 1.0
        vector[127] = 0.5
        store.add_embedding(EmbeddingRecord(record_id=f"analysis_{i}", vector=vector, created_at=created))
        store.add_record(AnalysisRecord(record_id=f"analysis_{i}", text=f"scenario {i}", created_at=created, score=0.5))
    return store


def test_similarity_request(feature_store):
    """A 128-long feature vector ranks stored analyses."""
    query = [0.0] * 128
    query[2] = 1.0

    response = handle_retrieval_request({"features": query, "top_k": 3}, _feature_store=feature_store)

    assert response["mode"] == "similarity"
    assert len(response["items"]) == 3
    assert response["items"][0]["record_id"] == "analysis_2"
    assert set(response["items"][0]) == {"record_id", "score"}
    scores = [item["score"] for item in response["items"]]
    assert scores == sorted(scores, reverse=True)


def test_recent_request_without_features(feature_store):
    """An empty payload lists the five most recent analyses."""
    response = handle_retrieval_request({}, _feature_store=feature_store)

    assert response["mode"] == "recent"
    assert [item["record_id"] for item in response["items"]] == [
        "analysis_7", "analysis_6", "analysis_5", "analysis_4", "analysis_3"
    ]
    assert response["items"][0]["text"] == "scenario 7"
    assert isinstance(response["items"][0]["created_at"], str)


def test_short_feature_vector_falls_back_to_recent(feature_store):
    """Features that are not 128 long are ignored."""
    response = handle_retrieval_request({"features": [1.0, 2.0, 3.0], "top_k": 2}, _feature_store=feature_store)

    assert response["mode"] == "recent"
    assert len(response["items"]) == 2


def test_unusable_top_k_uses_default(feature_store):
    """A non-numeric top_k falls back to five items."""
    response = handle_retrieval_request({"top_k": "lots"}, _feature_store=feature_store)

    assert len(response["items"]) == 5


def test_negative_top_k_is_clamped(feature_store):
    """A negative top_k returns one item rather than an error."""
    response = handle_retrieval_request({"top_k": -3}, _feature_store=feature_store)

    assert len(response["items"]) == 1


def test_non_numeric_features_rejected(feature_store):
    """Feature values must be numbers."""
    with pytest.raises(ValidationError):
        handle_retrieval_request({"features": ["x"] * 128}, _feature_store=feature_store)


def test_store_failure_propagates():
    """Store errors surface as RetrievalError."""
    feature_store = MagicMock()
    feature_store.fetch_recent_records.side_effect = OSError("disk unavailable")

    with pytest.raises(RetrievalError):
        handle_retrieval_request({}, _feature_store=feature_store)

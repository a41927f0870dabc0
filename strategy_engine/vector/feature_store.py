"""
Read access to stored analysis records and their embeddings.
The retriever only reads; writes exist for ingestion and tests.
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..core.db import get_db, init_db
from .types import AnalysisRecord, EmbeddingRecord


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return _to_utc(ts)


def _to_utc(ts: datetime) -> datetime:
    # Naive timestamps are taken to be UTC; stored text must sort chronologically
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class IFeatureStore(ABC):
    """Abstract interface for the analysis feature store."""

    @abstractmethod
    def fetch_recent_embeddings(self, limit: int) -> List[EmbeddingRecord]:
        """Return up to limit embeddings, most recent first."""
        pass

    @abstractmethod
    def fetch_recent_records(self, limit: int) -> List[AnalysisRecord]:
        """Return up to limit analysis records, most recent first."""
        pass


class InMemoryFeatureStore(IFeatureStore):
    """Simple in-memory implementation of IFeatureStore."""

    def __init__(self):
        self._records = {}     # record_id -> AnalysisRecord
        self._embeddings = {}  # record_id -> EmbeddingRecord

    def add_record(self, record: AnalysisRecord) -> None:
        record.created_at = _to_utc(record.created_at)
        self._records[record.record_id] = record

    def add_embedding(self, embedding: EmbeddingRecord) -> None:
        embedding.created_at = _to_utc(embedding.created_at or datetime.now(timezone.utc))
        self._embeddings[embedding.record_id] = embedding

    def fetch_recent_embeddings(self, limit: int) -> List[EmbeddingRecord]:
        ordered = sorted(self._embeddings.values(), key=lambda e: e.created_at, reverse=True)
        return ordered[:limit]

    def fetch_recent_records(self, limit: int) -> List[AnalysisRecord]:
        ordered = sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)
        return ordered[:limit]


class SqliteFeatureStore(IFeatureStore):
    """Feature store over the analysis_records and analysis_features tables."""

    def __init__(self, db_path: str = None):
        self.db_path = db_path
        init_db(db_path)

    def add_record(self, record_id: str, text: Optional[str], created_at: datetime = None,
                   score: Optional[float] = None) -> None:
        created_at = _to_utc(created_at or datetime.now(timezone.utc))
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT OR REPLACE INTO analysis_records (id, text, score, created_at) VALUES (?, ?, ?, ?)",
                (record_id, text, score, created_at.isoformat())
            )
            conn.commit()

    def add_embedding(self, record_id: str, vector: Sequence[float], created_at: datetime = None) -> None:
        created_at = _to_utc(created_at or datetime.now(timezone.utc))
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT OR REPLACE INTO analysis_features (record_id, feature_vector, created_at) VALUES (?, ?, ?)",
                (record_id, json.dumps([float(v) for v in vector]), created_at.isoformat())
            )
            conn.commit()

    def fetch_recent_embeddings(self, limit: int) -> List[EmbeddingRecord]:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT record_id, feature_vector, created_at FROM analysis_features "
                "ORDER BY created_at DESC LIMIT ?",
                (limit,)
            )
            rows = cursor.fetchall()

        return [
            EmbeddingRecord(record_id=record_id, vector=json.loads(vector), created_at=_parse_timestamp(created_at))
            for record_id, vector, created_at in rows
        ]

    def fetch_recent_records(self, limit: int) -> List[AnalysisRecord]:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, text, created_at, score FROM analysis_records "
                "ORDER BY created_at DESC LIMIT ?",
                (limit,)
            )
            rows = cursor.fetchall()

        return [
            AnalysisRecord(record_id=record_id, text=text, created_at=_parse_timestamp(created_at), score=score)
            for record_id, text, created_at, score in rows
        ]

"""
Wire models for the retrieval contract and the query history caches.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CrawlMode(str, Enum):
    SCRAPE = "scrape"
    CRAWL = "crawl"
    SEARCH = "search"


class HistoryEntry(BaseModel):
    """Fields shared by every history entry.

    Accepts both snake_case and camelCase keys so blobs written by the
    browser-side caches load unchanged.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    timestamp: datetime
    hash: str


class EvidenceQueryEntry(HistoryEntry):
    query: str
    sources_found: int = 0
    providers_tried: List[str] = Field(default_factory=list)


class CrawlHistoryEntry(HistoryEntry):
    mode: CrawlMode
    query: Optional[str] = None
    urls: Optional[List[str]] = None
    pages_scraped: int = 0
    providers: List[str] = Field(default_factory=lambda: ["firecrawl"])
    processing_time_ms: float = 0


class RetrievalRequest(BaseModel):
    features: Optional[List[float]] = None
    top_k: Optional[int] = None

    @field_validator('top_k', mode='before')
    @classmethod
    def top_k_must_be_integral(cls, v: Any):
        # Out-of-range values are clamped later; unusable ones fall back to the default
        if v is None or isinstance(v, bool):
            return None
        try:
            return int(float(v))
        except (TypeError, ValueError, OverflowError):
            return None


class NeighborItem(BaseModel):
    record_id: str
    score: float


class RecentRecordItem(BaseModel):
    record_id: str
    text: Optional[str] = None
    created_at: datetime
    score: Optional[float] = None


class RetrievalResponse(BaseModel):
    mode: Literal["similarity", "recent"]
    items: List[Union[NeighborItem, RecentRecordItem]]

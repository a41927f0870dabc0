"""
Query history caches.

A capped, expiring, hash-deduplicated log of recent queries persisted as one
JSON blob in a local key-value store. Two domains use it: evidence retrieval
queries and crawl/scrape/search operations.
"""

import json
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import ValidationError

from . import config
from .hashing import crawl_dedup_key, hash_string
from .kv_store import IKeyValueStore
from ..api.schemas import CrawlHistoryEntry, CrawlMode, EvidenceQueryEntry, HistoryEntry
from ..util.logging import logger

E = TypeVar("E", bound=HistoryEntry)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(ts: datetime) -> datetime:
    # Naive timestamps are taken to be UTC
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts


class QueryHistoryCache(ABC, Generic[E]):
    """Bounded most-recent-first history with dedup and load-time expiry.

    The in-memory list is authoritative for the current process; the
    persisted blob is best-effort.
    """

    cache_key: str = ""
    entry_type: Type[E] = HistoryEntry

    def __init__(self, storage: IKeyValueStore, max_entries: int, expiry_days: int,
                 clock: Callable[[], datetime] = None, id_factory: Callable[[], str] = None):
        self.storage = storage
        self.max_entries = max(1, int(max_entries))
        self.expiry_days = expiry_days
        self._clock = clock or _utcnow
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._history: List[E] = []
        self.loaded = False

    @property
    def history(self) -> List[E]:
        self._ensure_loaded()
        return list(self._history)

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._history)

    def _ensure_loaded(self) -> None:
        # Writing before the persisted blob is read would overwrite it
        if not self.loaded:
            self.load()

    def load(self) -> List[E]:
        """Read the persisted blob, dropping expired and malformed entries."""
        self._history = self._read_valid_entries()
        self.loaded = True
        logger.log_cache_operation(self.cache_key, "load", details={"entries": len(self._history)})
        return self.history

    def _read_valid_entries(self) -> List[E]:
        try:
            raw = self.storage.get(self.cache_key)
        except Exception as e:
            logger.warning(f"History cache '{self.cache_key}' load failed: {e}")
            return []

        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"History cache '{self.cache_key}' load failed: {e}")
            return []

        if not isinstance(parsed, list):
            logger.warning(f"History cache '{self.cache_key}' payload is not a list; ignoring it")
            return []

        cutoff = _as_utc(self._clock()) - timedelta(days=self.expiry_days)
        valid: List[E] = []
        seen_hashes = set()
        skipped = 0
        for item in parsed:
            try:
                entry = self.entry_type.model_validate(item)
            except ValidationError:
                skipped += 1
                continue
            if _as_utc(entry.timestamp) <= cutoff or entry.hash in seen_hashes:
                continue
            seen_hashes.add(entry.hash)
            valid.append(entry)

        if skipped:
            logger.warning(f"History cache '{self.cache_key}' skipped {skipped} malformed entries")

        return valid[:self.max_entries]

    def _insert(self, dedup_hash: str, build: Callable[[str, datetime], E]) -> E:
        """Prepend a new entry, reusing the id of any entry with the same hash."""
        self._ensure_loaded()
        now = self._clock()
        idx = next((i for i, e in enumerate(self._history) if e.hash == dedup_hash), -1)
        entry_id = self._history[idx].id if idx >= 0 else self._id_factory()
        entry = build(entry_id, now)

        rest = self._history[:idx] + self._history[idx + 1:] if idx >= 0 else self._history
        self._history = ([entry] + rest)[:self.max_entries]
        self._save()

        logger.log_cache_operation(
            self.cache_key,
            "refresh" if idx >= 0 else "add",
            entry_id=entry_id,
            details={"entries": len(self._history)}
        )
        return entry

    def _save(self) -> None:
        payload = json.dumps([e.model_dump(mode="json") for e in self._history])
        try:
            self.storage.set(self.cache_key, payload)
        except Exception as e:
            logger.log_cache_operation(self.cache_key, "save", details={"error": str(e)}, status="failed")

    def clear(self) -> None:
        """Forget all entries and remove the persisted blob."""
        self._history = []
        self.loaded = True
        try:
            self.storage.remove(self.cache_key)
        except Exception as e:
            logger.log_cache_operation(self.cache_key, "clear", details={"error": str(e)}, status="failed")
            return
        logger.log_cache_operation(self.cache_key, "clear")

    @abstractmethod
    def add(self, *args, **kwargs) -> E:
        """Record an occurrence of a query."""
        pass


class EvidenceHistoryCache(QueryHistoryCache[EvidenceQueryEntry]):
    """Recent evidence retrieval queries, deduplicated by query text."""

    cache_key = "evidence-queries-history"
    entry_type = EvidenceQueryEntry

    def __init__(self, storage: IKeyValueStore, max_entries: int = None, expiry_days: int = None, **kwargs):
        super().__init__(
            storage,
            max_entries if max_entries is not None else config.EVIDENCE_HISTORY_MAX_ENTRIES,
            expiry_days if expiry_days is not None else config.EVIDENCE_HISTORY_EXPIRY_DAYS,
            **kwargs
        )

    def add(self, query: str, sources_found: int = 0, providers_tried: Iterable[str] = ()) -> EvidenceQueryEntry:
        providers = list(dict.fromkeys(providers_tried or []))
        dedup_hash = hash_string(query)
        return self._insert(
            dedup_hash,
            lambda entry_id, now: EvidenceQueryEntry(
                id=entry_id,
                query=query,
                timestamp=now,
                sources_found=sources_found,
                providers_tried=providers,
                hash=dedup_hash
            )
        )


class CrawlHistoryCache(QueryHistoryCache[CrawlHistoryEntry]):
    """Recent crawl, scrape and search operations."""

    cache_key = "firecrawl-history"
    entry_type = CrawlHistoryEntry

    def __init__(self, storage: IKeyValueStore, max_entries: int = None, expiry_days: int = None, **kwargs):
        super().__init__(
            storage,
            max_entries if max_entries is not None else config.CRAWL_HISTORY_MAX_ENTRIES,
            expiry_days if expiry_days is not None else config.CRAWL_HISTORY_EXPIRY_DAYS,
            **kwargs
        )

    def add(self, mode: CrawlMode, query: Optional[str] = None, urls: Optional[List[str]] = None,
            pages_scraped: int = 0, processing_time_ms: float = 0) -> CrawlHistoryEntry:
        mode = CrawlMode(mode)
        dedup_hash = hash_string(crawl_dedup_key(mode.value, query, urls))
        return self._insert(
            dedup_hash,
            lambda entry_id, now: CrawlHistoryEntry(
                id=entry_id,
                mode=mode,
                query=query,
                urls=list(urls) if urls is not None else None,
                pages_scraped=pages_scraped,
                providers=["firecrawl"],
                processing_time_ms=processing_time_ms,
                timestamp=now,
                hash=dedup_hash
            )
        )

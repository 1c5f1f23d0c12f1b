import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from reposcope.domain.models import (
    CacheEntry,
    CacheEntrySummary,
    CachePage,
    CacheStats,
    CompositeRecord,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheStore:
    """
    In-memory, time-expiring store of composite records keyed by repository key.

    Expiry is enforced lazily: `lookup` evicts an expired entry it runs into and
    `sweep` removes them in bulk. There is no background timer and no locking;
    the store is meant to be owned by a single event loop.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock: Callable[[], datetime] = utcnow):
        if ttl <= timedelta(0):
            raise ValueError("Cache TTL must be positive.")
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def now(self) -> datetime:
        return self.clock()

    def _valid_entries(self, now: datetime) -> List[CacheEntry]:
        return [entry for entry in self._entries.values() if not entry.is_expired(now)]

    def lookup(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.now()):
            del self._entries[key]
            logger.info(f"Evicted expired cache entry {key}.")
            return None
        return entry

    def upsert(self, key: str, record: CompositeRecord) -> CacheEntry:
        """
        Inserts or replaces the record stored under `key`.
        A replace keeps the original creation time and bumps the access counter.
        """
        now = self.now()
        existing = self._entries.get(key)
        entry = CacheEntry(
            key=key,
            record=record,
            created_at=existing.created_at if existing else now,
            updated_at=now,
            expires_at=now + self.ttl,
            access_count=existing.access_count + 1 if existing else 1,
            last_accessed=now,
        )
        self._entries[key] = entry
        return entry

    def record_access(self, key: str) -> Optional[CacheEntry]:
        now = self.now()
        entry = self._entries.get(key)
        if entry is None or entry.is_expired(now):
            return None
        entry.access_count += 1
        entry.last_accessed = now
        return entry

    def evict(self, key: str) -> Optional[CacheEntry]:
        return self._entries.pop(key, None)

    def stats(self, top: int = 0) -> CacheStats:
        now = self.now()
        entries = list(self._entries.values())
        valid = sum(1 for entry in entries if not entry.is_expired(now))
        total_accesses = sum(entry.access_count for entry in entries)
        created = [entry.created_at for entry in entries]

        return CacheStats(
            total_entries=len(entries),
            valid_entries=valid,
            expired_entries=len(entries) - valid,
            total_accesses=total_accesses,
            avg_access_count=total_accesses / len(entries) if entries else 0.0,
            oldest_entry=min(created) if created else None,
            newest_entry=max(created) if created else None,
            top_accessed=self.top_accessed(top) if top > 0 else [],
        )

    def top_accessed(self, limit: int = 10) -> List[CacheEntrySummary]:
        ranked = sorted(self._valid_entries(self.now()), key=lambda entry: entry.access_count, reverse=True)
        return [CacheEntrySummary.from_entry(entry) for entry in ranked[:max(limit, 0)]]

    def search(self, query: str, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> CachePage:
        """
        Case-insensitive substring search over name, description, language and topics
        of valid entries, most accessed first, then most starred.
        """
        needle = (query or "").strip().lower()
        matches = [entry for entry in self._valid_entries(self.now()) if _matches(entry, needle)]
        matches.sort(key=lambda entry: (entry.access_count, entry.record.repository.stars), reverse=True)
        return _paginate(matches, page, page_size)

    def recent(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> CachePage:
        entries = sorted(self._valid_entries(self.now()), key=lambda entry: entry.created_at, reverse=True)
        return _paginate(entries, page, page_size)

    def sweep(self) -> int:
        now = self.now()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(f"Swept {len(expired)} expired cache entries.")
        return len(expired)

    def clear(self) -> int:
        deleted = len(self._entries)
        self._entries.clear()
        logger.info(f"Cleared {deleted} cache entries.")
        return deleted


def _matches(entry: CacheEntry, needle: str) -> bool:
    record = entry.record
    repository = record.repository
    haystack = [
        repository.name,
        repository.full_name,
        repository.description,
        repository.language,
        record.languages.primary if record.languages.stats else None,
        *repository.topics,
    ]
    return any(needle in value.lower() for value in haystack if value)


def _paginate(entries: List[CacheEntry], page: int, page_size: int) -> CachePage:
    page = max(page, 1)
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
    start = (page - 1) * page_size
    return CachePage(
        results=[CacheEntrySummary.from_entry(entry) for entry in entries[start:start + page_size]],
        total=len(entries),
        page=page,
        page_size=page_size,
        pages=math.ceil(len(entries) / page_size),
    )

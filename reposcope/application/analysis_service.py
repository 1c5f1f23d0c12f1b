import logging
import time
from typing import Optional

from reposcope.application.aggregator import RepositoryAggregator
from reposcope.domain.models import (
    AnalysisResult,
    CacheEntry,
    CacheEntryStatus,
    CachePage,
    CacheStats,
)
from reposcope.domain.references import parse_reference
from reposcope.infrastructure.cache_store import DEFAULT_PAGE_SIZE, CacheStore

logger = logging.getLogger(__name__)

TOP_ACCESSED_IN_STATS = 5


class AnalysisService:
    """
    Entry point of the analysis pipeline: normalize the reference, serve from the
    cache when possible, otherwise aggregate and cache the fresh record.
    """

    def __init__(self, aggregator: RepositoryAggregator, cache_store: CacheStore):
        self.aggregator = aggregator
        self.cache_store = cache_store

    async def analyze(self, reference: str, force_refresh: bool = False) -> AnalysisResult:
        """
        Analyzes a repository reference.

        Raises:
            InvalidReferenceException: if the reference cannot be parsed.
            RepositoryNotFoundException, AccessForbiddenException,
            UpstreamTimeoutException, UpstreamFailureException:
                if the mandatory repository metadata fetch fails.
        """
        parsed = parse_reference(reference)
        key = parsed.key

        if not force_refresh:
            cached = self.cache_store.lookup(key)
            if cached is not None:
                self.cache_store.record_access(key)
                logger.info(f"Cache hit for {key} (accesses: {cached.access_count}).")
                return AnalysisResult(
                    record=cached.record,
                    cached=True,
                    access_count=cached.access_count,
                    cache_age_seconds=(self.cache_store.now() - cached.created_at).total_seconds(),
                )

        started = time.monotonic()
        record = await self.aggregator.aggregate(parsed.owner, parsed.repo)
        entry = self.cache_store.upsert(key, record)
        logger.info(f"Cached analysis for {key}.")

        return AnalysisResult(
            record=record,
            cached=False,
            access_count=entry.access_count,
            analysis_time_seconds=time.monotonic() - started,
        )

    def cache_stats(self) -> CacheStats:
        return self.cache_store.stats(top=TOP_ACCESSED_IN_STATS)

    def cache_search(self, query: str, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> CachePage:
        return self.cache_store.search(query, page, page_size)

    def cache_recent(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> CachePage:
        return self.cache_store.recent(page, page_size)

    def cache_sweep(self) -> int:
        return self.cache_store.sweep()

    def cache_clear(self) -> int:
        return self.cache_store.clear()

    def cache_entry_status(self, reference: str) -> CacheEntryStatus:
        key = parse_reference(reference).key
        entry = self.cache_store.lookup(key)
        if entry is None:
            return CacheEntryStatus(key=key, cached=False)
        return CacheEntryStatus(
            key=key,
            cached=True,
            last_analyzed=entry.created_at,
            expires_at=entry.expires_at,
            access_count=entry.access_count,
            is_expired=entry.is_expired(self.cache_store.now()),
        )

    def cache_evict(self, reference: str) -> Optional[CacheEntry]:
        key = parse_reference(reference).key
        entry = self.cache_store.evict(key)
        if entry is not None:
            logger.info(f"Evicted cache entry {key} on request.")
        return entry

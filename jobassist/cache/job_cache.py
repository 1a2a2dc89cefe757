"""
Job search result cache.

Features:
- Caches job search results by hashed search criteria
- Configurable TTL (default 4 hours)
- Graceful fallback when Redis is unavailable
- Cache invalidation by pattern
- Metrics tracking (hits/misses/errors)

Usage:
    job_cache = JobCache(RedisCache.from_settings(settings.cache))

    # Option 1: wrapper (recommended)
    jobs = job_cache.with_job_cache(params, lambda: search_adzuna(params))

    # Option 2: manual
    jobs = job_cache.get_cached_jobs(params)
    if jobs is None:
        jobs = search_adzuna(params)
        job_cache.cache_jobs(params, jobs)
"""

import json
import logging
from collections import Counter
from datetime import timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from pydantic import ValidationError

from jobassist.cache.redis_cache import RedisCache, DEFAULT_TTL_SECONDS
from jobassist.core.schemas import (
    CachedJobData, JobCacheStats, JobResult, JobSearchParams, utcnow
)

logger = logging.getLogger(__name__)

JOB_CACHE_PREFIX = "job-cache"

JobFetcher = Callable[[], Sequence[Union[JobResult, dict]]]

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


# ============================================================================
# Key Derivation
# ============================================================================

def normalize_search_params(params: JobSearchParams) -> Dict:
    """Sort list fields and default missing scalars so equivalent searches match."""
    return {
        "roles": sorted(params.roles or []),
        "locations": sorted(params.locations or []),
        "skills": sorted(params.skills or []),
        "remote_preference": params.remote_preference or "",
        "salary_min": params.salary_min or 0,
        "salary_max": params.salary_max or 0,
    }


def _djb2(text: str) -> int:
    """32-bit signed djb2 (h = h * 33 ^ c)."""
    h = 5381
    for ch in text:
        h = ((h * 33) & 0xFFFFFFFF) ^ ord(ch)
    if h & 0x80000000:
        h -= 0x100000000
    return h


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def hash_search_params(params: JobSearchParams) -> str:
    """
    Short deterministic fingerprint of the normalized search parameters.

    Non-cryptographic and collisions are not detected: two different
    searches hashing to the same value would share an entry.
    """
    serialized = json.dumps(
        normalize_search_params(params), separators=(",", ":"), ensure_ascii=False
    )
    return _to_base36(abs(_djb2(serialized)))


def cache_key(params: JobSearchParams, prefix: str = JOB_CACHE_PREFIX) -> str:
    """Generate cache key for job search."""
    return f"{prefix}:{hash_search_params(params)}"


# ============================================================================
# Job Cache
# ============================================================================

class JobCache:
    """Job search cache on top of RedisCache."""

    def __init__(
        self,
        cache: RedisCache,
        prefix: str = JOB_CACHE_PREFIX,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS
    ):
        self.cache = cache
        self.prefix = prefix
        self.default_ttl_seconds = default_ttl_seconds

    def key_for(self, params: JobSearchParams) -> str:
        return cache_key(params, self.prefix)

    def _build_entry(
        self,
        params: JobSearchParams,
        jobs: Iterable[Union[JobResult, dict]],
        ttl_seconds: int
    ) -> CachedJobData:
        results = [JobResult.model_validate(job) for job in jobs]
        now = utcnow()
        return CachedJobData(
            jobs=results,
            cached_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
            source_counts=dict(Counter(job.source.value for job in results)),
            search_params=params
        )

    def _parse_entry(self, key: str, raw) -> Optional[CachedJobData]:
        if not isinstance(raw, dict) or not isinstance(raw.get("jobs"), list):
            return None
        try:
            return CachedJobData.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Discarding malformed job cache entry {key}: {e}")
            return None

    def get_cached_job_data(self, params: JobSearchParams) -> Optional[CachedJobData]:
        """Full cached entry including metadata, or None."""
        if not self.cache.is_configured:
            return None

        key = self.key_for(params)
        return self._parse_entry(key, self.cache.get(key))

    def get_cached_jobs(self, params: JobSearchParams) -> Optional[List[JobResult]]:
        """
        Get cached jobs for the given search criteria.

        Returns:
            Cached jobs, or None if not in cache (or caching is disabled)
        """
        if not self.cache.is_configured:
            return None

        key = self.key_for(params)
        entry = self._parse_entry(key, self.cache.get(key))
        if entry is None:
            logger.info(f"Job cache miss for key {key}")
            return None

        logger.info(f"Job cache hit for key {key}: {len(entry.jobs)} jobs")
        return entry.jobs

    def cache_jobs(
        self,
        params: JobSearchParams,
        jobs: Sequence[Union[JobResult, dict]],
        ttl_seconds: Optional[int] = None
    ) -> None:
        """Cache job search results with per-source counts and expiry metadata."""
        if not self.cache.is_configured:
            return

        ttl = ttl_seconds or self.default_ttl_seconds
        key = self.key_for(params)
        entry = self._build_entry(params, jobs, ttl)
        self.cache.set(key, entry.model_dump(mode="json"), ttl)
        logger.info(f"Cached {len(entry.jobs)} jobs with key {key}, TTL: {ttl}s")

    def with_job_cache(
        self,
        params: JobSearchParams,
        fetcher: JobFetcher,
        ttl_seconds: Optional[int] = None
    ) -> List[JobResult]:
        """
        Run a job source search through the cache.

        Stores the same CachedJobData envelope as cache_jobs, so entries
        written here are readable by get_cached_jobs.

        Args:
            params: Job search parameters
            fetcher: Function to fetch jobs from the provider
            ttl_seconds: Cache TTL in seconds (default: 4 hours)

        Returns:
            Job results (from cache or freshly fetched)
        """
        if not self.cache.is_configured:
            return [JobResult.model_validate(job) for job in fetcher()]

        ttl = ttl_seconds or self.default_ttl_seconds
        key = self.key_for(params)

        def fetch_entry() -> Dict:
            return self._build_entry(params, fetcher(), ttl).model_dump(mode="json")

        # An unreadable entry (e.g. an older shape) is a miss and gets overwritten
        raw = self.cache.with_cache(
            key, fetch_entry, ttl, is_valid=lambda value: self._parse_entry(key, value) is not None
        )
        return CachedJobData.model_validate(raw).jobs

    def invalidate(self, pattern: Optional[str] = None) -> int:
        """
        Invalidate job cache entries.

        Args:
            pattern: Optional glob matched after the prefix (default: all entries)

        Returns:
            Number of keys deleted
        """
        if not self.cache.is_configured:
            return 0

        full_pattern = f"{self.prefix}:{pattern}" if pattern else f"{self.prefix}:*"
        deleted = self.cache.delete_pattern(full_pattern)
        logger.info(f"Invalidated {deleted} job cache entries matching {full_pattern}")
        return deleted

    def stats(self) -> JobCacheStats:
        """Job cache statistics."""
        metrics = self.cache.get_metrics()
        return JobCacheStats(
            hits=metrics.hits,
            misses=metrics.misses,
            errors=metrics.errors,
            last_reset=metrics.last_reset,
            is_configured=self.cache.is_configured,
            prefix=self.prefix,
            default_ttl_seconds=self.default_ttl_seconds
        )

    def prewarm(
        self,
        params_list: Iterable[JobSearchParams],
        fetcher_factory: Callable[[JobSearchParams], JobFetcher]
    ) -> Dict[str, int]:
        """
        Pre-warm the cache with common search criteria, e.g. after a deploy.

        Returns:
            {"warmed": n, "failed": m}
        """
        warmed = 0
        failed = 0

        for params in params_list:
            try:
                self.with_job_cache(params, fetcher_factory(params))
                warmed += 1
            except Exception as e:
                logger.error(f"Failed to pre-warm cache for {params}: {e}")
                failed += 1

        return {"warmed": warmed, "failed": failed}

"""
Redis cache wrapper for JobAssist.

Caching is an optimization only: when Redis is not configured every call
goes straight to the fetcher, and backend errors are logged and counted
but never raised. Only errors from the fetcher reach the caller.

Configuration:
    CACHE_REDIS_URL=rediss://default:<token>@<host>:6379   # hosted TLS Redis
    CACHE_REDIS_URL=redis://localhost:6379/0              # local development
"""

import json
import logging
from typing import Any, Callable, Optional, TypeVar

import redis

from jobassist.core.config import CacheSettings
from jobassist.core.schemas import CacheMetrics

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 14400  # 4 hours

# Everything the backend can throw at us on a read or write
BACKEND_ERRORS = (redis.RedisError, OSError, ValueError, TypeError)


class RedisCache:
    """
    Get-or-compute cache over a Redis client.

    The client is optional; with no client the cache is disabled and
    behaves as a pass-through.
    """

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        metrics: Optional[CacheMetrics] = None,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        scan_batch_size: int = 100
    ):
        self.client = client
        self.metrics = metrics if metrics is not None else CacheMetrics()
        self.default_ttl_seconds = default_ttl_seconds
        self.scan_batch_size = scan_batch_size

    @classmethod
    def from_settings(
        cls,
        settings: CacheSettings,
        metrics: Optional[CacheMetrics] = None
    ) -> "RedisCache":
        """Build the cache at startup. A missing redis_url disables caching."""
        client = None
        if settings.redis_url:
            client = redis.Redis.from_url(
                settings.redis_url,
                socket_timeout=settings.socket_timeout,
                socket_connect_timeout=settings.socket_timeout,
                decode_responses=True
            )
            logger.info("Redis cache configured")
        else:
            logger.warning("CACHE_REDIS_URL not set - caching disabled")

        return cls(
            client=client,
            metrics=metrics,
            default_ttl_seconds=settings.default_ttl_seconds,
            scan_batch_size=settings.scan_batch_size
        )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    # =========================================================================
    # Get-or-compute
    # =========================================================================

    def with_cache(
        self,
        key: str,
        fetcher: Callable[[], T],
        ttl_seconds: Optional[int] = None,
        is_valid: Optional[Callable[[Any], bool]] = None
    ) -> T:
        """
        Return the cached value for key, or compute, store and return it.

        A stored null, or a value rejected by is_valid, counts as a miss and
        is overwritten with fresh data.

        Args:
            key: Cache key
            fetcher: Called on a miss (or when the cache is unavailable)
            ttl_seconds: Time-to-live override (default: 4 hours)
            is_valid: Optional check on the decoded cached value

        Returns:
            Cached or freshly fetched data
        """
        if self.client is None:
            return fetcher()

        try:
            raw = self.client.get(key)
            value = json.loads(raw) if raw is not None else None
            if value is not None and (is_valid is None or is_valid(value)):
                self.metrics.record_hit()
                return value
            self.metrics.record_miss()
        except BACKEND_ERRORS as e:
            logger.error(f"Redis get error for {key}: {e}")
            self.metrics.record_error()

        data = fetcher()

        try:
            self.client.setex(key, ttl_seconds or self.default_ttl_seconds, json.dumps(data))
        except BACKEND_ERRORS as e:
            # Data was still fetched successfully, so return it
            logger.error(f"Redis set error for {key}: {e}")
            self.metrics.record_error()

        return data

    # =========================================================================
    # Explicit operations
    # =========================================================================

    def get(self, key: str) -> Optional[Any]:
        """Get a value from cache, or None."""
        if self.client is None:
            return None

        try:
            raw = self.client.get(key)
        except BACKEND_ERRORS as e:
            logger.error(f"Redis get error for {key}: {e}")
            self.metrics.record_error()
            return None

        value = None
        if raw is not None:
            try:
                value = json.loads(raw)
            except ValueError as e:
                logger.error(f"Corrupt cache entry at {key}: {e}")
                self.metrics.record_error()
                return None

        if value is None:
            self.metrics.record_miss()
            return None

        self.metrics.record_hit()
        return value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Set a value in cache with expiry."""
        if self.client is None:
            return

        try:
            self.client.setex(key, ttl_seconds or self.default_ttl_seconds, json.dumps(value))
        except BACKEND_ERRORS as e:
            logger.error(f"Redis set error for {key}: {e}")
            self.metrics.record_error()

    def delete(self, key: str) -> None:
        """Delete a value from cache."""
        if self.client is None:
            return

        try:
            self.client.delete(key)
        except BACKEND_ERRORS as e:
            logger.error(f"Redis delete error for {key}: {e}")
            self.metrics.record_error()

    def delete_pattern(self, pattern: str) -> int:
        """
        Delete every key matching a glob pattern.

        Walks the keyspace with SCAN in batches until the cursor returns
        to 0.

        Args:
            pattern: Key pattern (e.g., "job-cache:*")

        Returns:
            Number of keys deleted
        """
        if self.client is None:
            return 0

        deleted = 0
        cursor = 0
        try:
            while True:
                cursor, keys = self.client.scan(
                    cursor=cursor, match=pattern, count=self.scan_batch_size
                )
                cursor = int(cursor)
                if keys:
                    self.client.delete(*keys)
                    deleted += len(keys)
                if cursor == 0:
                    break
        except BACKEND_ERRORS as e:
            logger.error(f"Redis delete pattern error for {pattern}: {e}")
            self.metrics.record_error()
            return 0

        return deleted

    # =========================================================================
    # Metrics
    # =========================================================================

    def get_metrics(self) -> CacheMetrics:
        """Get a copy of the current cache metrics."""
        return self.metrics.snapshot()

    def reset_metrics(self) -> None:
        self.metrics.reset()

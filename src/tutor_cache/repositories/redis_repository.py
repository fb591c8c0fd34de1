"""Redis implementation of CacheStore.

Each entry is a hash at ``<prefix>:entry:<fingerprint>``. A sorted set at
``<prefix>:expiry`` scores every fingerprint by its expiration timestamp,
which is what the cleanup sweep range-queries. Keys carry no native Redis
TTL: expiration is enforced on read and reclaimed by the sweep, so the
sweep reports exact deletion counts.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

import redis

from tutor_cache.config import get_redis_client, settings
from tutor_cache.entities import CacheEntryEntity, CacheFamily
from tutor_cache.errors import CacheStoreError

from .serialization import entry_to_mapping, mapping_to_entry

logger = logging.getLogger(__name__)

SWEEP_BATCH_SIZE = 500


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RedisCacheRepository:
    """Redis implementation of the CacheStore protocol.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Uses plain Redis data structures:
    - HASH per entry (payload JSON plus metadata fields)
    - ZSET expiry index for lazy expiration sweeps
    - MULTI/EXEC pipelines for atomic upserts, WATCH for hit recording
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        key_prefix: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: Redis client instance. If None, creates default.
            key_prefix: Namespace for all keys. Defaults to settings.
            clock: Returns the current UTC time. Defaults to the system clock.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = key_prefix or settings.cache_key_prefix
        self._now = clock or _utcnow

    @classmethod
    def create(cls, key_prefix: str | None = None) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Args:
            key_prefix: Key namespace. If None, uses settings.

        Returns:
            Configured RedisCacheRepository
        """
        return cls(key_prefix=key_prefix)

    def _entry_key(self, fingerprint: str) -> str:
        return f"{self._prefix}:entry:{fingerprint}"

    @property
    def _expiry_key(self) -> str:
        return f"{self._prefix}:expiry"

    def find(self, fingerprint: str, family: CacheFamily) -> CacheEntryEntity | None:
        """Find a live entry by fingerprint.

        Args:
            fingerprint: The cache key
            family: Expected family

        Returns:
            The entry, or None if absent, expired, of another family or unreadable

        Raises:
            CacheStoreError: If Redis cannot be reached
        """
        try:
            data = self._client.hgetall(self._entry_key(fingerprint))
        except redis.RedisError as e:
            raise CacheStoreError(f"Failed to read cache entry {fingerprint}: {e}") from e

        if not data:
            return None

        try:
            entry = mapping_to_entry(data)
        except ValueError as e:
            logger.warning("Ignoring unreadable cache entry %s: %s", fingerprint, e)
            return None

        if entry.family != CacheFamily(family) or entry.is_expired(self._now()):
            return None
        return entry

    def upsert(self, entry: CacheEntryEntity) -> None:
        """Atomically replace the entry stored under its fingerprint.

        Args:
            entry: The entry to store

        Raises:
            CacheStoreError: If the write fails
        """
        key = self._entry_key(entry.fingerprint)
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.delete(key)
            pipe.hset(key, mapping=entry_to_mapping(entry))
            pipe.zadd(self._expiry_key, {entry.fingerprint: entry.expires_at.timestamp()})
            pipe.execute()
        except redis.RedisError as e:
            raise CacheStoreError(f"Failed to write cache entry {entry.fingerprint}: {e}") from e

    def record_hit(self, fingerprint: str) -> int | None:
        """Increment the usage count and refresh last_used_at.

        Args:
            fingerprint: The cache key

        Returns:
            The new usage count, or None if the entry is gone

        Raises:
            CacheStoreError: If the write fails
        """
        key = self._entry_key(fingerprint)

        def increment(pipe) -> None:
            # WATCH on the key aborts and retries if a sweep deletes it first
            if not pipe.exists(key):
                return
            pipe.multi()
            pipe.hincrby(key, "usage_count", 1)
            pipe.hset(key, "last_used_at", self._now().isoformat())

        try:
            results = self._client.transaction(increment, key)
        except redis.RedisError as e:
            raise CacheStoreError(f"Failed to record hit for {fingerprint}: {e}") from e
        if not results:
            return None
        return int(results[0])

    def sweep_expired(self) -> int:
        """Delete all entries whose expiration is in the past.

        Works in batches so no single transaction blocks unrelated keys
        for long.

        Returns:
            Number of entries deleted

        Raises:
            CacheStoreError: If Redis cannot be reached
        """
        cutoff = self._now().timestamp()
        try:
            expired = [
                fp.decode("utf-8") if isinstance(fp, bytes) else fp
                for fp in self._client.zrangebyscore(self._expiry_key, "-inf", f"({cutoff}")
            ]
            deleted = 0
            for start in range(0, len(expired), SWEEP_BATCH_SIZE):
                batch = expired[start:start + SWEEP_BATCH_SIZE]
                pipe = self._client.pipeline(transaction=True)
                for fingerprint in batch:
                    pipe.delete(self._entry_key(fingerprint))
                pipe.zrem(self._expiry_key, *batch)
                results = pipe.execute()
                deleted += sum(int(r) for r in results[:-1])
        except redis.RedisError as e:
            raise CacheStoreError(f"Failed to sweep expired cache entries: {e}") from e
        return deleted

    def count_all(self) -> int:
        """Count stored entries (expired ones included until swept).

        Returns:
            Total number of entries in the expiry index
        """
        try:
            return int(self._client.zcard(self._expiry_key))
        except redis.RedisError as e:
            raise CacheStoreError(f"Failed to count cache entries: {e}") from e

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            result = self._client.ping()
            return bool(result)
        except redis.RedisError:
            return False

    def get_stats(self) -> dict:
        """Get repository statistics.

        Returns:
            Dictionary with entry totals and per-family usage
        """
        families = {family.value: {"entries": 0, "total_usage": 0} for family in CacheFamily}
        try:
            for key in self._client.scan_iter(match=f"{self._prefix}:entry:*"):
                family, usage_count = self._client.hmget(key, "family", "usage_count")
                if isinstance(family, bytes):
                    family = family.decode("utf-8")
                if family not in families:
                    continue
                families[family]["entries"] += 1
                families[family]["total_usage"] += int(usage_count or 0)
            total = self.count_all()
        except redis.RedisError as e:
            raise CacheStoreError(f"Failed to collect cache stats: {e}") from e

        return {
            "backend": "redis",
            "key_prefix": self._prefix,
            "total_entries": total,
            "families": families,
        }

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client

"""Best-effort access to the cache store.

The cache is an optimization, not a correctness requirement: every store
failure is logged here and turned into a miss (on read) or a dropped
write, so orchestrators never see a cache-layer error.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from tutor_cache.config import Settings
from tutor_cache.config import settings as default_settings
from tutor_cache.entities import CacheEntryEntity, CacheFamily, CachePayload
from tutor_cache.protocols import CacheStore

from .usage_counter import UsageCounter

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheGateway:
    """Cache lookups and writes shared by the four orchestrators.

    Example:
        ```python
        gateway = CacheGateway(repository=InMemoryCacheRepository(), usage=UsageCounter())

        entry = gateway.lookup("grading_0123abcd4567ef89", CacheFamily.GRADING)
        if entry is None:
            gateway.save("grading_0123abcd4567ef89", CacheFamily.GRADING, payload, tokens_used=412)
        ```
    """

    def __init__(
        self,
        repository: CacheStore,
        usage: UsageCounter,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            repository: Cache storage backend (required).
            usage: Usage counter receiving hit records (required).
            settings: Source of per-family TTLs. Defaults to global settings.
            clock: Returns the current UTC time. Defaults to the system clock.
        """
        self._repository = repository
        self._usage = usage
        self._settings = settings or default_settings
        self._now = clock or _utcnow

    def lookup(self, fingerprint: str, family: CacheFamily) -> CacheEntryEntity | None:
        """Return a live entry and record the hit.

        Args:
            fingerprint: The cache key
            family: Expected family

        Returns:
            The entry with its post-hit usage count, or None on a miss or
            a store failure
        """
        try:
            entry = self._repository.find(fingerprint, family)
        except Exception as e:
            logger.warning("Cache lookup failed for %s, treating as miss: %s", fingerprint, e, exc_info=True)
            return None

        if entry is None:
            return None

        try:
            usage_count = self._repository.record_hit(fingerprint)
        except Exception as e:
            logger.warning("Failed to record cache hit for %s: %s", fingerprint, e, exc_info=True)
            usage_count = None

        self._usage.record_hit(family, fingerprint)
        if usage_count is None:
            usage_count = entry.usage_count + 1
        return replace(entry, usage_count=usage_count, last_used_at=self._now())

    def save(
        self,
        fingerprint: str,
        family: CacheFamily,
        payload: CachePayload,
        tokens_used: int | None = None,
        model_used: str | None = None,
    ) -> CacheEntryEntity | None:
        """Upsert a fresh entry with the family's TTL.

        Args:
            fingerprint: The cache key
            family: Family of the payload
            payload: The result to cache
            tokens_used: Tokens spent producing it (None for fallbacks)
            model_used: Model that produced it (None for fallbacks)

        Returns:
            The stored entry, or None if the write was dropped
        """
        now = self._now()
        entry = CacheEntryEntity(
            fingerprint=fingerprint,
            family=family,
            payload=payload,
            created_at=now,
            expires_at=now + timedelta(days=self._settings.ttl_days(family)),
            usage_count=0,
            last_used_at=None,
            tokens_used=tokens_used,
            model_used=model_used,
        )
        try:
            self._repository.upsert(entry)
        except Exception as e:
            logger.error("Failed to save %s cache entry %s: %s", family.value, fingerprint, e, exc_info=True)
            return None
        return entry

    @property
    def repository(self) -> CacheStore:
        """Get the underlying repository (for testing)."""
        return self._repository

    @property
    def usage(self) -> UsageCounter:
        return self._usage

"""Cache storage protocol.

Defines the interface for any backend that can hold fingerprint-keyed
cache entries with an absolute expiration.

Implementations can include:
- Redis (default)
- In-memory dict (tests, single-process deployments)
- A document store or a relational table with an indexed expiry column
"""

from typing import Protocol, runtime_checkable

from tutor_cache.entities import CacheEntryEntity, CacheFamily


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed. Implementations raise
    ``CacheStoreError`` on backend failures; deciding that a failure is
    harmless is the service layer's job.

    Example:
        ```python
        from tutor_cache.protocols import CacheStore

        repo: CacheStore = RedisCacheRepository.create()
        repo: CacheStore = InMemoryCacheRepository()
        ```
    """

    def find(self, fingerprint: str, family: CacheFamily) -> CacheEntryEntity | None:
        """Find a live entry.

        Args:
            fingerprint: The cache key
            family: Expected family; an entry of another family is not a match

        Returns:
            The entry, or None if absent or expired (``expires_at <= now``)
        """
        ...

    def upsert(self, entry: CacheEntryEntity) -> None:
        """Insert or atomically replace the entry for ``entry.fingerprint``.

        Args:
            entry: The entry to store, with its absolute expiration set
        """
        ...

    def record_hit(self, fingerprint: str) -> int | None:
        """Increment usage count and refresh the last-used timestamp.

        Args:
            fingerprint: The cache key of an entry returned by ``find``

        Returns:
            The new usage count, or None if the entry no longer exists
        """
        ...

    def sweep_expired(self) -> int:
        """Delete all entries with ``expires_at < now`` across families.

        Returns:
            Number of entries deleted
        """
        ...

    def count_all(self) -> int:
        """Count stored entries, expired ones included.

        Returns:
            Total number of physically stored entries
        """
        ...

    def health_check(self) -> bool:
        """Check if the backend is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...

    def get_stats(self) -> dict:
        """Get repository statistics.

        Returns:
            Dictionary with ``total_entries`` and per-family
            ``{"entries": n, "total_usage": n}`` under ``families``
        """
        ...

"""Expired cache entry removal."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from tutor_cache.entities import CleanupResult
from tutor_cache.errors import CleanupError
from tutor_cache.protocols import CacheStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CleanupService:
    """Deletes expired entries of every family in one sweep.

    Lookups already ignore expired entries, so a delayed or skipped sweep
    only costs storage.
    """

    def __init__(self, repository: CacheStore, clock: Callable[[], datetime] | None = None) -> None:
        self._repository = repository
        self._now = clock or _utcnow

    def run_cleanup(self) -> CleanupResult:
        """Sweep expired entries now.

        Returns:
            CleanupResult with the number of deleted entries

        Raises:
            CleanupError: If the store cannot complete the sweep
        """
        ran_at = self._now()
        logger.info("Starting cache cleanup")
        try:
            deleted = self._repository.sweep_expired()
        except Exception as e:
            logger.error("Cache cleanup failed: %s", e, exc_info=True)
            raise CleanupError(f"Cache cleanup failed: {e}") from e

        logger.info("Cache cleanup completed, %d expired entries removed", deleted)
        return CleanupResult(deleted_count=deleted, ran_at=ran_at)

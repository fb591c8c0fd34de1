"""Background jobs."""

from .scheduler import CLEANUP_JOB_ID, CacheCleanupScheduler

__all__ = ["CLEANUP_JOB_ID", "CacheCleanupScheduler"]

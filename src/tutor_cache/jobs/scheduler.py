"""Scheduled cache cleanup.

Runs ``CleanupService.run_cleanup`` on a cron schedule using APScheduler.
The scheduler lives inside the API process and is started and stopped by
the application lifespan.
"""

import logging

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from tutor_cache.errors import CleanupError
from tutor_cache.services import CleanupService

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "cache-cleanup"


class CacheCleanupScheduler:
    """Triggers the expired-entry sweep on a cron schedule.

    Example:
        ```python
        scheduler = CacheCleanupScheduler(cleanup_service, "0 2 * * *")
        scheduler.start()  # inside a running event loop
        ...
        scheduler.stop()
        ```
    """

    def __init__(self, cleanup: CleanupService, cron: str = "0 2 * * *", timezone: str = "UTC") -> None:
        """Initialize the scheduler.

        Args:
            cleanup: Service that performs the sweep (required).
            cron: Standard five-field crontab expression.
            timezone: Timezone the cron expression is evaluated in.

        Raises:
            ValueError: If the cron expression is invalid
        """
        self._cleanup = cleanup
        self._cron = cron
        self._trigger = CronTrigger.from_crontab(cron, timezone=timezone)
        self._scheduler: AsyncIOScheduler | None = None
        self._timezone = timezone

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """Start the scheduler. Must be called from a running event loop."""
        if self.is_running:
            return

        self._scheduler = AsyncIOScheduler(
            timezone=self._timezone,
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 300},
        )
        self._scheduler.add_listener(self._job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
        self._scheduler.add_job(
            func=self.run_job,
            trigger=self._trigger,
            id=CLEANUP_JOB_ID,
            name="Expired cache entry cleanup",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Cache cleanup scheduled with cron '%s' (%s)", self._cron, self._timezone)

    def stop(self) -> None:
        if not self.is_running:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Cache cleanup scheduler stopped")

    def run_job(self) -> int | None:
        """Run one scheduled sweep.

        Errors are logged and not raised; the next run retries.

        Returns:
            Number of deleted entries, or None if the sweep failed
        """
        try:
            result = self._cleanup.run_cleanup()
        except CleanupError as e:
            logger.error("Scheduled cache cleanup failed: %s", e)
            return None
        return result.deleted_count

    def next_run_time(self):
        """Next scheduled run, or None when not running."""
        if not self.is_running:
            return None
        job = self._scheduler.get_job(CLEANUP_JOB_ID)
        return job.next_run_time if job else None

    @staticmethod
    def _job_listener(event: JobExecutionEvent) -> None:
        if event.exception:
            logger.error("Job %s raised: %s", event.job_id, event.exception)
        else:
            logger.debug("Job %s executed", event.job_id)

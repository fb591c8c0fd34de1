"""
Tests for the cleanup service and its scheduler.
"""

from datetime import timedelta

import pytest

from tutor_cache.entities import CacheEntryEntity, CacheFamily, ChatPayload
from tutor_cache.errors import CleanupError
from tutor_cache.jobs import CLEANUP_JOB_ID, CacheCleanupScheduler
from tutor_cache.services import CleanupService

from .conftest import START


def chat_entry(fingerprint, days):
    return CacheEntryEntity(
        fingerprint=fingerprint,
        family=CacheFamily.CHAT,
        payload=ChatPayload(message="hi"),
        created_at=START,
        expires_at=START + timedelta(days=days),
    )


class BrokenStore:
    def sweep_expired(self):
        raise ConnectionError("store down")


def test_run_cleanup_reports_deleted_count(repository, clock):
    repository.upsert(chat_entry("chat_old", 1))
    repository.upsert(chat_entry("chat_new", 7))
    clock.advance(days=2)

    result = CleanupService(repository, clock=clock).run_cleanup()

    assert result.deleted_count == 1
    assert result.ran_at == clock.now
    assert repository.count_all() == 1


def test_run_cleanup_raises_cleanup_error():
    with pytest.raises(CleanupError):
        CleanupService(BrokenStore()).run_cleanup()


def test_scheduled_job_logs_instead_of_raising():
    scheduler = CacheCleanupScheduler(CleanupService(BrokenStore()))

    assert scheduler.run_job() is None


def test_scheduled_job_returns_deleted_count(repository, clock):
    repository.upsert(chat_entry("chat_old", 1))
    clock.advance(days=2)

    scheduler = CacheCleanupScheduler(CleanupService(repository, clock=clock))

    assert scheduler.run_job() == 1


def test_invalid_cron_is_rejected(repository):
    with pytest.raises(ValueError):
        CacheCleanupScheduler(CleanupService(repository), "not a cron")


@pytest.mark.asyncio
async def test_scheduler_start_and_stop(repository):
    scheduler = CacheCleanupScheduler(CleanupService(repository), "0 2 * * *")

    scheduler.start()
    try:
        assert scheduler.is_running
        next_run = scheduler.next_run_time()
        assert next_run is not None
        assert (next_run.hour, next_run.minute) == (2, 0)
    finally:
        scheduler.stop()

    assert not scheduler.is_running
    assert scheduler.next_run_time() is None
    assert CLEANUP_JOB_ID == "cache-cleanup"

"""In-memory implementations of CacheStore and AnswerStore.

Useful for unit tests and single-process deployments without Redis.
"""

import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from tutor_cache.entities import CacheEntryEntity, CacheFamily, GradedAnswerEntity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCacheRepository:
    """In-memory implementation of the CacheStore protocol.

    A dict keyed by fingerprint, guarded by a lock held only for the
    duration of a single operation.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        """Initialize the in-memory repository.

        Args:
            clock: Returns the current UTC time. Defaults to the system clock.
        """
        self._entries: dict[str, CacheEntryEntity] = {}
        self._lock = threading.Lock()
        self._now = clock or _utcnow

    def find(self, fingerprint: str, family: CacheFamily) -> CacheEntryEntity | None:
        with self._lock:
            entry = self._entries.get(fingerprint)
        if entry is None or entry.family != CacheFamily(family) or entry.is_expired(self._now()):
            return None
        return entry

    def upsert(self, entry: CacheEntryEntity) -> None:
        with self._lock:
            self._entries[entry.fingerprint] = entry

    def record_hit(self, fingerprint: str) -> int | None:
        with self._lock:
            entry = self._entries.get(fingerprint)
            if entry is None:
                return None
            updated = replace(entry, usage_count=entry.usage_count + 1, last_used_at=self._now())
            self._entries[fingerprint] = updated
        return updated.usage_count

    def sweep_expired(self) -> int:
        now = self._now()
        with self._lock:
            expired = [fp for fp, entry in self._entries.items() if entry.expires_at < now]
            for fingerprint in expired:
                del self._entries[fingerprint]
        return len(expired)

    def count_all(self) -> int:
        with self._lock:
            return len(self._entries)

    def health_check(self) -> bool:
        return True

    def get_stats(self) -> dict:
        families = {family.value: {"entries": 0, "total_usage": 0} for family in CacheFamily}
        with self._lock:
            entries = list(self._entries.values())
        for entry in entries:
            families[entry.family.value]["entries"] += 1
            families[entry.family.value]["total_usage"] += entry.usage_count
        return {
            "backend": "memory",
            "total_entries": len(entries),
            "families": families,
        }

    def get_raw(self, fingerprint: str) -> CacheEntryEntity | None:
        """Return the physically stored entry, expired or not (for testing)."""
        with self._lock:
            return self._entries.get(fingerprint)


class InMemoryAnswerRepository:
    """In-memory implementation of the AnswerStore protocol."""

    def __init__(self) -> None:
        self._answers: dict[tuple[str, str, str], GradedAnswerEntity] = {}
        self._lock = threading.Lock()

    def get(self, student_id: str, exam_id: str, question_id: str) -> GradedAnswerEntity | None:
        with self._lock:
            return self._answers.get((student_id, exam_id, question_id))

    def save(self, answer: GradedAnswerEntity) -> None:
        with self._lock:
            self._answers[(answer.student_id, answer.exam_id, answer.question_id)] = answer

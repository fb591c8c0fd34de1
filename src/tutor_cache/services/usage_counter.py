"""Process-lifetime cache hit / generation call counters."""

import logging
import threading
from datetime import datetime, timezone

from tutor_cache.entities import CacheFamily, UsageStats

logger = logging.getLogger(__name__)


class UsageCounter:
    """Counts cache hits against generation calls.

    Owned by whoever wires the services (one instance per process) and
    passed to them explicitly, so tests get a fresh counter per case.
    Nothing is persisted.

    Example:
        ```python
        counter = UsageCounter()
        counter.record_hit(CacheFamily.GRADING)
        counter.record_call(CacheFamily.CONTENT, "gpt-4o-mini", 812)
        counter.hit_rate()  # 50.0
        ```
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reset_state()

    def _reset_state(self) -> None:
        self._hits = 0
        self._calls = 0
        self._tokens = 0
        self._by_family = {family.value: {"hits": 0, "calls": 0, "tokens": 0} for family in CacheFamily}
        self._last_reset = datetime.now(timezone.utc)

    def record_hit(self, family: CacheFamily | str, fingerprint: str = "") -> None:
        """Record a cache hit.

        Args:
            family: Family of the served entry
            fingerprint: Cache key, for the log line only
        """
        family = CacheFamily(family).value
        with self._lock:
            self._hits += 1
            self._by_family[family]["hits"] += 1
        logger.info("[CACHE HIT] family=%s key=%s", family, fingerprint[:24])

    def record_call(self, family: CacheFamily | str, model: str, tokens: int | None = None) -> None:
        """Record a call to the generation service.

        Args:
            family: Family the call was made for
            model: Model used
            tokens: Tokens billed, when known
        """
        family = CacheFamily(family).value
        tokens = tokens or 0
        with self._lock:
            self._calls += 1
            self._tokens += tokens
            self._by_family[family]["calls"] += 1
            self._by_family[family]["tokens"] += tokens
        logger.info("[API CALL] family=%s model=%s tokens=%d", family, model, tokens)

    def hit_rate(self) -> float:
        """Percentage of requests served from cache.

        Returns:
            ``hits / (hits + calls) * 100`` rounded to two decimals, 0.0 if
            nothing has been recorded
        """
        with self._lock:
            return self._hit_rate()

    def _hit_rate(self) -> float:
        total = self._hits + self._calls
        if total == 0:
            return 0.0
        return round(self._hits / total * 100, 2)

    def get_stats(self) -> UsageStats:
        """Take a consistent snapshot of all counters."""
        with self._lock:
            return UsageStats(
                hits=self._hits,
                calls=self._calls,
                hit_rate=self._hit_rate(),
                last_reset=self._last_reset,
                tokens_used=self._tokens,
                by_family={name: dict(counts) for name, counts in self._by_family.items()},
            )

    def reset(self) -> None:
        """Reset all counters (operator action)."""
        with self._lock:
            self._reset_state()
        logger.info("[STATS RESET] usage counters reset")

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def calls(self) -> int:
        return self._calls

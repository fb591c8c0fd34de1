"""Generation and accounting domain entities."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class GenerationResult:
    """Raw output of one generation call.

    Attributes:
        text: Completion text, untyped; callers parse it
        tokens_used: Total tokens billed for the call
        model: Model that served the call
    """

    text: str
    tokens_used: int
    model: str


@dataclass(frozen=True)
class UsageStats:
    """Snapshot of the usage counter.

    Attributes:
        hits: Cache hits recorded
        calls: Generation calls recorded
        hit_rate: Percentage of requests served from the cache
        last_reset: When the counters were last reset
        tokens_used: Tokens spent by recorded calls
        by_family: Per-family ``{"hits": n, "calls": n, "tokens": n}``
    """

    hits: int
    calls: int
    hit_rate: float
    last_reset: datetime
    tokens_used: int = 0
    by_family: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass(frozen=True)
class CleanupResult:
    deleted_count: int
    ran_at: datetime

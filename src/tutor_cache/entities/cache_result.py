"""Cached result domain entity."""

from dataclasses import dataclass
from typing import Generic, TypeVar

P = TypeVar("P")


@dataclass(frozen=True)
class CachedResult(Generic[P]):
    """Domain entity returned by the orchestrators.

    Attributes:
        payload: The family-specific result body
        from_cache: True when served from the cache without a generation call
        fingerprint: Cache key the result is stored under
        usage_count: Hits recorded for the entry (0 for a fresh result)
        tokens_used: Tokens spent producing the payload, when known
        model_used: Model that produced the payload, when known
        is_fallback: True when the offline fallback produced the payload
    """

    payload: P
    from_cache: bool
    fingerprint: str
    usage_count: int = 0
    tokens_used: int | None = None
    model_used: str | None = None
    is_fallback: bool = False

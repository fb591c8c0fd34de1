"""Shared wiring of the per-family orchestration services."""

from tutor_cache.config import Settings
from tutor_cache.config import settings as default_settings
from tutor_cache.entities import CacheEntryEntity, CachedResult

from .cache_gateway import CacheGateway
from .generation_adapter import GenerationAdapter
from .usage_counter import UsageCounter


class CachedGenerationService:
    """Base for services that run lookup → generate → store → return.

    Subclasses implement the family-specific request handling; this class
    only holds the collaborators and builds results.
    """

    def __init__(
        self,
        cache: CacheGateway,
        adapter: GenerationAdapter,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            cache: Best-effort cache access (required).
            adapter: Generation adapter (required).
            settings: Model and TTL configuration. Defaults to global settings.
        """
        self._cache = cache
        self._adapter = adapter
        self._settings = settings or default_settings

    @property
    def _usage(self) -> UsageCounter:
        return self._cache.usage

    @staticmethod
    def _cached_result(entry: CacheEntryEntity) -> CachedResult:
        return CachedResult(
            payload=entry.payload,
            from_cache=True,
            fingerprint=entry.fingerprint,
            usage_count=entry.usage_count,
            tokens_used=entry.tokens_used,
            model_used=entry.model_used,
            is_fallback=entry.model_used is None,
        )

    @property
    def cache(self) -> CacheGateway:
        """Get the cache gateway (for testing)."""
        return self._cache

"""HTTP handlers for statistics, cleanup and health."""

from fastapi import HTTPException, status

from tutor_cache.config import Settings
from tutor_cache.dto import CleanupResponse, HealthCheckResponse, StatsResponse
from tutor_cache.errors import CleanupError
from tutor_cache.protocols import CacheStore
from tutor_cache.services import CleanupService, GenerationAdapter, UsageCounter


class AdminHandler:
    """HTTP handlers for operator endpoints.

    Args:
        usage: Process usage counter
        repository: Cache backend, for store statistics and health
        cleanup: Cleanup service for manual sweeps
        adapter: Generation adapter, for health
        settings: Application settings, for the model summary
    """

    def __init__(
        self,
        usage: UsageCounter,
        repository: CacheStore,
        cleanup: CleanupService,
        adapter: GenerationAdapter,
        settings: Settings,
    ) -> None:
        self._usage = usage
        self._repository = repository
        self._cleanup = cleanup
        self._adapter = adapter
        self._settings = settings

    async def get_stats(self) -> StatsResponse:
        """Handle GET /stats requests.

        Raises:
            HTTPException: If the store statistics cannot be read
        """
        usage = self._usage.get_stats()
        try:
            store = self._repository.get_stats()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

        return StatsResponse(
            hits=usage.hits,
            calls=usage.calls,
            hit_rate=usage.hit_rate,
            last_reset=usage.last_reset,
            tokens_used=usage.tokens_used,
            by_family=usage.by_family,
            store=store,
            models={
                "provider": self._settings.llm_provider,
                "simple": self._settings.simple_model,
                "advanced": self._settings.advanced_model,
                "grading": self._settings.grading_model,
                "chatbot": self._settings.chatbot_model,
            },
        )

    async def reset_stats(self) -> dict:
        """Handle POST /stats/reset requests."""
        self._usage.reset()
        return {"message": "Usage statistics reset"}

    async def run_cleanup(self) -> CleanupResponse:
        """Handle POST /admin/cache/cleanup requests.

        Raises:
            HTTPException: If the sweep fails
        """
        try:
            result = self._cleanup.run_cleanup()
        except CleanupError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e),
            ) from e

        return CleanupResponse(
            success=True,
            deleted_count=result.deleted_count,
            ran_at=result.ran_at,
            message=f"Removed {result.deleted_count} expired cache entries",
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        cache_healthy = self._repository.health_check()
        generation_healthy = await self._adapter.is_available()

        return HealthCheckResponse(
            status="healthy" if cache_healthy else "unhealthy",
            cache_healthy=cache_healthy,
            generation_healthy=generation_healthy,
        )

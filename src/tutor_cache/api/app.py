from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tutor_cache.config import Settings, configure_logging, settings
from tutor_cache.dto import (
    ChatMessageRequest,
    ChatResponse,
    CleanupResponse,
    ContentResponse,
    GenerateContentRequest,
    GradeAnswerRequest,
    GradeAnswerResponse,
    GradeRequest,
    GradeResponse,
    HealthCheckResponse,
    RecommendationsRequest,
    RecommendationsResponse,
    StatsResponse,
)
from tutor_cache.protocols import AnswerStore, CacheStore, GenerationProvider

from .dependencies import AdminHandlerDep, AIHandlerDep, lifespan

API_TITLE = "Tutor Cache API"
API_VERSION = "0.1.0"
API_DESCRIPTION = "Cached AI generation for educational content, recommendations, grading and chat"


def create_app(
    app_settings: Settings | None = None,
    provider: GenerationProvider | None = None,
    cache_repository: CacheStore | None = None,
    answer_repository: AnswerStore | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        app_settings: Settings to run with. Defaults to global settings.
        provider: Generation provider. Defaults to the one LLM_PROVIDER selects.
        cache_repository: Cache backend. Defaults to the one CACHE_BACKEND selects.
        answer_repository: Answer backend. Defaults to the one CACHE_BACKEND selects.

    Returns:
        The configured application
    """
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = app_settings or settings
    app.state.generation_provider = provider
    app.state.cache_repository = cache_repository
    app.state.answer_repository = answer_repository

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "description": API_DESCRIPTION,
            "endpoints": {
                "content": "/ai/content",
                "recommendations": "/ai/recommendations",
                "grade": "/ai/grade",
                "grade_answer": "/ai/grade/answer",
                "chat": "/chat",
                "stats": "/stats",
                "cleanup": "/admin/cache/cleanup",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: AdminHandlerDep) -> HealthCheckResponse:
        return await handler.health_check()

    @app.post("/ai/content", response_model=ContentResponse)
    async def generate_content(request: GenerateContentRequest, handler: AIHandlerDep) -> ContentResponse:
        """Generate educational content, served from the cache when possible."""
        return await handler.generate_content(request)

    @app.post("/ai/recommendations", response_model=RecommendationsResponse)
    async def generate_recommendations(
        request: RecommendationsRequest, handler: AIHandlerDep
    ) -> RecommendationsResponse:
        """Generate personalized recommendations for a student."""
        return await handler.generate_recommendations(request)

    @app.post("/ai/grade", response_model=GradeResponse)
    async def grade(request: GradeRequest, handler: AIHandlerDep) -> GradeResponse:
        """Grade a free-text answer."""
        return await handler.grade(request)

    @app.post("/ai/grade/answer", response_model=GradeAnswerResponse)
    async def grade_answer(request: GradeAnswerRequest, handler: AIHandlerDep) -> GradeAnswerResponse:
        """Grade and record a student's exam answer."""
        return await handler.grade_answer(request)

    @app.post("/chat", response_model=ChatResponse)
    async def chat(request: ChatMessageRequest, handler: AIHandlerDep) -> ChatResponse:
        return await handler.chat(request)

    @app.get("/stats", response_model=StatsResponse)
    async def get_stats(handler: AdminHandlerDep) -> StatsResponse:
        """Get cache usage statistics."""
        return await handler.get_stats()

    @app.post("/stats/reset", response_model=dict[str, str])
    async def reset_stats(handler: AdminHandlerDep) -> dict[str, str]:
        """Reset usage counters."""
        return await handler.reset_stats()

    @app.post("/admin/cache/cleanup", response_model=CleanupResponse)
    async def run_cleanup(handler: AdminHandlerDep) -> CleanupResponse:
        """Remove expired cache entries now."""
        return await handler.run_cleanup()

    return app


app = create_app()


def main() -> None:
    import uvicorn

    configure_logging()
    uvicorn.run(
        "tutor_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    main()

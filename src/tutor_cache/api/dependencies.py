"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state

Collaborators pre-set on app.state before startup (``settings``,
``generation_provider``, ``cache_repository``, ``answer_repository``) are
used instead of the configured ones; ``create_app`` uses this to inject
test doubles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from tutor_cache.config import Settings, get_redis_client
from tutor_cache.config import settings as default_settings
from tutor_cache.handlers import AdminHandler, AIHandler
from tutor_cache.jobs import CacheCleanupScheduler
from tutor_cache.protocols import AnswerStore, CacheStore, GenerationProvider
from tutor_cache.repositories import (
    InMemoryAnswerRepository,
    InMemoryCacheRepository,
    OllamaGenerationProvider,
    OpenAIGenerationProvider,
    RedisAnswerRepository,
    RedisCacheRepository,
)
from tutor_cache.services import (
    CacheGateway,
    ChatService,
    CleanupService,
    ContentService,
    GenerationAdapter,
    GradingService,
    RecommendationService,
    UsageCounter,
)

logger = logging.getLogger(__name__)

_STATE_KEYS = (
    "usage_counter",
    "cleanup_service",
    "cleanup_scheduler",
    "ai_handler",
    "admin_handler",
)


def create_generation_provider(app_settings: Settings) -> GenerationProvider:
    """Build the generation provider selected by LLM_PROVIDER."""
    if app_settings.llm_provider == "ollama":
        return OllamaGenerationProvider(base_url=app_settings.ollama_base_url, timeout=app_settings.llm_timeout)
    return OpenAIGenerationProvider(
        api_key=app_settings.openai_api_key,
        base_url=app_settings.openai_base_url,
        timeout=app_settings.llm_timeout,
    )


def create_stores(app_settings: Settings) -> tuple[CacheStore, AnswerStore]:
    """Build the cache and answer stores selected by CACHE_BACKEND."""
    if app_settings.cache_backend == "memory":
        return InMemoryCacheRepository(), InMemoryAnswerRepository()

    client = get_redis_client(app_settings)
    return (
        RedisCacheRepository(redis_client=client, key_prefix=app_settings.cache_key_prefix),
        RedisAnswerRepository(redis_client=client, key_prefix=app_settings.cache_key_prefix),
    )


def get_ai_handler(request: Request) -> AIHandler:
    """Dependency injection for AIHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The AIHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "ai_handler", None)
    if handler is None:
        raise RuntimeError("AIHandler not initialized. Check lifespan setup.")
    return handler


def get_admin_handler(request: Request) -> AdminHandler:
    """Dependency injection for AdminHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "admin_handler", None)
    if handler is None:
        raise RuntimeError("AdminHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Repositories (cache entries, answers) and the generation provider
    2. Services (gateway, orchestrators, cleanup) sharing one usage counter
    3. Handlers (HTTP endpoints) - app.state.ai_handler, app.state.admin_handler
    4. The cleanup scheduler, when enabled

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Stops the scheduler, closes the provider and removes what this
        lifespan added to app.state
    """
    app_settings: Settings = getattr(app.state, "settings", None) or default_settings

    provider = getattr(app.state, "generation_provider", None) or create_generation_provider(app_settings)
    repository = getattr(app.state, "cache_repository", None)
    answers = getattr(app.state, "answer_repository", None)
    if repository is None or answers is None:
        default_repository, default_answers = create_stores(app_settings)
        repository = repository or default_repository
        answers = answers or default_answers

    usage = UsageCounter()
    gateway = CacheGateway(repository=repository, usage=usage, settings=app_settings)
    adapter = GenerationAdapter(provider)
    cleanup = CleanupService(repository)

    app.state.usage_counter = usage
    app.state.cleanup_service = cleanup
    app.state.ai_handler = AIHandler(
        content_service=ContentService(gateway, adapter, app_settings),
        recommendation_service=RecommendationService(gateway, adapter, app_settings),
        grading_service=GradingService(gateway, adapter, answers, app_settings),
        chat_service=ChatService(gateway, adapter, app_settings),
    )
    app.state.admin_handler = AdminHandler(
        usage=usage,
        repository=repository,
        cleanup=cleanup,
        adapter=adapter,
        settings=app_settings,
    )

    scheduler = None
    if app_settings.cache_cleanup_enabled:
        scheduler = CacheCleanupScheduler(cleanup, app_settings.cache_cleanup_cron)
        scheduler.start()
    app.state.cleanup_scheduler = scheduler

    logger.info("Cache backend: %s", app_settings.cache_backend)
    logger.info("Generation provider: %s", provider.provider_name)
    logger.info("Cache health: %s", repository.health_check())

    yield

    if scheduler is not None:
        scheduler.stop()
    close = getattr(provider, "close", None)
    if close is not None:
        await close()

    for key in _STATE_KEYS:
        if hasattr(app.state, key):
            delattr(app.state, key)
    logger.info("Tutor cache shut down")


# Type aliases for cleaner dependency injection
AIHandlerDep = Annotated[AIHandler, Depends(get_ai_handler)]
AdminHandlerDep = Annotated[AdminHandler, Depends(get_admin_handler)]

"""Tutor Cache - AI response caching and cost control for an educational platform.

Every request to the generation service (content, recommendations,
grading, chat) is keyed by a deterministic fingerprint of its normalized
inputs; identical requests are answered from the cache until the entry
expires.

Layers:
    - protocols: Interface contracts (CacheStore, AnswerStore, GenerationProvider)
    - repositories: Data access implementations (Redis, in-memory, OpenAI, Ollama)
    - services: Business logic (gateway, orchestrators, usage counter, cleanup)
    - jobs: Scheduled cache cleanup
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from tutor_cache.repositories import InMemoryCacheRepository, OpenAIGenerationProvider
    from tutor_cache.services import CacheGateway, GenerationAdapter, GradingService, UsageCounter

    gateway = CacheGateway(repository=InMemoryCacheRepository(), usage=UsageCounter())
    adapter = GenerationAdapter(OpenAIGenerationProvider.create())
    ```

For HTTP API:
    ```python
    from tutor_cache.api.app import app
    ```
"""

from tutor_cache.config import get_redis_client, settings
from tutor_cache.entities import CachedResult, CacheEntryEntity, CacheFamily
from tutor_cache.errors import (
    AnswerStoreError,
    CacheStoreError,
    CleanupError,
    ContentGenerationError,
    GenerationError,
    TutorCacheError,
)
from tutor_cache.protocols import AnswerStore, CacheStore, GenerationProvider
from tutor_cache.repositories import InMemoryCacheRepository, RedisCacheRepository
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

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "CacheStore",
    "AnswerStore",
    "GenerationProvider",
    # Services (business logic)
    "CacheGateway",
    "GenerationAdapter",
    "UsageCounter",
    "ContentService",
    "RecommendationService",
    "GradingService",
    "ChatService",
    "CleanupService",
    # Repositories (data access)
    "RedisCacheRepository",
    "InMemoryCacheRepository",
    # Entities (domain models)
    "CacheFamily",
    "CacheEntryEntity",
    "CachedResult",
    # Errors
    "TutorCacheError",
    "CacheStoreError",
    "AnswerStoreError",
    "GenerationError",
    "ContentGenerationError",
    "CleanupError",
]

"""Repository layer for data access.

This layer abstracts external dependencies (Redis, generation APIs)
behind protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis → in-memory, OpenAI → Ollama, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from tutor_cache.protocols import AnswerStore, CacheStore, GenerationProvider

from .memory_repository import InMemoryAnswerRepository, InMemoryCacheRepository
from .ollama_generation_provider import OllamaGenerationProvider
from .openai_generation_provider import OpenAIGenerationProvider
from .redis_answer_repository import RedisAnswerRepository
from .redis_repository import RedisCacheRepository

__all__ = [
    "AnswerStore",
    "CacheStore",
    "GenerationProvider",
    "InMemoryAnswerRepository",
    "InMemoryCacheRepository",
    "OllamaGenerationProvider",
    "OpenAIGenerationProvider",
    "RedisAnswerRepository",
    "RedisCacheRepository",
]

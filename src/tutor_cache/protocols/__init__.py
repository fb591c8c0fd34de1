"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → in-memory, OpenAI → Ollama, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from tutor_cache.protocols import CacheStore, GenerationProvider

    repo: CacheStore = RedisCacheRepository.create()   # works
    repo: CacheStore = InMemoryCacheRepository()        # also works
    ```
"""

from .answer_store import AnswerStore
from .cache_store import CacheStore
from .generation_provider import GenerationProvider

__all__ = [
    "AnswerStore",
    "CacheStore",
    "GenerationProvider",
]

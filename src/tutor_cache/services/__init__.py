"""Service layer for business logic.

Services orchestrate the cache, the generation adapter and the answer
store. They work with domain entities (not DTOs) and have no knowledge
of HTTP.

Cache-layer failures never leave this layer: ``CacheGateway`` turns them
into misses and dropped writes.
"""

from .cache_gateway import CacheGateway
from .chat_service import ChatService
from .cleanup_service import CleanupService
from .content_service import ContentService
from .generation_adapter import GenerationAdapter
from .grading_service import GradingService
from .recommendation_service import RecommendationService
from .usage_counter import UsageCounter

__all__ = [
    "CacheGateway",
    "ChatService",
    "CleanupService",
    "ContentService",
    "GenerationAdapter",
    "GradingService",
    "RecommendationService",
    "UsageCounter",
]

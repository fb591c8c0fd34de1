"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
- Pure domain logic only
"""

from .cache_entry import (
    PAYLOAD_TYPES,
    CacheEntryEntity,
    CacheFamily,
    CachePayload,
    ChatPayload,
    ContentPayload,
    GradingPayload,
    RecommendationPayload,
)
from .cache_result import CachedResult
from .generation import CleanupResult, GenerationResult, UsageStats
from .graded_answer import GradedAnswerEntity, GradedAnswerResult
from .requests import (
    AnswerSubmission,
    ChatRequest,
    ContentRequest,
    ContentType,
    CourseContext,
    GradingRequest,
    RecommendationRequest,
    StudentProfile,
)

__all__ = [
    # Cache entries
    "CacheFamily",
    "CacheEntryEntity",
    "CachePayload",
    "PAYLOAD_TYPES",
    "ContentPayload",
    "RecommendationPayload",
    "GradingPayload",
    "ChatPayload",
    "CachedResult",
    # Requests
    "ContentType",
    "CourseContext",
    "ContentRequest",
    "StudentProfile",
    "RecommendationRequest",
    "GradingRequest",
    "AnswerSubmission",
    "ChatRequest",
    # Answers
    "GradedAnswerEntity",
    "GradedAnswerResult",
    # Generation and accounting
    "GenerationResult",
    "UsageStats",
    "CleanupResult",
]

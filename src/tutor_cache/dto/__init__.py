"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import (
    ChatMessageRequest,
    CourseContextModel,
    GenerateContentRequest,
    GradeAnswerRequest,
    GradeRequest,
    RecommendationsRequest,
)
from .responses import (
    CachedResponse,
    ChatResponse,
    CleanupResponse,
    ContentResponse,
    GradeAnswerResponse,
    GradeResponse,
    HealthCheckResponse,
    RecommendationsResponse,
    StatsResponse,
)

__all__ = [
    "CourseContextModel",
    "GenerateContentRequest",
    "RecommendationsRequest",
    "GradeRequest",
    "GradeAnswerRequest",
    "ChatMessageRequest",
    "CachedResponse",
    "ContentResponse",
    "RecommendationsResponse",
    "GradeResponse",
    "GradeAnswerResponse",
    "ChatResponse",
    "StatsResponse",
    "CleanupResponse",
    "HealthCheckResponse",
]

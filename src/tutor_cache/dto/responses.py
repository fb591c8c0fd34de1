"""Response DTOs for API endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CachedResponse(BaseModel):
    """Cache provenance shared by every generated response."""

    from_cache: bool = Field(..., description="Whether the result was served from the cache")
    fingerprint: str = Field(..., description="Cache key of the result")
    usage_count: int = Field(0, description="Cache hits recorded for the entry", ge=0)
    tokens_used: int | None = Field(None, description="Tokens spent producing the result")
    model_used: str | None = Field(None, description="Model that produced the result")
    is_fallback: bool = Field(False, description="Whether the offline fallback produced the result")


class ContentResponse(CachedResponse):
    """Response DTO for generated content."""

    title: str
    body: str
    learning_objectives: list[str] = Field(default_factory=list)
    difficulty: str = "intermediate"
    extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Type-specific fields (topics, hints, solution, ...)",
    )


class RecommendationsResponse(CachedResponse):
    """Response DTO for personalized recommendations."""

    next_topics: list[dict[str, Any]] = Field(default_factory=list)
    suggested_exercises: list[dict[str, Any]] = Field(default_factory=list)
    study_plan: list[dict[str, Any]] = Field(default_factory=list)
    areas_to_focus: list[str] = Field(default_factory=list)
    summary: str = ""


class GradeResponse(CachedResponse):
    """Response DTO for a grading."""

    score: int = Field(..., description="Score out of 100", ge=0, le=100)
    feedback: str
    suggestions: list[str] = Field(default_factory=list)


class GradeAnswerResponse(BaseModel):
    """Response DTO for a recorded exam answer."""

    student_id: str
    exam_id: str
    question_id: str
    score: int = Field(..., description="Points awarded", ge=0)
    max_points: int = Field(..., ge=1)
    percentage: int = Field(..., description="Grading score out of 100", ge=0, le=100)
    is_correct: bool
    feedback: str
    suggestions: list[str] = Field(default_factory=list)
    graded_at: datetime | None = None
    reused: bool = Field(False, description="Previous grading reused because the answer did not change")
    from_cache: bool = False
    is_fallback: bool = False


class ChatResponse(BaseModel):
    """Response DTO for a chat reply."""

    message: str
    from_cache: bool
    is_fallback: bool = False


class StatsResponse(BaseModel):
    """Response DTO for cache usage statistics."""

    hits: int = Field(..., ge=0)
    calls: int = Field(..., ge=0)
    hit_rate: float = Field(..., description="Percentage of requests served from cache", ge=0.0, le=100.0)
    last_reset: datetime
    tokens_used: int = Field(0, ge=0)
    by_family: dict[str, dict[str, int]] = Field(default_factory=dict)
    store: dict[str, Any] = Field(default_factory=dict, description="Cache backend statistics")
    models: dict[str, str] = Field(default_factory=dict, description="Configured model per task")


class CleanupResponse(BaseModel):
    """Response DTO for a manual cache cleanup."""

    success: bool
    deleted_count: int = Field(..., ge=0)
    ran_at: datetime
    message: str


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the cache backend is reachable")
    generation_healthy: bool | None = Field(
        None,
        description="Whether the generation service is reachable",
    )

"""Cache entry domain entity and the per-family payload union."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union


class CacheFamily(str, Enum):
    """Class of cacheable AI operation.

    Each family has its own key shape, TTL and payload structure.
    """

    CONTENT = "content"
    RECOMMENDATION = "recommendation"
    GRADING = "grading"
    CHAT = "chat"


@dataclass(frozen=True)
class ContentPayload:
    """Generated educational content (syllabus, topic, exercise, explanation).

    Attributes:
        title: Content title
        body: Main text
        learning_objectives: Objectives covered by the content
        difficulty: beginner, intermediate or advanced
        extra: Any additional structured keys returned by the model
            (topics, examples, hints, solution, ...)
    """

    title: str
    body: str
    learning_objectives: list[str] = field(default_factory=list)
    difficulty: str = "intermediate"
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RecommendationPayload:
    """Personalized study recommendations for a student.

    Attributes:
        next_topics: Topics to study next, with priority and reason
        suggested_exercises: Exercises to practice
        study_plan: Ordered plan items with estimated time
        areas_to_focus: Short list of focus areas
        summary: Raw model text, kept when the output was not valid JSON
    """

    next_topics: list[dict[str, Any]] = field(default_factory=list)
    suggested_exercises: list[dict[str, Any]] = field(default_factory=list)
    study_plan: list[dict[str, Any]] = field(default_factory=list)
    areas_to_focus: list[str] = field(default_factory=list)
    summary: str = ""


@dataclass(frozen=True)
class GradingPayload:
    """Result of grading a free-text exam answer.

    Attributes:
        score: Percentage score in [0, 100]
        feedback: Feedback text for the student
        suggestions: Improvement suggestions
    """

    score: int
    feedback: str
    suggestions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ChatPayload:
    """Tutor chat reply."""

    message: str


CachePayload = Union[ContentPayload, RecommendationPayload, GradingPayload, ChatPayload]

PAYLOAD_TYPES: dict[CacheFamily, type] = {
    CacheFamily.CONTENT: ContentPayload,
    CacheFamily.RECOMMENDATION: RecommendationPayload,
    CacheFamily.GRADING: GradingPayload,
    CacheFamily.CHAT: ChatPayload,
}


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a cached generation result.

    This is an internal representation used by services and repositories.
    For API contracts, use the DTO classes from the dto package.

    Attributes:
        fingerprint: Deterministic cache key derived from the request
        family: Content family, selects TTL and payload type
        payload: Family-specific result body
        created_at: When this entry was (re)written
        expires_at: Absolute expiration; the entry is logically absent afterwards
        usage_count: Cache hits recorded since the entry was written
        last_used_at: Timestamp of the most recent hit
        tokens_used: Tokens spent generating the payload (None for fallbacks)
        model_used: Model that produced the payload (None for fallbacks)
    """

    fingerprint: str
    family: CacheFamily
    payload: CachePayload
    created_at: datetime
    expires_at: datetime
    usage_count: int = 0
    last_used_at: datetime | None = None
    tokens_used: int | None = None
    model_used: str | None = None

    def is_expired(self, now: datetime) -> bool:
        """Check whether the entry is past its expiration at ``now``."""
        return now >= self.expires_at

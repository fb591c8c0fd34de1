"""Free-text answer grading with caching and an offline fallback."""

import logging
import math
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from tutor_cache.config import Settings
from tutor_cache.entities import (
    AnswerSubmission,
    CachedResult,
    CacheFamily,
    GradedAnswerEntity,
    GradedAnswerResult,
    GradingPayload,
    GradingRequest,
)
from tutor_cache.errors import AnswerStoreError
from tutor_cache.protocols import AnswerStore
from tutor_cache.utils.fingerprint import grading_fingerprint
from tutor_cache.utils.parsing import as_str_list, parse_structured

from . import prompts
from .base import CachedGenerationService
from .cache_gateway import CacheGateway
from .fallback import FALLBACK_SUGGESTIONS, fallback_grading, fallback_score
from .generation_adapter import GenerationAdapter

logger = logging.getLogger(__name__)

GRADING_TEMPERATURE = 0.3
GRADING_MAX_TOKENS = 1000
PASSING_SCORE = 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_score(value: Any, default: int) -> int:
    """Coerce a model-provided score to an int in [0, 100]."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(score):
        return default
    return min(100, max(0, round(score)))


def points_for(score: int, max_points: int) -> int:
    """Convert a percentage score to question points, rounding halves up."""
    return math.floor(score * max_points / 100 + 0.5)


def build_grading_payload(text: str, answer: str) -> GradingPayload:
    """Turn raw model output into a grading payload.

    Output that is not a JSON object keeps the raw text as feedback, with
    the heuristic score and the generic suggestions.
    """
    heuristic = fallback_score(answer)
    data = parse_structured(text)
    if data is None:
        logger.warning("Grading output is not valid JSON, keeping raw text as feedback")
        return GradingPayload(
            score=heuristic,
            feedback=text.strip(),
            suggestions=list(FALLBACK_SUGGESTIONS),
        )

    return GradingPayload(
        score=coerce_score(data.get("score"), heuristic),
        feedback=str(data.get("feedback") or text.strip()),
        suggestions=as_str_list(data.get("suggestions")),
    )


class GradingService(CachedGenerationService):
    """Grades free-text answers.

    Grading never fails from the caller's point of view: when the
    generation service is unavailable, the heuristic fallback grade is
    returned and cached like any other result.
    """

    def __init__(
        self,
        cache: CacheGateway,
        adapter: GenerationAdapter,
        answers: AnswerStore,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            cache: Best-effort cache access (required).
            adapter: Generation adapter (required).
            answers: Store of graded answer records (required).
            settings: Model configuration. Defaults to global settings.
            clock: Returns the current UTC time. Defaults to the system clock.
        """
        super().__init__(cache, adapter, settings)
        self._answers = answers
        self._now = clock or _utcnow

    async def grade(self, request: GradingRequest) -> CachedResult[GradingPayload]:
        """Grade one answer, from the cache when possible.

        Args:
            request: Question, answer, rubric and course

        Returns:
            CachedResult with a score in [0, 100]; ``is_fallback`` is set
            when the heuristic produced it
        """
        course_name = request.course.name if request.course else None
        fingerprint = grading_fingerprint(request.question, request.answer, request.rubric, course_name)

        cached = self._cache.lookup(fingerprint, CacheFamily.GRADING)
        if cached is not None:
            return self._cached_result(cached)

        try:
            result = await self._adapter.generate(
                system_prompt=prompts.grading_system_prompt(request.course),
                user_prompt=prompts.grading_user_prompt(
                    request.question, request.answer, request.rubric, request.course
                ),
                model=self._settings.grading_model,
                temperature=GRADING_TEMPERATURE,
                max_tokens=GRADING_MAX_TOKENS,
            )
        except Exception as e:
            logger.warning("Grading generation failed for %s, using fallback: %s", fingerprint, e)
            payload = fallback_grading(request.question, request.answer, course_name)
            self._cache.save(fingerprint, CacheFamily.GRADING, payload)
            return CachedResult(payload=payload, from_cache=False, fingerprint=fingerprint, is_fallback=True)

        self._usage.record_call(CacheFamily.GRADING, result.model, result.tokens_used)
        payload = build_grading_payload(result.text, request.answer)

        self._cache.save(
            fingerprint,
            CacheFamily.GRADING,
            payload,
            tokens_used=result.tokens_used,
            model_used=result.model,
        )

        return CachedResult(
            payload=payload,
            from_cache=False,
            fingerprint=fingerprint,
            tokens_used=result.tokens_used,
            model_used=result.model,
        )

    async def grade_answer(self, submission: AnswerSubmission) -> GradedAnswerResult:
        """Grade a student's submitted answer and record it.

        An unchanged answer (same text after trimming) that was already
        graded is returned as is, without a cache lookup or a generation
        call.

        Args:
            submission: The student's answer to one exam question

        Returns:
            GradedAnswerResult with the saved answer record
        """
        previous = self._load_answer(submission)
        if (
            previous is not None
            and previous.is_graded
            and previous.answer.strip() == submission.answer.strip()
        ):
            logger.info(
                "Answer unchanged for student %s question %s, reusing previous grading",
                submission.student_id,
                submission.question_id,
            )
            percentage = _percentage(previous.score or 0, submission.max_points)
            return GradedAnswerResult(answer=previous, percentage=percentage, reused=True)

        graded = await self.grade(
            GradingRequest(
                question=submission.question,
                answer=submission.answer,
                rubric=submission.rubric,
                course=submission.course,
                course_id=submission.course_id,
            )
        )
        payload = graded.payload
        record = GradedAnswerEntity(
            student_id=submission.student_id,
            exam_id=submission.exam_id,
            question_id=submission.question_id,
            answer=submission.answer,
            score=points_for(payload.score, submission.max_points),
            feedback=payload.feedback,
            suggestions=list(payload.suggestions),
            is_correct=payload.score >= PASSING_SCORE,
            graded_at=self._now(),
        )

        try:
            self._answers.save(record)
        except AnswerStoreError as e:
            logger.error("Failed to save graded answer for student %s: %s", submission.student_id, e)

        return GradedAnswerResult(
            answer=record,
            percentage=payload.score,
            from_cache=graded.from_cache,
            is_fallback=graded.is_fallback,
        )

    def _load_answer(self, submission: AnswerSubmission) -> GradedAnswerEntity | None:
        try:
            return self._answers.get(submission.student_id, submission.exam_id, submission.question_id)
        except AnswerStoreError as e:
            logger.warning("Failed to load previous answer, grading from scratch: %s", e)
            return None

    @property
    def answers(self) -> AnswerStore:
        """Get the answer store (for testing)."""
        return self._answers


def _percentage(points: int, max_points: int) -> int:
    if max_points <= 0:
        return 0
    return min(100, max(0, round(points / max_points * 100)))

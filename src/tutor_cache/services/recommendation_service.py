"""Personalized recommendation generation with caching."""

import logging

from tutor_cache.entities import CachedResult, CacheFamily, RecommendationPayload, RecommendationRequest
from tutor_cache.errors import ContentGenerationError, GenerationError
from tutor_cache.utils.fingerprint import recommendation_fingerprint
from tutor_cache.utils.parsing import as_dict_list, as_str_list, parse_structured

from . import prompts
from .base import CachedGenerationService

logger = logging.getLogger(__name__)

RECOMMENDATION_MAX_TOKENS = 1500


def build_recommendation_payload(text: str) -> RecommendationPayload:
    """Turn raw model output into a recommendation payload.

    Output that is not a JSON object yields empty lists with the raw text
    kept as ``summary``.
    """
    data = parse_structured(text)
    if data is None:
        logger.warning("Generated recommendations are not valid JSON, wrapping raw text")
        return RecommendationPayload(summary=text.strip())

    return RecommendationPayload(
        next_topics=as_dict_list(data.get("nextTopics")),
        suggested_exercises=as_dict_list(data.get("suggestedExercises")),
        study_plan=as_dict_list(data.get("studyPlan")),
        areas_to_focus=as_str_list(data.get("areasToFocus")),
        summary=str(data.get("summary") or ""),
    )


class RecommendationService(CachedGenerationService):
    """Generates study recommendations from a student profile.

    The key includes the student's progress, strengths and weaknesses, so
    a changed profile gets new recommendations; the short TTL bounds how
    long a stale profile is served.
    """

    async def recommend(self, request: RecommendationRequest) -> CachedResult[RecommendationPayload]:
        """Return cached or freshly generated recommendations.

        Args:
            request: Student, course and learning profile

        Returns:
            CachedResult tagged ``from_cache`` accordingly

        Raises:
            ContentGenerationError: If the generation service fails
        """
        profile = request.profile
        fingerprint = recommendation_fingerprint(
            request.student_id,
            request.course_id,
            profile.progress,
            profile.strengths,
            profile.weaknesses,
        )

        cached = self._cache.lookup(fingerprint, CacheFamily.RECOMMENDATION)
        if cached is not None:
            return self._cached_result(cached)

        model = self._settings.advanced_model
        try:
            result = await self._adapter.generate(
                system_prompt=prompts.RECOMMENDATION_SYSTEM_PROMPT,
                user_prompt=prompts.recommendation_user_prompt(profile),
                model=model,
                temperature=self._settings.temperature,
                max_tokens=RECOMMENDATION_MAX_TOKENS,
            )
        except GenerationError as e:
            logger.error("Recommendation generation failed for %s: %s", fingerprint, e)
            raise ContentGenerationError(
                CacheFamily.RECOMMENDATION.value, f"Failed to generate recommendations: {e}", e
            ) from e

        self._usage.record_call(CacheFamily.RECOMMENDATION, result.model, result.tokens_used)
        payload = build_recommendation_payload(result.text)

        self._cache.save(
            fingerprint,
            CacheFamily.RECOMMENDATION,
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

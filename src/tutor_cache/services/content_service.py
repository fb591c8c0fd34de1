"""Educational content generation with caching."""

import logging

from tutor_cache.entities import (
    CachedResult,
    CacheFamily,
    ContentPayload,
    ContentRequest,
    ContentType,
    CourseContext,
)
from tutor_cache.errors import ContentGenerationError, GenerationError
from tutor_cache.utils.fingerprint import content_fingerprint
from tutor_cache.utils.parsing import as_str_list, parse_structured

from . import prompts
from .base import CachedGenerationService

logger = logging.getLogger(__name__)

_KNOWN_KEYS = {"title", "body", "learningObjectives", "learning_objectives", "difficulty"}


def build_content_payload(content_type: ContentType, text: str) -> ContentPayload:
    """Turn raw model output into a content payload.

    Output that is not a JSON object is wrapped as the body of a minimal
    payload instead of failing.
    """
    data = parse_structured(text)
    if data is None:
        logger.warning("Generated %s content is not valid JSON, wrapping raw text", content_type.value)
        return ContentPayload(title=f"Generated {content_type.value} content", body=text.strip())

    objectives = data.get("learningObjectives", data.get("learning_objectives"))
    return ContentPayload(
        title=str(data.get("title") or f"Generated {content_type.value} content"),
        body=str(data.get("body") or ""),
        learning_objectives=as_str_list(objectives),
        difficulty=str(data.get("difficulty") or "intermediate"),
        extra={key: value for key, value in data.items() if key not in _KNOWN_KEYS},
    )


class ContentService(CachedGenerationService):
    """Generates syllabi, topics, exercises and explanations.

    There is no safe substitute for missing educational content, so
    generation failures are raised to the caller as
    ``ContentGenerationError``.
    """

    def _model_for(self, content_type: ContentType) -> str:
        if content_type in (ContentType.SYLLABUS, ContentType.EXPLANATION):
            return self._settings.advanced_model
        return self._settings.simple_model

    async def generate(self, request: ContentRequest) -> CachedResult[ContentPayload]:
        """Return cached or freshly generated content.

        Args:
            request: The content request

        Returns:
            CachedResult tagged ``from_cache`` accordingly

        Raises:
            ContentGenerationError: If the generation service fails
        """
        content_type = ContentType(request.content_type)
        fingerprint = content_fingerprint(
            content_type.value,
            request.course_id,
            request.student_level,
            request.context,
            request.additional_params,
        )

        cached = self._cache.lookup(fingerprint, CacheFamily.CONTENT)
        if cached is not None:
            return self._cached_result(cached)

        logger.info("Generating new %s content for course %s", content_type.value, request.course_id)
        course = request.course or CourseContext(name=request.course_id)
        model = self._model_for(content_type)

        try:
            result = await self._adapter.generate(
                system_prompt=prompts.content_system_prompt(content_type, course),
                user_prompt=prompts.content_user_prompt(
                    content_type, request.student_level, request.context, course, request.additional_params
                ),
                model=model,
                temperature=self._settings.temperature,
                max_tokens=self._settings.max_tokens,
            )
        except GenerationError as e:
            logger.error("Content generation failed for %s: %s", fingerprint, e)
            raise ContentGenerationError(
                CacheFamily.CONTENT.value, f"Failed to generate content: {e}", e
            ) from e

        self._usage.record_call(CacheFamily.CONTENT, result.model, result.tokens_used)
        payload = build_content_payload(content_type, result.text)

        self._cache.save(
            fingerprint,
            CacheFamily.CONTENT,
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

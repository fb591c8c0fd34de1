"""Tutoring chat replies with caching."""

import logging

from tutor_cache.entities import CachedResult, CacheFamily, ChatPayload, ChatRequest
from tutor_cache.utils.fingerprint import chat_fingerprint

from . import prompts
from .base import CachedGenerationService
from .fallback import CHAT_FALLBACK_MESSAGE

logger = logging.getLogger(__name__)


class ChatService(CachedGenerationService):
    """Answers tutoring chat messages.

    Replies are keyed on the first 200 normalized characters of the
    message and the course, so repeated questions are answered from the
    cache. A failed generation returns a static apology that is not cached.
    """

    async def reply(self, request: ChatRequest) -> CachedResult[ChatPayload]:
        course_name = request.course.name if request.course else None
        fingerprint = chat_fingerprint(request.message, course_name)

        cached = self._cache.lookup(fingerprint, CacheFamily.CHAT)
        if cached is not None:
            return self._cached_result(cached)

        try:
            result = await self._adapter.generate(
                system_prompt=prompts.chat_system_prompt(request.course),
                user_prompt=request.message,
                model=self._settings.chatbot_model,
                temperature=self._settings.chatbot_temperature,
                max_tokens=self._settings.chatbot_max_tokens,
            )
        except Exception as e:
            logger.error("Chat generation failed for user %s: %s", request.user_id or "anonymous", e)
            return CachedResult(
                payload=ChatPayload(message=CHAT_FALLBACK_MESSAGE),
                from_cache=False,
                fingerprint=fingerprint,
                is_fallback=True,
            )

        self._usage.record_call(CacheFamily.CHAT, result.model, result.tokens_used)
        payload = ChatPayload(message=result.text.strip())

        self._cache.save(
            fingerprint,
            CacheFamily.CHAT,
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

"""Redis implementation of AnswerStore."""

import logging

import redis

from tutor_cache.config import get_redis_client, settings
from tutor_cache.entities import GradedAnswerEntity
from tutor_cache.errors import AnswerStoreError

from .serialization import answer_from_json, answer_to_json

logger = logging.getLogger(__name__)


class RedisAnswerRepository:
    """Stores one JSON document per (student, exam, question)."""

    def __init__(self, redis_client: redis.Redis | None = None, key_prefix: str | None = None) -> None:
        self._client = redis_client or get_redis_client()
        self._prefix = key_prefix or settings.cache_key_prefix

    @classmethod
    def create(cls, key_prefix: str | None = None) -> "RedisAnswerRepository":
        return cls(key_prefix=key_prefix)

    def _key(self, student_id: str, exam_id: str, question_id: str) -> str:
        return f"{self._prefix}:answer:{student_id}:{exam_id}:{question_id}"

    def get(self, student_id: str, exam_id: str, question_id: str) -> GradedAnswerEntity | None:
        """Fetch the stored answer record.

        Raises:
            AnswerStoreError: If Redis cannot be reached
        """
        try:
            raw = self._client.get(self._key(student_id, exam_id, question_id))
        except redis.RedisError as e:
            raise AnswerStoreError(f"Failed to read answer record: {e}") from e

        if raw is None:
            return None
        try:
            return answer_from_json(raw)
        except (ValueError, TypeError) as e:
            logger.warning("Ignoring unreadable answer record for question %s: %s", question_id, e)
            return None

    def save(self, answer: GradedAnswerEntity) -> None:
        """Insert or replace the answer record.

        Raises:
            AnswerStoreError: If the write fails
        """
        key = self._key(answer.student_id, answer.exam_id, answer.question_id)
        try:
            self._client.set(key, answer_to_json(answer))
        except redis.RedisError as e:
            raise AnswerStoreError(f"Failed to save answer record: {e}") from e

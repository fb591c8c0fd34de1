"""Cache key derivation.

Every cacheable request is reduced to the fields that define its result,
normalized, serialized in a stable key order and hashed. The hex prefix is
a deduplication boundary, not a security boundary.
"""

import hashlib
import json
from collections.abc import Iterable, Mapping
from typing import Any

from tutor_cache.entities import CacheFamily

HASH_LENGTH = 16
ANSWER_PREFIX_LENGTH = 500
CHAT_MESSAGE_PREFIX_LENGTH = 200


def normalize_text(value: str | None, limit: int | None = None) -> str:
    """Normalize free text for hashing.

    Args:
        value: Text to normalize; None is treated as empty
        limit: Keep only this many leading characters, applied before
            trimming so variations past the cutoff never reach the key

    Returns:
        Trimmed, lowercased text
    """
    text = "" if value is None else str(value)
    if limit is not None:
        text = text[:limit]
    return text.strip().lower()


def normalize_list(values: Iterable[str] | None) -> str:
    """Normalize, sort and join a list so entry order does not matter."""
    return ",".join(sorted(normalize_text(v) for v in values or ()))


def normalize_params(params: Mapping[Any, Any] | None) -> dict[str, Any]:
    """Stringify keys and normalize string values of extra request parameters."""
    return {
        str(key): normalize_text(value) if isinstance(value, str) else value
        for key, value in (params or {}).items()
    }


def stable_hash(fields: Mapping[str, Any]) -> str:
    """Hash a field mapping independent of key order.

    Args:
        fields: JSON-serializable mapping (non-JSON values are stringified)

    Returns:
        The first ``HASH_LENGTH`` hex characters of the SHA-256 digest
    """
    canonical = json.dumps(fields, ensure_ascii=True, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def content_fingerprint(
    content_type: str,
    course_id: str,
    student_level: str,
    context: str,
    additional_params: Mapping[str, Any] | None = None,
) -> str:
    """Derive the key for generated educational content.

    Returns:
        ``ai_<content_type>_<hash>``
    """
    content_type = normalize_text(getattr(content_type, "value", content_type))
    fields = {
        "contentType": content_type,
        "courseId": str(course_id).strip(),
        "studentLevel": normalize_text(student_level),
        "context": normalize_text(context),
        "additionalParams": normalize_params(additional_params),
    }
    return f"ai_{content_type}_{stable_hash(fields)}"


def recommendation_fingerprint(
    student_id: str,
    course_id: str,
    progress: float,
    strengths: Iterable[str] | None = None,
    weaknesses: Iterable[str] | None = None,
) -> str:
    """Derive the key for a recommendation set.

    Returns:
        ``rec_<student_id>_<hash>``
    """
    student_id = str(student_id).strip()
    fields = {
        "studentId": student_id,
        "courseId": str(course_id).strip(),
        "progress": float(progress),
        "strengths": normalize_list(strengths),
        "weaknesses": normalize_list(weaknesses),
    }
    return f"rec_{student_id}_{stable_hash(fields)}"


def grading_fingerprint(
    question: str,
    answer: str,
    rubric: str | None = None,
    course_name: str | None = None,
) -> str:
    """Derive the key for a grading result.

    The exact answer text (first 500 characters) is part of the key, so a
    changed answer is always regraded.

    Returns:
        ``grading_<hash>``
    """
    fields = {
        "question": normalize_text(question),
        "answer": normalize_text(answer, ANSWER_PREFIX_LENGTH),
        "rubric": normalize_text(rubric),
        "courseName": normalize_text(course_name),
    }
    return f"grading_{stable_hash(fields)}"


def chat_fingerprint(message: str, course_name: str | None = None) -> str:
    """Derive the key for a chat reply.

    Returns:
        ``chat_<hash>``
    """
    fields = {
        "message": normalize_text(message, CHAT_MESSAGE_PREFIX_LENGTH),
        "course": normalize_text(course_name),
    }
    return f"chat_{stable_hash(fields)}"


_BUILDERS = {
    CacheFamily.CONTENT: content_fingerprint,
    CacheFamily.RECOMMENDATION: recommendation_fingerprint,
    CacheFamily.GRADING: grading_fingerprint,
    CacheFamily.CHAT: chat_fingerprint,
}


def derive_fingerprint(family: CacheFamily | str, fields: Mapping[str, Any]) -> str:
    """Derive the fingerprint for any family.

    Args:
        family: The cache family
        fields: Keyword arguments of the family's builder, e.g.
            ``{"question": ..., "answer": ...}`` for grading

    Returns:
        The fingerprint

    Raises:
        ValueError: If the family is unknown
        TypeError: If ``fields`` does not match the family's builder
    """
    builder = _BUILDERS[CacheFamily(family)]
    return builder(**fields)

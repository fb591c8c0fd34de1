"""Utility modules for tutor cache."""

from .fingerprint import (
    chat_fingerprint,
    content_fingerprint,
    derive_fingerprint,
    grading_fingerprint,
    normalize_text,
    recommendation_fingerprint,
)
from .parsing import parse_structured

__all__ = [
    "chat_fingerprint",
    "content_fingerprint",
    "derive_fingerprint",
    "grading_fingerprint",
    "normalize_text",
    "parse_structured",
    "recommendation_fingerprint",
]

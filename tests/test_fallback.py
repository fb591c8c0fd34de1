"""
Tests for the offline grading and chat fallbacks.
"""

import pytest

from tutor_cache.services.fallback import (
    FALLBACK_SUGGESTIONS,
    fallback_feedback,
    fallback_grading,
    fallback_score,
)


@pytest.mark.parametrize(
    "answer,expected",
    [
        ("", 30),
        (None, 30),
        ("short", 30),
        ("x" * 20, 50),
        ("x" * 21, 52),
        ("x" * 150, 65),
        ("x" * 1000, 80),
    ],
)
def test_fallback_score(answer, expected):
    assert fallback_score(answer) == expected


def test_fallback_score_ignores_surrounding_whitespace():
    assert fallback_score("   short   ") == fallback_score("short")


def test_fallback_grading_shape():
    result = fallback_grading("What is a fraction?", "A part of a whole, like one half.", "Matemática")

    assert 0 <= result.score <= 100
    assert result.feedback
    assert result.suggestions == list(FALLBACK_SUGGESTIONS)
    assert len(result.suggestions) == 3


def test_fallback_feedback_mentions_course():
    assert "Matemática" in fallback_feedback("x" * 50, "Matemática")
    assert "the subject" in fallback_feedback("", None)


def test_fallback_feedback_short_answer_asks_for_more():
    assert fallback_feedback("ok").startswith("Your answer is very short")

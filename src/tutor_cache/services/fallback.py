"""Offline fallbacks used when the generation service fails.

No external calls, no side effects, never raises.
"""

from tutor_cache.entities import GradingPayload

MIN_CONTENT_LENGTH = 20
BASE_SCORE = 50
MAX_LENGTH_BONUS = 30
SHORT_ANSWER_PENALTY = 20
SHORT_ANSWER_FLOOR = 20

FALLBACK_SUGGESTIONS = (
    "Review the key concepts related to the question",
    "Try to explain your reasoning step by step",
    "Include concrete examples whenever possible",
)

CHAT_FALLBACK_MESSAGE = (
    "Sorry, I'm having technical difficulties right now. "
    "Please try rephrasing your question or check the course material."
)


def _answer_length(answer: str | None) -> int:
    return 0 if answer is None else len(str(answer).strip())


def fallback_score(answer: str | None) -> int:
    """Heuristic score from answer length alone.

    Base 50; answers longer than 20 characters earn one point per 10
    characters (at most 30); answers shorter than 20 characters lose 20
    points, never dropping below 20.
    """
    length = _answer_length(answer)
    score = BASE_SCORE
    if length > MIN_CONTENT_LENGTH:
        score += min(MAX_LENGTH_BONUS, length // 10)
    if length < MIN_CONTENT_LENGTH:
        score = max(SHORT_ANSWER_FLOOR, score - SHORT_ANSWER_PENALTY)
    return min(100, max(0, score))


def fallback_feedback(answer: str | None, course_name: str | None = None) -> str:
    length = _answer_length(answer)
    subject = (course_name or "").strip() or "the subject"

    if length > MIN_CONTENT_LENGTH:
        return (
            f"Your answer has been reviewed. You provided {length} characters of content.\n\n"
            "To improve your answer, make sure to:\n"
            "- Explain the concepts clearly and completely\n"
            "- Include examples when relevant\n"
            f"- Relate your answer to the topics studied in {subject}\n"
            "- Check the spelling and structure of your text\n\n"
            "Keep practicing to deepen your understanding of the topics."
        )
    return (
        "Your answer is very short. To get a better grade, try to:\n"
        "- Develop your ideas further\n"
        "- Explain the concepts in more detail\n"
        f"- Relate your answer to the content of {subject}\n"
        "- Include examples or practical cases when appropriate\n\n"
        "Remember that a complete answer shows a better understanding of the topic."
    )


def fallback_grading(question: str | None, answer: str | None, course_name: str | None = None) -> GradingPayload:
    """Grade an answer without the generation service.

    Args:
        question: Exam question (unused by the heuristic, kept for symmetry)
        answer: Student answer, may be empty or None
        course_name: Course name mentioned in the feedback

    Returns:
        A grading with score in [0, 100], non-empty feedback and three
        generic suggestions
    """
    return GradingPayload(
        score=fallback_score(answer),
        feedback=fallback_feedback(answer, course_name),
        suggestions=list(FALLBACK_SUGGESTIONS),
    )

"""Graded answer domain entities."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class GradedAnswerEntity:
    """Stored answer record for one (student, exam, question).

    Attributes:
        student_id: Student who answered
        exam_id: Exam the question belongs to
        question_id: Answered question
        answer: The answer text that was graded
        score: Points awarded (out of the question's max points)
        feedback: Feedback shown to the student
        suggestions: Improvement suggestions
        is_correct: Whether the answer reached the passing percentage
        graded_at: When the grading happened
    """

    student_id: str
    exam_id: str
    question_id: str
    answer: str
    score: int | None = None
    feedback: str | None = None
    suggestions: list[str] = field(default_factory=list)
    is_correct: bool | None = None
    graded_at: datetime | None = None

    @property
    def is_graded(self) -> bool:
        """True when a score and feedback have been saved."""
        return self.score is not None and bool(self.feedback)


@dataclass(frozen=True)
class GradedAnswerResult:
    """Outcome of grading an answer submission.

    Attributes:
        answer: The saved (or reused) answer record
        percentage: Grading score in [0, 100]
        reused: True when the previous grading was reused because the
            answer text did not change
        from_cache: True when the grading came from the fingerprint cache
        is_fallback: True when the offline fallback produced the grading
    """

    answer: GradedAnswerEntity
    percentage: int
    reused: bool = False
    from_cache: bool = False
    is_fallback: bool = False

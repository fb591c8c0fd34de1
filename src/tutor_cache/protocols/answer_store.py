"""Answer record storage protocol."""

from typing import Protocol, runtime_checkable

from tutor_cache.entities import GradedAnswerEntity


@runtime_checkable
class AnswerStore(Protocol):
    """Protocol for answer record backends.

    Answer records are keyed by (student, exam, question), not by content
    hash. Implementations raise ``AnswerStoreError`` on backend failures.
    """

    def get(self, student_id: str, exam_id: str, question_id: str) -> GradedAnswerEntity | None:
        """Fetch the stored answer record.

        Returns:
            The record, or None if the student never answered the question
        """
        ...

    def save(self, answer: GradedAnswerEntity) -> None:
        """Insert or replace the record for the answer's key."""
        ...

"""Request domain entities, one per content family."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ContentType(str, Enum):
    """Kind of educational content to generate."""

    SYLLABUS = "syllabus"
    TOPIC = "topic"
    EXERCISE = "exercise"
    EXPLANATION = "explanation"


@dataclass(frozen=True)
class CourseContext:
    """Course information used to restrict prompts to the course subject."""

    name: str
    description: str = ""


@dataclass(frozen=True)
class ContentRequest:
    """Request for generated educational content.

    Attributes:
        content_type: What to generate
        course_id: Course the content belongs to
        student_level: Target student level (e.g. "intermediate")
        context: Free-text request context (e.g. "algebra")
        course: Course name/description for prompt restriction
        topic_id: Optional topic the content is attached to
        additional_params: Extra request parameters, part of the cache key
    """

    content_type: ContentType
    course_id: str
    student_level: str
    context: str
    course: CourseContext | None = None
    topic_id: str | None = None
    additional_params: dict[str, Any] | None = None


@dataclass(frozen=True)
class StudentProfile:
    """Learning profile a recommendation is personalized for."""

    progress: float
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    learning_style: str | None = None


@dataclass(frozen=True)
class RecommendationRequest:
    student_id: str
    course_id: str
    profile: StudentProfile


@dataclass(frozen=True)
class GradingRequest:
    """Request to grade one free-text answer.

    Attributes:
        question: Exam question text
        answer: Student answer text
        rubric: Optional grading rubric
        course: Course context; restricts grading to the course subject
        course_id: Optional course identifier, kept for provenance
    """

    question: str
    answer: str
    rubric: str | None = None
    course: CourseContext | None = None
    course_id: str | None = None


@dataclass(frozen=True)
class AnswerSubmission:
    """A student's answer to one exam question.

    Answer records are keyed by (student_id, exam_id, question_id).
    """

    student_id: str
    exam_id: str
    question_id: str
    question: str
    answer: str
    max_points: int = 100
    rubric: str | None = None
    course: CourseContext | None = None
    course_id: str | None = None


@dataclass(frozen=True)
class ChatRequest:
    message: str
    user_id: str | None = None
    course: CourseContext | None = None

"""Request DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from tutor_cache.entities import ContentType


class CourseContextModel(BaseModel):
    """Course the request is made for; restricts prompts to its subject."""

    name: str = Field(..., description="Course name (e.g. 'Matemática 3')", min_length=1)
    description: str = Field("", description="Optional course description")


class GenerateContentRequest(BaseModel):
    """Request DTO for generating educational content.

    The handler will convert this to a ContentRequest entity.
    """

    content_type: ContentType = Field(..., description="syllabus, topic, exercise or explanation")
    course_id: str = Field(..., description="Course the content belongs to", min_length=1)
    student_level: str = Field("intermediate", description="Target student level")
    context: str = Field(..., description="What the content should be about", min_length=1)
    course: CourseContextModel | None = Field(None, description="Course name and description")
    topic_id: str | None = Field(None, description="Topic the content is attached to")
    additional_params: dict[str, Any] | None = Field(
        None,
        description="Extra generation parameters (part of the cache key)",
    )


class RecommendationsRequest(BaseModel):
    """Request DTO for personalized recommendations."""

    student_id: str = Field(..., min_length=1)
    course_id: str = Field(..., min_length=1)
    progress: float = Field(0.0, description="Course progress percentage", ge=0.0, le=100.0)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    learning_style: str | None = Field(None, description="e.g. 'visual', 'practical'")


class GradeRequest(BaseModel):
    """Request DTO for grading one free-text answer."""

    question: str = Field(..., description="Exam question text", min_length=1)
    answer: str = Field("", description="Student answer; may be empty")
    rubric: str | None = Field(None, description="Optional grading rubric")
    course: CourseContextModel | None = None
    course_id: str | None = None


class GradeAnswerRequest(BaseModel):
    """Request DTO for grading and recording a student's exam answer.

    An unchanged answer that was already graded is not graded again.
    """

    student_id: str = Field(..., min_length=1)
    exam_id: str = Field(..., min_length=1)
    question_id: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    answer: str = Field("", description="Student answer; may be empty")
    max_points: int = Field(100, description="Points the question is worth", ge=1)
    rubric: str | None = None
    course: CourseContextModel | None = None
    course_id: str | None = None


class ChatMessageRequest(BaseModel):
    """Request DTO for a tutoring chat message."""

    message: str = Field(..., description="The student's message", min_length=1)
    user_id: str | None = Field(None, description="Sender, for logging only")
    course: CourseContextModel | None = None

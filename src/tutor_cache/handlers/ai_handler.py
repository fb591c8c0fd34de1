"""HTTP handlers for the generation endpoints.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging

from fastapi import HTTPException, status

from tutor_cache.dto import (
    ChatMessageRequest,
    ChatResponse,
    ContentResponse,
    CourseContextModel,
    GenerateContentRequest,
    GradeAnswerRequest,
    GradeAnswerResponse,
    GradeRequest,
    GradeResponse,
    RecommendationsRequest,
    RecommendationsResponse,
)
from tutor_cache.entities import (
    AnswerSubmission,
    CachedResult,
    ChatRequest,
    ContentRequest,
    CourseContext,
    GradingRequest,
    RecommendationRequest,
    StudentProfile,
)
from tutor_cache.errors import ContentGenerationError
from tutor_cache.services import ChatService, ContentService, GradingService, RecommendationService

logger = logging.getLogger(__name__)


def _course(model: CourseContextModel | None) -> CourseContext | None:
    if model is None:
        return None
    return CourseContext(name=model.name, description=model.description)


def _provenance(result: CachedResult) -> dict:
    return {
        "from_cache": result.from_cache,
        "fingerprint": result.fingerprint,
        "usage_count": result.usage_count,
        "tokens_used": result.tokens_used,
        "model_used": result.model_used,
        "is_fallback": result.is_fallback,
    }


class AIHandler:
    """HTTP handlers for content, recommendation, grading and chat.

    Example:
        ```python
        handler = AIHandler(
            content_service=content_service,
            recommendation_service=recommendation_service,
            grading_service=grading_service,
            chat_service=chat_service,
        )

        @app.post("/ai/content", response_model=ContentResponse)
        async def generate_content(request: GenerateContentRequest):
            return await handler.generate_content(request)
        ```
    """

    def __init__(
        self,
        content_service: ContentService,
        recommendation_service: RecommendationService,
        grading_service: GradingService,
        chat_service: ChatService,
    ) -> None:
        self._content = content_service
        self._recommendations = recommendation_service
        self._grading = grading_service
        self._chat = chat_service

    async def generate_content(self, request: GenerateContentRequest) -> ContentResponse:
        """Handle POST /ai/content requests.

        Raises:
            HTTPException: 502 if the generation service failed, 500 otherwise
        """
        try:
            result = await self._content.generate(
                ContentRequest(
                    content_type=request.content_type,
                    course_id=request.course_id,
                    student_level=request.student_level,
                    context=request.context,
                    course=_course(request.course),
                    topic_id=request.topic_id,
                    additional_params=request.additional_params,
                )
            )
        except ContentGenerationError as e:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
        except Exception as e:
            logger.exception("Unexpected error generating content")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to generate content: {e}",
            ) from e

        payload = result.payload
        return ContentResponse(
            title=payload.title,
            body=payload.body,
            learning_objectives=list(payload.learning_objectives),
            difficulty=payload.difficulty,
            extra=dict(payload.extra),
            **_provenance(result),
        )

    async def generate_recommendations(self, request: RecommendationsRequest) -> RecommendationsResponse:
        """Handle POST /ai/recommendations requests.

        Raises:
            HTTPException: 502 if the generation service failed, 500 otherwise
        """
        try:
            result = await self._recommendations.recommend(
                RecommendationRequest(
                    student_id=request.student_id,
                    course_id=request.course_id,
                    profile=StudentProfile(
                        progress=request.progress,
                        strengths=list(request.strengths),
                        weaknesses=list(request.weaknesses),
                        learning_style=request.learning_style,
                    ),
                )
            )
        except ContentGenerationError as e:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
        except Exception as e:
            logger.exception("Unexpected error generating recommendations")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to generate recommendations: {e}",
            ) from e

        payload = result.payload
        return RecommendationsResponse(
            next_topics=list(payload.next_topics),
            suggested_exercises=list(payload.suggested_exercises),
            study_plan=list(payload.study_plan),
            areas_to_focus=list(payload.areas_to_focus),
            summary=payload.summary,
            **_provenance(result),
        )

    async def grade(self, request: GradeRequest) -> GradeResponse:
        """Handle POST /ai/grade requests. Grading falls back instead of failing."""
        result = await self._grading.grade(
            GradingRequest(
                question=request.question,
                answer=request.answer,
                rubric=request.rubric,
                course=_course(request.course),
                course_id=request.course_id,
            )
        )
        payload = result.payload
        return GradeResponse(
            score=payload.score,
            feedback=payload.feedback,
            suggestions=list(payload.suggestions),
            **_provenance(result),
        )

    async def grade_answer(self, request: GradeAnswerRequest) -> GradeAnswerResponse:
        """Handle POST /ai/grade/answer requests."""
        result = await self._grading.grade_answer(
            AnswerSubmission(
                student_id=request.student_id,
                exam_id=request.exam_id,
                question_id=request.question_id,
                question=request.question,
                answer=request.answer,
                max_points=request.max_points,
                rubric=request.rubric,
                course=_course(request.course),
                course_id=request.course_id,
            )
        )
        answer = result.answer
        return GradeAnswerResponse(
            student_id=answer.student_id,
            exam_id=answer.exam_id,
            question_id=answer.question_id,
            score=answer.score or 0,
            max_points=request.max_points,
            percentage=result.percentage,
            is_correct=bool(answer.is_correct),
            feedback=answer.feedback or "",
            suggestions=list(answer.suggestions),
            graded_at=answer.graded_at,
            reused=result.reused,
            from_cache=result.from_cache,
            is_fallback=result.is_fallback,
        )

    async def chat(self, request: ChatMessageRequest) -> ChatResponse:
        """Handle POST /chat requests. Chat replies never fail."""
        result = await self._chat.reply(
            ChatRequest(message=request.message, user_id=request.user_id, course=_course(request.course))
        )
        return ChatResponse(
            message=result.payload.message,
            from_cache=result.from_cache,
            is_fallback=result.is_fallback,
        )

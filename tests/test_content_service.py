"""
Tests for content and recommendation generation.
"""

import json

import pytest

from tutor_cache.entities import (
    CacheFamily,
    ContentRequest,
    ContentType,
    CourseContext,
    RecommendationRequest,
    StudentProfile,
)
from tutor_cache.errors import ContentGenerationError
from tutor_cache.services import ContentService, RecommendationService
from tutor_cache.services.content_service import build_content_payload
from tutor_cache.services.recommendation_service import build_recommendation_payload

TOPIC_JSON = json.dumps(
    {
        "title": "Linear equations",
        "body": "An equation of the first degree...",
        "learningObjectives": ["Solve ax + b = c"],
        "difficulty": "intermediate",
        "examples": ["2x + 3 = 7"],
    }
)


@pytest.fixture
def content_service(gateway, adapter, test_settings):
    return ContentService(gateway, adapter, test_settings)


@pytest.fixture
def recommendation_service(gateway, adapter, test_settings):
    return RecommendationService(gateway, adapter, test_settings)


def topic_request(**overrides):
    fields = {
        "content_type": ContentType.TOPIC,
        "course_id": "course-1",
        "student_level": "intermediate",
        "context": "algebra",
        "course": CourseContext(name="Matemática 3"),
    }
    fields.update(overrides)
    return ContentRequest(**fields)


class TestContentService:
    @pytest.mark.asyncio
    async def test_second_identical_request_is_served_from_cache(self, content_service, provider, usage):
        provider.queue(TOPIC_JSON)

        first = await content_service.generate(topic_request())
        second = await content_service.generate(topic_request())

        assert len(provider.calls) == 1
        assert first.from_cache is False
        assert second.from_cache is True
        assert second.payload == first.payload
        assert second.usage_count == first.usage_count + 1
        assert second.fingerprint == first.fingerprint
        assert usage.hits == 1
        assert usage.calls == 1

    @pytest.mark.asyncio
    async def test_normalized_variants_share_the_entry(self, content_service, provider):
        provider.queue(TOPIC_JSON)

        await content_service.generate(topic_request(context="Algebra", student_level="Intermediate"))
        result = await content_service.generate(topic_request(context="  algebra "))

        assert result.from_cache is True
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_parses_structured_output(self, content_service, provider, test_settings):
        provider.queue(TOPIC_JSON)

        result = await content_service.generate(topic_request())

        assert result.payload.title == "Linear equations"
        assert result.payload.learning_objectives == ["Solve ax + b = c"]
        assert result.payload.extra == {"examples": ["2x + 3 = 7"]}
        assert result.tokens_used == 120
        assert result.model_used == test_settings.simple_model

    @pytest.mark.asyncio
    async def test_model_selection_by_type(self, content_service, provider, test_settings):
        await content_service.generate(topic_request(content_type=ContentType.SYLLABUS))
        await content_service.generate(topic_request(content_type=ContentType.EXERCISE))

        assert provider.calls[0]["model"] == test_settings.advanced_model
        assert provider.calls[1]["model"] == test_settings.simple_model

    @pytest.mark.asyncio
    async def test_prompt_is_restricted_to_course_subject(self, content_service, provider):
        await content_service.generate(topic_request())

        assert "Mathematics" in provider.calls[0]["system_prompt"]
        assert "algebra" in provider.calls[0]["user_prompt"]

    @pytest.mark.asyncio
    async def test_generation_failure_raises_and_caches_nothing(self, content_service, provider, repository):
        provider.queue(RuntimeError("rate limited"))

        with pytest.raises(ContentGenerationError) as exc_info:
            await content_service.generate(topic_request())

        assert exc_info.value.family == "content"
        assert "Failed to generate content" in str(exc_info.value)
        assert repository.count_all() == 0

    @pytest.mark.asyncio
    async def test_empty_completion_is_a_failure(self, content_service, provider):
        provider.queue("   ")

        with pytest.raises(ContentGenerationError):
            await content_service.generate(topic_request())

    @pytest.mark.asyncio
    async def test_store_failure_does_not_fail_the_request(self, content_service, provider, repository, monkeypatch):
        def broken(*args, **kwargs):
            raise ConnectionError("store down")

        monkeypatch.setattr(repository, "find", broken)
        monkeypatch.setattr(repository, "upsert", broken)
        provider.queue(TOPIC_JSON)

        result = await content_service.generate(topic_request())

        assert result.from_cache is False
        assert result.payload.title == "Linear equations"

    @pytest.mark.asyncio
    async def test_expired_entry_is_regenerated(self, content_service, provider, clock, test_settings):
        await content_service.generate(topic_request())
        clock.advance(days=test_settings.ttl_content_days)

        result = await content_service.generate(topic_request())

        assert result.from_cache is False
        assert len(provider.calls) == 2

    def test_non_json_output_is_wrapped(self):
        payload = build_content_payload(ContentType.EXERCISE, "Solve 2x = 4.")

        assert payload.title == "Generated exercise content"
        assert payload.body == "Solve 2x = 4."


class TestRecommendationService:
    @staticmethod
    def request(progress=40.0, strengths=("algebra",), weaknesses=("geometry",)):
        return RecommendationRequest(
            student_id="student-7",
            course_id="course-1",
            profile=StudentProfile(
                progress=progress,
                strengths=list(strengths),
                weaknesses=list(weaknesses),
                learning_style="visual",
            ),
        )

    @pytest.mark.asyncio
    async def test_recommendations_are_cached_per_profile(self, recommendation_service, provider, test_settings):
        provider.queue(
            json.dumps(
                {
                    "nextTopics": [{"topicId": "t1", "priority": 9, "reason": "weak area"}],
                    "suggestedExercises": [],
                    "studyPlan": [{"topic": "Triangles", "estimatedTime": 30, "order": 1}],
                    "areasToFocus": ["geometry"],
                }
            )
        )

        first = await recommendation_service.recommend(self.request())
        second = await recommendation_service.recommend(self.request(strengths=("Algebra",)))
        changed = await recommendation_service.recommend(self.request(progress=55.0))

        assert first.payload.next_topics[0]["topicId"] == "t1"
        assert first.payload.areas_to_focus == ["geometry"]
        assert first.fingerprint.startswith("rec_student-7_")
        assert second.from_cache is True
        assert changed.from_cache is False
        assert len(provider.calls) == 2
        assert provider.calls[0]["model"] == test_settings.advanced_model
        assert provider.calls[0]["max_tokens"] == 1500

    @pytest.mark.asyncio
    async def test_failure_raises_content_generation_error(self, recommendation_service, provider):
        provider.queue(TimeoutError("timed out"))

        with pytest.raises(ContentGenerationError) as exc_info:
            await recommendation_service.recommend(self.request())

        assert exc_info.value.family == CacheFamily.RECOMMENDATION.value

    def test_non_json_output_keeps_raw_text(self):
        payload = build_recommendation_payload("Study triangles next.")

        assert payload.next_topics == []
        assert payload.summary == "Study triangles next."

"""
Tests for the cache store implementations (in-memory and Redis).
"""

from datetime import timedelta

import pytest

from tutor_cache.entities import (
    CacheEntryEntity,
    CacheFamily,
    ChatPayload,
    ContentPayload,
    GradedAnswerEntity,
    GradingPayload,
)
from tutor_cache.errors import AnswerStoreError, CacheStoreError
from tutor_cache.repositories import (
    InMemoryAnswerRepository,
    InMemoryCacheRepository,
    RedisAnswerRepository,
    RedisCacheRepository,
)

from .conftest import START


def make_entry(fingerprint="grading_0123456789abcdef", family=CacheFamily.GRADING, payload=None, days=30, **kwargs):
    return CacheEntryEntity(
        fingerprint=fingerprint,
        family=family,
        payload=payload or GradingPayload(score=80, feedback="Good", suggestions=["More detail"]),
        created_at=START,
        expires_at=START + timedelta(days=days),
        **kwargs,
    )


@pytest.fixture(params=["memory", "redis"])
def store(request, clock, fake_redis):
    if request.param == "memory":
        return InMemoryCacheRepository(clock=clock)
    return RedisCacheRepository(redis_client=fake_redis, key_prefix="test", clock=clock)


def test_find_missing_returns_none(store):
    assert store.find("grading_missing", CacheFamily.GRADING) is None


def test_upsert_then_find(store):
    entry = make_entry(tokens_used=321, model_used="gpt-4o-mini")
    store.upsert(entry)

    found = store.find(entry.fingerprint, CacheFamily.GRADING)

    assert found is not None
    assert found.payload == entry.payload
    assert found.usage_count == 0
    assert found.tokens_used == 321
    assert found.model_used == "gpt-4o-mini"
    assert found.expires_at == entry.expires_at


def test_find_with_other_family_is_a_miss(store):
    store.upsert(make_entry())
    assert store.find("grading_0123456789abcdef", CacheFamily.CHAT) is None


def test_expired_entry_is_a_miss(store, clock):
    store.upsert(make_entry(days=1))

    clock.advance(days=1)

    assert store.find("grading_0123456789abcdef", CacheFamily.GRADING) is None


def test_entry_expired_one_second_ago_is_absent_before_and_after_sweep(store, clock):
    store.upsert(make_entry(days=1))
    clock.advance(days=1, seconds=1)

    assert store.find("grading_0123456789abcdef", CacheFamily.GRADING) is None
    assert store.count_all() == 1

    assert store.sweep_expired() == 1
    assert store.count_all() == 0
    assert store.find("grading_0123456789abcdef", CacheFamily.GRADING) is None


def test_upsert_replaces_entry(store):
    store.upsert(make_entry(usage_count=0))
    store.record_hit("grading_0123456789abcdef")

    store.upsert(make_entry(payload=GradingPayload(score=40, feedback="Redo")))
    found = store.find("grading_0123456789abcdef", CacheFamily.GRADING)

    assert found.payload.score == 40
    assert found.usage_count == 0
    assert store.count_all() == 1


def test_record_hit_increments_usage(store, clock):
    store.upsert(make_entry())
    clock.advance(hours=1)

    assert store.record_hit("grading_0123456789abcdef") == 1
    assert store.record_hit("grading_0123456789abcdef") == 2

    found = store.find("grading_0123456789abcdef", CacheFamily.GRADING)
    assert found.usage_count == 2
    assert found.last_used_at == START + timedelta(hours=1)


def test_record_hit_on_missing_entry(store):
    assert store.record_hit("grading_missing") is None


def test_sweep_removes_only_expired(store, clock):
    store.upsert(make_entry("chat_a", CacheFamily.CHAT, ChatPayload(message="hi"), days=7))
    store.upsert(make_entry("grading_b", days=30))
    store.upsert(make_entry("ai_topic_c", CacheFamily.CONTENT, ContentPayload(title="T", body="B"), days=30))

    clock.advance(days=8)

    assert store.sweep_expired() == 1
    assert store.count_all() == 2
    assert store.find("grading_b", CacheFamily.GRADING) is not None
    assert store.sweep_expired() == 0


def test_sweep_empty_store(store):
    assert store.sweep_expired() == 0


def test_get_stats_per_family(store):
    store.upsert(make_entry("grading_a"))
    store.upsert(make_entry("grading_b"))
    store.upsert(make_entry("chat_a", CacheFamily.CHAT, ChatPayload(message="hi")))
    store.record_hit("grading_a")

    stats = store.get_stats()

    assert stats["total_entries"] == 3
    assert stats["families"]["grading"] == {"entries": 2, "total_usage": 1}
    assert stats["families"]["chat"] == {"entries": 1, "total_usage": 0}
    assert stats["families"]["content"]["entries"] == 0


def test_health_check(store):
    assert store.health_check() is True


class TestRedisCacheRepository:
    """Redis-specific behavior."""

    def test_keys_are_namespaced(self, fake_redis, clock):
        repo = RedisCacheRepository(redis_client=fake_redis, key_prefix="tc", clock=clock)
        repo.upsert(make_entry())

        assert "tc:entry:grading_0123456789abcdef" in fake_redis.hashes
        assert "grading_0123456789abcdef" in fake_redis.zsets["tc:expiry"]

    def test_unreadable_entry_is_a_miss(self, fake_redis, clock):
        repo = RedisCacheRepository(redis_client=fake_redis, key_prefix="tc", clock=clock)
        fake_redis.hashes["tc:entry:grading_bad"] = {"family": "grading", "payload": "{not json"}

        assert repo.find("grading_bad", CacheFamily.GRADING) is None

    def test_connection_errors_raise_cache_store_error(self, fake_redis, clock):
        repo = RedisCacheRepository(redis_client=fake_redis, key_prefix="tc", clock=clock)
        fake_redis.fail = True

        with pytest.raises(CacheStoreError):
            repo.find("grading_a", CacheFamily.GRADING)
        with pytest.raises(CacheStoreError):
            repo.upsert(make_entry())
        with pytest.raises(CacheStoreError):
            repo.sweep_expired()
        assert repo.health_check() is False

    def test_sweep_deletes_in_batches(self, fake_redis, clock, monkeypatch):
        monkeypatch.setattr("tutor_cache.repositories.redis_repository.SWEEP_BATCH_SIZE", 2)
        repo = RedisCacheRepository(redis_client=fake_redis, key_prefix="tc", clock=clock)
        for i in range(5):
            repo.upsert(make_entry(f"chat_{i}", CacheFamily.CHAT, ChatPayload(message=str(i)), days=1))

        clock.advance(days=2)

        assert repo.sweep_expired() == 5
        assert repo.count_all() == 0
        assert fake_redis.hashes == {}

    def test_hit_racing_a_sweep_does_not_recreate_entry(self, fake_redis, clock, monkeypatch):
        repo = RedisCacheRepository(redis_client=fake_redis, key_prefix="tc", clock=clock)
        repo.upsert(make_entry("chat_race", CacheFamily.CHAT, ChatPayload(message="hi"), days=1))
        clock.advance(days=2)
        real_exists = fake_redis.exists
        swept = []

        def exists_then_sweep(*keys):
            found = real_exists(*keys)
            if not swept:
                swept.append(repo.sweep_expired())
            return found

        monkeypatch.setattr(fake_redis, "exists", exists_then_sweep)

        assert repo.record_hit("chat_race") is None
        assert swept == [1]
        assert "tc:entry:chat_race" not in fake_redis.hashes

    def test_record_hit_survives_concurrent_hit(self, fake_redis, clock, monkeypatch):
        repo = RedisCacheRepository(redis_client=fake_redis, key_prefix="tc", clock=clock)
        repo.upsert(make_entry())
        real_exists = fake_redis.exists
        raced = []

        def exists_then_hit(*keys):
            found = real_exists(*keys)
            if not raced:
                raced.append(fake_redis.hincrby(keys[0], "usage_count", 1))
            return found

        monkeypatch.setattr(fake_redis, "exists", exists_then_hit)

        assert repo.record_hit("grading_0123456789abcdef") == 2


class TestAnswerRepositories:
    @pytest.fixture(params=["memory", "redis"])
    def answer_store(self, request, fake_redis):
        if request.param == "memory":
            return InMemoryAnswerRepository()
        return RedisAnswerRepository(redis_client=fake_redis, key_prefix="tc")

    def test_save_and_get(self, answer_store):
        record = GradedAnswerEntity(
            student_id="s1",
            exam_id="e1",
            question_id="q1",
            answer="Four",
            score=8,
            feedback="Correct",
            suggestions=["Show steps"],
            is_correct=True,
            graded_at=START,
        )
        answer_store.save(record)

        assert answer_store.get("s1", "e1", "q1") == record
        assert answer_store.get("s1", "e1", "q2") is None

    def test_redis_errors_raise_answer_store_error(self, fake_redis):
        repo = RedisAnswerRepository(redis_client=fake_redis, key_prefix="tc")
        fake_redis.fail = True

        with pytest.raises(AnswerStoreError):
            repo.get("s1", "e1", "q1")

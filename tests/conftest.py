"""Shared fixtures: fixed clock, scripted generation provider, fake Redis."""

import fnmatch
from datetime import datetime, timedelta, timezone

import pytest
import redis

from tutor_cache.config import Settings
from tutor_cache.entities import GenerationResult
from tutor_cache.repositories import InMemoryAnswerRepository, InMemoryCacheRepository
from tutor_cache.services import CacheGateway, GenerationAdapter, UsageCounter

START = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class ScriptedProvider:
    """Generation provider returning queued responses in order.

    A queued exception is raised instead of returned. With an empty queue
    every call returns ``default``.
    """

    provider_name = "fake"

    def __init__(self, default: str = "generated text", tokens: int = 120) -> None:
        self.default = default
        self.tokens = tokens
        self.available = True
        self.calls: list[dict] = []
        self._queue: list = []

    def queue(self, *responses) -> None:
        self._queue.extend(responses)

    async def complete(self, system_prompt, user_prompt, model, temperature, max_tokens) -> GenerationResult:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        response = self._queue.pop(0) if self._queue else self.default
        if isinstance(response, Exception):
            raise response
        return GenerationResult(text=response, tokens_used=self.tokens, model=model)

    async def is_available(self) -> bool:
        return self.available


class FakePipeline:
    """Queues client calls and runs them on execute().

    After ``watch()`` calls run immediately until ``multi()``, and
    ``execute()`` raises ``redis.WatchError`` if a watched key changed.
    """

    def __init__(self, client: "FakeRedis") -> None:
        self._client = client
        self._calls = []
        self._watched: dict[str, int] = {}
        self._immediate = False

    def watch(self, *keys) -> None:
        self._watched = {key: self._client.versions.get(key, 0) for key in keys}
        self._immediate = True

    def multi(self) -> None:
        self._immediate = False

    def __getattr__(self, name):
        method = getattr(self._client, name)
        if self._immediate:
            return method

        def queued(*args, **kwargs):
            self._calls.append((method, args, kwargs))
            return self

        return queued

    def execute(self) -> list:
        self._client.check()
        watched, self._watched = self._watched, {}
        self._immediate = False
        if any(self._client.versions.get(key, 0) != version for key, version in watched.items()):
            self._calls = []
            raise redis.WatchError("Watched variable changed.")
        results = [method(*args, **kwargs) for method, args, kwargs in self._calls]
        self._calls = []
        return results


def _bound(value) -> tuple[float, bool]:
    text = str(value)
    if text.startswith("("):
        return float(text[1:]), True
    return float(text), False


class FakeRedis:
    """In-process stand-in for the subset of redis.Redis the repositories use.

    Values are stored as decoded strings, like a client created with
    ``decode_responses=True``. Set ``fail = True`` to make every call
    raise ``redis.ConnectionError``.
    """

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}
        self.zsets: dict[str, dict[str, float]] = {}
        self.strings: dict[str, str] = {}
        self.versions: dict[str, int] = {}
        self.fail = False

    def check(self) -> None:
        if self.fail:
            raise redis.ConnectionError("Connection refused")

    def _touch(self, key) -> None:
        self.versions[key] = self.versions.get(key, 0) + 1

    def ping(self) -> bool:
        self.check()
        return True

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        self.check()
        return FakePipeline(self)

    def transaction(self, func, *watches, value_from_callable=False, **kwargs):
        while True:
            pipe = self.pipeline()
            pipe.watch(*watches)
            func_value = func(pipe)
            try:
                exec_value = pipe.execute()
            except redis.WatchError:
                continue
            return func_value if value_from_callable else exec_value

    def exists(self, *keys) -> int:
        self.check()
        return sum(1 for key in keys if key in self.hashes or key in self.strings or key in self.zsets)

    def delete(self, *keys) -> int:
        self.check()
        deleted = 0
        for key in keys:
            found = False
            for store in (self.hashes, self.strings, self.zsets):
                if key in store:
                    del store[key]
                    found = True
            if found:
                self._touch(key)
            deleted += int(found)
        return deleted

    def hgetall(self, key) -> dict:
        self.check()
        return dict(self.hashes.get(key, {}))

    def hset(self, key, field=None, value=None, mapping=None) -> int:
        self.check()
        self._touch(key)
        data = self.hashes.setdefault(key, {})
        before = len(data)
        if field is not None:
            data[field] = str(value)
        for name, item in (mapping or {}).items():
            data[name] = str(item)
        return len(data) - before

    def hincrby(self, key, field, amount=1) -> int:
        self.check()
        self._touch(key)
        data = self.hashes.setdefault(key, {})
        data[field] = str(int(data.get(field, 0)) + amount)
        return int(data[field])

    def hmget(self, key, *fields) -> list:
        self.check()
        data = self.hashes.get(key, {})
        return [data.get(name) for name in fields]

    def zadd(self, key, mapping) -> int:
        self.check()
        self._touch(key)
        zset = self.zsets.setdefault(key, {})
        added = sum(1 for member in mapping if member not in zset)
        zset.update({member: float(score) for member, score in mapping.items()})
        return added

    def zrem(self, key, *members) -> int:
        self.check()
        zset = self.zsets.get(key, {})
        removed = 0
        for member in members:
            if member in zset:
                del zset[member]
                removed += 1
        return removed

    def zcard(self, key) -> int:
        self.check()
        return len(self.zsets.get(key, {}))

    def zrangebyscore(self, key, min, max) -> list[str]:
        self.check()
        low, low_exclusive = _bound(min)
        high, high_exclusive = _bound(max)
        members = []
        for member, score in sorted(self.zsets.get(key, {}).items(), key=lambda item: item[1]):
            if score < low or (low_exclusive and score == low):
                continue
            if score > high or (high_exclusive and score == high):
                continue
            members.append(member)
        return members

    def scan_iter(self, match=None):
        self.check()
        for key in list(self.hashes):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    def get(self, key):
        self.check()
        return self.strings.get(key)

    def set(self, key, value) -> bool:
        self.check()
        self._touch(key)
        self.strings[key] = str(value)
        return True


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def test_settings():
    return Settings(cache_backend="memory", cache_cleanup_enabled=False, llm_provider="openai")


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def adapter(provider):
    return GenerationAdapter(provider)


@pytest.fixture
def usage():
    return UsageCounter()


@pytest.fixture
def repository(clock):
    return InMemoryCacheRepository(clock=clock)


@pytest.fixture
def answers():
    return InMemoryAnswerRepository()


@pytest.fixture
def gateway(repository, usage, test_settings, clock):
    return CacheGateway(repository=repository, usage=usage, settings=test_settings, clock=clock)


@pytest.fixture
def fake_redis():
    return FakeRedis()

"""
Tests for the generation adapter and providers.
"""

import dataclasses
import json

import httpx
import openai
import pytest

from tutor_cache.errors import GenerationError
from tutor_cache.repositories import OllamaGenerationProvider, OpenAIGenerationProvider
from tutor_cache.repositories import openai_generation_provider
from tutor_cache.services import GenerationAdapter

from .conftest import ScriptedProvider

GENERATE_ARGS = {
    "system_prompt": "You are a tutor.",
    "user_prompt": "Explain fractions.",
    "model": "llama3",
    "temperature": 0.7,
    "max_tokens": 200,
}


def ollama_provider(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OllamaGenerationProvider(base_url="http://ollama.test/", client=client)


def openai_provider(handler):
    client = openai.AsyncOpenAI(
        api_key="sk-test",
        base_url="http://openai.test/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    return OpenAIGenerationProvider(api_key="sk-test", client=client)


@pytest.mark.asyncio
async def test_adapter_wraps_provider_errors():
    provider = ScriptedProvider()
    provider.queue(ConnectionError("reset by peer"))

    with pytest.raises(GenerationError) as exc_info:
        await GenerationAdapter(provider).generate(**GENERATE_ARGS)

    assert "reset by peer" in str(exc_info.value)


@pytest.mark.asyncio
async def test_adapter_rejects_empty_completion():
    provider = ScriptedProvider(default="")

    with pytest.raises(GenerationError):
        await GenerationAdapter(provider).generate(**GENERATE_ARGS)


@pytest.mark.asyncio
async def test_ollama_complete():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "model": "llama3",
                "message": {"role": "assistant", "content": "A fraction is a part of a whole."},
                "prompt_eval_count": 30,
                "eval_count": 12,
            },
        )

    provider = ollama_provider(handler)
    result = await provider.complete(**GENERATE_ARGS)

    assert seen["url"] == "http://ollama.test/api/chat"
    assert seen["body"]["stream"] is False
    assert seen["body"]["options"] == {"temperature": 0.7, "num_predict": 200}
    assert seen["body"]["messages"][0] == {"role": "system", "content": "You are a tutor."}
    assert result.text == "A fraction is a part of a whole."
    assert result.tokens_used == 42
    assert result.model == "llama3"
    await provider.close()


@pytest.mark.asyncio
async def test_ollama_http_error_becomes_generation_error():
    provider = ollama_provider(lambda request: httpx.Response(500, json={"error": "boom"}))

    with pytest.raises(GenerationError):
        await GenerationAdapter(provider).generate(**GENERATE_ARGS)


@pytest.mark.asyncio
async def test_ollama_unexpected_format():
    provider = ollama_provider(lambda request: httpx.Response(200, json={"done": True}))

    with pytest.raises(ValueError):
        await provider.complete(**GENERATE_ARGS)


@pytest.mark.asyncio
async def test_ollama_is_available():
    up = ollama_provider(lambda request: httpx.Response(200, json={"models": []}))
    down = ollama_provider(lambda request: httpx.Response(404))

    assert await up.is_available() is True
    assert await down.is_available() is False


@pytest.mark.asyncio
async def test_openai_complete():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": "chatcmpl-1",
                "object": "chat.completion",
                "created": 1700000000,
                "model": "gpt-4o-mini-2024-07-18",
                "choices": [
                    {
                        "index": 0,
                        "message": {"role": "assistant", "content": "A fraction is a part of a whole."},
                        "finish_reason": "stop",
                    }
                ],
                "usage": {"prompt_tokens": 30, "completion_tokens": 12, "total_tokens": 42},
            },
        )

    provider = openai_provider(handler)
    result = await provider.complete(**{**GENERATE_ARGS, "model": "gpt-4o-mini"})

    assert seen["url"] == "http://openai.test/v1/chat/completions"
    assert seen["body"]["model"] == "gpt-4o-mini"
    assert seen["body"]["max_tokens"] == 200
    assert seen["body"]["messages"][1] == {"role": "user", "content": "Explain fractions."}
    assert result.text == "A fraction is a part of a whole."
    assert result.tokens_used == 42
    assert result.model == "gpt-4o-mini-2024-07-18"
    await provider.close()


@pytest.mark.asyncio
async def test_openai_api_error_becomes_generation_error():
    provider = openai_provider(
        lambda request: httpx.Response(429, json={"error": {"message": "quota exceeded", "type": "insufficient_quota"}})
    )

    with pytest.raises(GenerationError):
        await GenerationAdapter(provider).generate(**GENERATE_ARGS)


@pytest.mark.asyncio
async def test_openai_without_key_refuses_to_call(monkeypatch):
    monkeypatch.setattr(
        openai_generation_provider,
        "settings",
        dataclasses.replace(openai_generation_provider.settings, openai_api_key=None),
    )
    provider = OpenAIGenerationProvider()

    with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
        await provider.complete(**GENERATE_ARGS)
    assert await provider.is_available() is False

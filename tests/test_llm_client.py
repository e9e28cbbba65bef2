"""Tests for the OpenAI-compatible LLM client."""
import json

import httpx
import pytest

from reiseplaner.config import PROVIDER_BASE_URLS, Settings, backend_configured, get_llm_config
from reiseplaner.services.llm_client import LLMClient


def _completion(content, finish_reason="stop") -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1760000000,
        "model": "gpt-4-turbo",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": finish_reason,
            }
        ],
    }


def _client(handler) -> LLMClient:
    config = get_llm_config(Settings(llm_api_key="sk-test", llm_base_url="https://llm.test/v1"))
    return LLMClient(config, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestLLMClient:
    """Test completion requests against a mocked API."""

    @pytest.mark.asyncio
    async def test_sends_prompt_pair_and_parameters(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_completion('{"reiseziele": ["Rom"]}'))

        client = _client(handler)
        text = await client.complete("System", "Ziel(e): Rom")
        await client.aclose()

        assert text == '{"reiseziele": ["Rom"]}'
        body = json.loads(seen[0].content)
        assert str(seen[0].url) == "https://llm.test/v1/chat/completions"
        assert body["model"] == "gpt-4-turbo"
        assert body["temperature"] == 0.7
        assert body["max_tokens"] == 3000
        assert body["messages"] == [
            {"role": "system", "content": "System"},
            {"role": "user", "content": "Ziel(e): Rom"},
        ]

    @pytest.mark.asyncio
    async def test_missing_content(self):
        client = _client(lambda request: httpx.Response(200, json=_completion(None)))

        assert await client.complete("System", "User") is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_api_error_is_absence(self):
        client = _client(lambda request: httpx.Response(500, json={"error": {"message": "boom"}}))

        assert await client.complete("System", "User") is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_timeout_is_absence(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        client = _client(handler)

        assert await client.complete("System", "User") is None
        await client.aclose()


class TestLLMConfig:
    """Test provider configuration."""

    def test_default_base_url_per_provider(self):
        config = get_llm_config(Settings(llm_provider="mistral", llm_base_url="", llm_api_key="k"))

        assert config["base_url"] == PROVIDER_BASE_URLS["mistral"]

    def test_backend_configured(self):
        assert not backend_configured(Settings(llm_provider="openai", llm_api_key=""))
        assert backend_configured(Settings(llm_provider="openai", llm_api_key="sk-test"))
        assert backend_configured(Settings(llm_provider="ollama", llm_api_key=""))

"""Tests for language model providers."""

import json

import httpx
import pytest

from core.config import Settings
from core.errors import LLMProviderError
from core.providers import HTTPLLMClient, create_llm_client


def make_client(provider, handler, **kwargs):
    return HTTPLLMClient(
        provider=provider,
        api_key="test-key",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestHTTPLLMClient:
    """Test provider request building and response handling."""

    @pytest.mark.asyncio
    async def test_openai_request_and_response(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "  Upgrade react.  "}}]})

        client = make_client("openai", handler)
        text = await client.generate("Explain", max_tokens=250)

        assert text == "Upgrade react."
        assert seen["url"] == "https://api.openai.com/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["model"] == "gpt-4o"
        assert seen["body"]["max_tokens"] == 250
        assert seen["body"]["messages"] == [{"role": "user", "content": "Explain"}]

    @pytest.mark.asyncio
    async def test_anthropic_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["x-api-key"] == "test-key"
            assert request.headers["anthropic-version"] == "2023-06-01"
            return httpx.Response(200, json={"content": [{"type": "text", "text": "Pin lodash."}]})

        assert await make_client("anthropic", handler).generate("Explain") == "Pin lodash."

    @pytest.mark.asyncio
    async def test_gemini_model_in_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1beta/models/gemini-1.5-pro:generateContent"
            assert request.headers["x-goog-api-key"] == "test-key"
            body = json.loads(request.content)
            assert body["generationConfig"]["maxOutputTokens"] == 100
            return httpx.Response(200, json={
                "candidates": [{"content": {"parts": [{"text": "Dedupe."}]}}]
            })

        client = make_client("gemini", handler, model="gemini-1.5-pro")
        assert await client.generate("Explain", max_tokens=100) == "Dedupe."

    @pytest.mark.asyncio
    async def test_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": {"message": "invalid api key"}})

        with pytest.raises(LLMProviderError, match="401"):
            await make_client("groq", handler).generate("Explain")

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"choices": []})

        with pytest.raises(LLMProviderError, match="response format"):
            await make_client("openai", handler).generate("Explain")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(LLMProviderError, match="invalid JSON"):
            await make_client("openai", handler).generate("Explain")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(LLMProviderError, match="timed out"):
            await make_client("openai", handler, timeout=1.0).generate("Explain")

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            HTTPLLMClient(provider="mystery", api_key="x")


class TestCreateClient:

    def test_no_key_means_no_client(self, monkeypatch):
        for name in ("OPENAI_API_KEY", "DEPGUARD_LLM_API_KEY", "DEPGUARD_LLM_PROVIDER"):
            monkeypatch.delenv(name, raising=False)

        assert create_llm_client(Settings(_env_file=None)) is None

    def test_client_from_settings(self, monkeypatch):
        monkeypatch.setenv("DEPGUARD_LLM_PROVIDER", "groq")
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
        monkeypatch.delenv("GROQ_DEPGUARD_MODEL", raising=False)
        monkeypatch.delenv("DEPGUARD_LLM_MODEL", raising=False)
        monkeypatch.setenv("DEPGUARD_LLM_TIMEOUT", "3")

        client = create_llm_client(Settings(_env_file=None))

        assert client.provider == "groq"
        assert client.model == "llama-3.3-70b-versatile"
        assert client.timeout == 3.0

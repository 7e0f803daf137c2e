"""Language model providers used for conflict analysis."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from .config import Settings
from .errors import LLMProviderError

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.3


class LLMClient(Protocol):
    """Anything that turns a prompt into model text."""

    async def generate(self, prompt: str, max_tokens: int = 500) -> str: ...


@dataclass(frozen=True)
class ProviderConfig:
    """Endpoint, auth and payload shape of one provider's HTTP API."""

    endpoint: str
    default_model: str
    headers: Callable[[str], dict[str, str]]
    build_body: Callable[[str, str, int], dict[str, Any]]
    extract_text: Callable[[dict], str]


def _bearer_headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}


def _chat_body(prompt: str, model: str, max_tokens: int) -> dict[str, Any]:
    return {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": DEFAULT_TEMPERATURE,
        "max_tokens": max_tokens,
    }


def _chat_text(data: dict) -> str:
    return data["choices"][0]["message"]["content"]


PROVIDERS: dict[str, ProviderConfig] = {
    "openai": ProviderConfig(
        endpoint="https://api.openai.com/v1/chat/completions",
        default_model="gpt-4o",
        headers=_bearer_headers,
        build_body=_chat_body,
        extract_text=_chat_text,
    ),
    "groq": ProviderConfig(
        endpoint="https://api.groq.com/openai/v1/chat/completions",
        default_model="llama-3.3-70b-versatile",
        headers=_bearer_headers,
        build_body=_chat_body,
        extract_text=_chat_text,
    ),
    "anthropic": ProviderConfig(
        endpoint="https://api.anthropic.com/v1/messages",
        default_model="claude-3-7-sonnet-latest",
        headers=lambda api_key: {
            "x-api-key": api_key,
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json",
        },
        build_body=lambda prompt, model, max_tokens: {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
        },
        extract_text=lambda data: data["content"][0]["text"],
    ),
    "gemini": ProviderConfig(
        endpoint="https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
        default_model="gemini-2.0-flash",
        headers=lambda api_key: {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        },
        build_body=lambda prompt, model, max_tokens: {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": max_tokens, "temperature": 0},
        },
        extract_text=lambda data: data["candidates"][0]["content"]["parts"][0]["text"],
    ),
}


class HTTPLLMClient:
    """Calls a provider's HTTP API with a bounded timeout."""

    def __init__(
        self,
        provider: str,
        api_key: str,
        model: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            provider: One of the PROVIDERS names
            api_key: Provider API key
            model: Model override, defaults to the provider's default model
            timeout: Request timeout in seconds
            transport: Optional httpx transport
        """
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider: {provider}")

        self.provider = provider
        self.config = PROVIDERS[provider]
        self.model = model or self.config.default_model
        self.timeout = timeout
        self._api_key = api_key
        self._transport = transport

    async def generate(self, prompt: str, max_tokens: int = 500) -> str:
        """Send a prompt and return the model's text.

        Raises:
            LLMProviderError: On HTTP errors, timeouts or unexpected responses
        """
        url = self.config.endpoint.format(model=self.model)
        body = self.config.build_body(prompt, self.model, max_tokens)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, headers=self.config.headers(self._api_key), json=body)
                response.raise_for_status()
                data = response.json()

        except httpx.TimeoutException as e:
            raise LLMProviderError(
                f"{self.provider} API request timed out after {self.timeout:g}s"
            ) from e
        except httpx.HTTPStatusError as e:
            raise LLMProviderError(
                f"{self.provider} API error: {e.response.status_code} {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise LLMProviderError(f"{self.provider} API request failed: {e}") from e
        except ValueError as e:
            raise LLMProviderError(f"{self.provider} API returned invalid JSON") from e

        try:
            text = self.config.extract_text(data)
        except (KeyError, IndexError, TypeError) as e:
            raise LLMProviderError(f"Unexpected {self.provider} API response format") from e

        if not isinstance(text, str) or not text.strip():
            raise LLMProviderError(f"{self.provider} API returned no text")
        return text.strip()


def create_llm_client(settings: Settings) -> HTTPLLMClient | None:
    """Build the configured client, or None when no API key is set."""
    selection = settings.select_provider()
    if not selection.api_key:
        logger.debug("No API key configured for %s", selection.name)
        return None

    return HTTPLLMClient(
        provider=selection.name,
        api_key=selection.api_key,
        model=selection.model or None,
        timeout=settings.DEPGUARD_LLM_TIMEOUT,
    )

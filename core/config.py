"""Runtime configuration loaded from the environment."""

import logging
from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "groq", "anthropic", "gemini")
DEFAULT_PROVIDER = "openai"


@dataclass(frozen=True)
class ProviderSelection:
    """The provider, key and model the advisory step should use."""

    name: str
    api_key: str
    model: str


class Settings(BaseSettings):
    """DepGuard settings read from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"), env_file_encoding="utf-8", extra="ignore"
    )

    # --- LLM ---
    DEPGUARD_LLM_PROVIDER: str = DEFAULT_PROVIDER
    DEPGUARD_LLM_API_KEY: str | None = None
    DEPGUARD_LLM_MODEL: str | None = None
    DEPGUARD_LLM_TIMEOUT: float = 10.0

    OPENAI_API_KEY: str | None = None
    GROQ_API_KEY: str | None = None
    ANTHROPIC_API_KEY: str | None = None
    GEMINI_API_KEY: str | None = None

    OPENAI_DEPGUARD_MODEL: str | None = None
    GROQ_DEPGUARD_MODEL: str | None = None
    ANTHROPIC_DEPGUARD_MODEL: str | None = None
    GEMINI_DEPGUARD_MODEL: str | None = None

    # --- Package manager commands ---
    DEPGUARD_COMMAND_TIMEOUT: float = 120.0

    @property
    def provider_name(self) -> str:
        name = self.DEPGUARD_LLM_PROVIDER.strip().lower()
        if name not in SUPPORTED_PROVIDERS:
            logger.warning("Unknown provider: %s, falling back to %s", name, DEFAULT_PROVIDER)
            return DEFAULT_PROVIDER
        return name

    @property
    def generic_api_key(self) -> str:
        """DEPGUARD_LLM_API_KEY, ignored when it only names a provider."""
        key = (self.DEPGUARD_LLM_API_KEY or "").strip()
        if key.lower() in SUPPORTED_PROVIDERS:
            logger.warning(
                "DEPGUARD_LLM_API_KEY contains a provider name (%s) rather than an API key, ignoring it",
                key,
            )
            return ""
        return key

    def select_provider(self) -> ProviderSelection:
        """Resolve the provider with its key and model.

        Provider-specific variables win over the generic DEPGUARD_LLM_* ones.
        An empty model means the provider default.
        """
        name = self.provider_name
        prefix = name.upper()
        api_key = getattr(self, f"{prefix}_API_KEY") or self.generic_api_key
        model = getattr(self, f"{prefix}_DEPGUARD_MODEL") or self.DEPGUARD_LLM_MODEL or ""
        return ProviderSelection(name=name, api_key=api_key, model=model)

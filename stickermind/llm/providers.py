"""Provider registry: base URLs, key variables and default models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderInfo:
    """Metadata for an LLM provider."""

    name: str
    api_base: str | None  # None = use litellm default
    env_key: str  # environment variable for the API key
    default_model: str


# --- Direct providers ---

_GOOGLE = ProviderInfo(
    name="google",
    api_base=None,
    env_key="GEMINI_API_KEY",
    default_model="gemini/gemini-2.0-flash",
)

_OPENAI = ProviderInfo(
    name="openai",
    api_base=None,
    env_key="OPENAI_API_KEY",
    default_model="openai/gpt-4o-mini",
)

_ANTHROPIC = ProviderInfo(
    name="anthropic",
    api_base=None,
    env_key="ANTHROPIC_API_KEY",
    default_model="anthropic/claude-sonnet-4-5-20250929",
)

_DEEPSEEK = ProviderInfo(
    name="deepseek",
    api_base="https://api.deepseek.com/v1",
    env_key="DEEPSEEK_API_KEY",
    default_model="openai/deepseek-chat",
)

# --- Relay / proxy providers ---

_OPENROUTER = ProviderInfo(
    name="openrouter",
    api_base="https://openrouter.ai/api/v1",
    env_key="OPENROUTER_API_KEY",
    default_model="openai/google/gemini-2.0-flash-001",
)

DEFAULT_PROVIDER = _GOOGLE

PROVIDERS: dict[str, ProviderInfo] = {
    p.name: p for p in [_GOOGLE, _OPENAI, _ANTHROPIC, _DEEPSEEK, _OPENROUTER]
}


def get_provider(name: str) -> ProviderInfo | None:
    """Look up a provider by name (case-insensitive)."""
    return PROVIDERS.get(name.lower())


def list_providers() -> list[str]:
    return list(PROVIDERS.keys())


def provider_for_model(model: str) -> ProviderInfo | None:
    """Guess the provider from a litellm model string such as ``gemini/...``."""
    prefix = model.split("/", 1)[0].lower()
    if prefix == "gemini":
        return _GOOGLE
    return PROVIDERS.get(prefix)

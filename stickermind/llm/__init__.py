"""LLM configuration and provider presets."""

from stickermind.llm.config import LLMConfig
from stickermind.llm.providers import PROVIDERS, ProviderInfo, get_provider, list_providers

__all__ = [
    "LLMConfig",
    "PROVIDERS",
    "ProviderInfo",
    "get_provider",
    "list_providers",
]

"""LLM connection settings for the generation service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from stickermind.credentials import get_stored_api_key
from stickermind.llm.providers import DEFAULT_PROVIDER, get_provider, provider_for_model


@dataclass(frozen=True)
class LLMConfig:
    """LLM connection settings."""

    model: str = DEFAULT_PROVIDER.default_model
    api_base: str | None = None
    api_key: str | None = None
    provider: str | None = None

    @classmethod
    def from_env(cls, data_dir: Path | None = None) -> LLMConfig:
        """Build config from STICKERMIND_* environment variables.

        The API key falls back to the provider's own variable (e.g.
        ``GEMINI_API_KEY``) and then to the locally stored key.
        """
        provider_name = os.getenv("STICKERMIND_PROVIDER")
        provider = get_provider(provider_name) if provider_name else None

        model = os.getenv("STICKERMIND_MODEL")
        api_base = os.getenv("STICKERMIND_API_BASE")
        api_key = os.getenv("STICKERMIND_API_KEY")

        if provider and not model:
            model = provider.default_model
        if provider and not api_base:
            api_base = provider.api_base
        model = model or DEFAULT_PROVIDER.default_model

        if not api_key:
            inferred = provider or provider_for_model(model)
            if inferred:
                api_key = os.getenv(inferred.env_key)
        if not api_key:
            api_key = get_stored_api_key(data_dir)

        return cls(
            model=model,
            api_base=api_base,
            api_key=api_key,
            provider=provider_name,
        )

    @property
    def env_key(self) -> str:
        """Environment variable a user should set to supply the key."""
        provider = (get_provider(self.provider) if self.provider else None) or provider_for_model(
            self.model
        )
        return provider.env_key if provider else "STICKERMIND_API_KEY"

    def to_litellm_kwargs(self) -> dict[str, str]:
        """Return kwargs suitable for litellm.acompletion()."""
        kwargs: dict[str, str] = {"model": self.model}
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if self.api_key:
            kwargs["api_key"] = self.api_key
        return kwargs

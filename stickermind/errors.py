"""Exception types for stickermind."""

from __future__ import annotations


class StickerMindError(Exception):
    """Base class for errors surfaced to the user."""


class InvalidParamsError(StickerMindError):
    """Generation parameters failed a precondition; nothing was sent."""


class GenerationError(StickerMindError):
    """The generation service failed or returned unusable data."""


class MissingCredentialError(GenerationError):
    """No API key is configured for the generation service."""

    def __init__(self, env_key: str | None = None) -> None:
        hint = f" (set {env_key} or run `stickermind config set-key`)" if env_key else ""
        super().__init__(f"No API key configured for generation{hint}")
        self.env_key = env_key

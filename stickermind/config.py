"""Configuration for stickermind."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from stickermind.credentials import resolve_data_dir
from stickermind.llm import LLMConfig


@dataclass(frozen=True)
class Config:
    """Runtime configuration, populated from environment variables."""

    llm: LLMConfig = LLMConfig()
    data_dir: Path = field(default_factory=resolve_data_dir)
    relay_url: str | None = None
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> Config:
        data_dir = resolve_data_dir()
        cors = os.environ.get("CORS_ORIGIN", "").strip()
        return cls(
            llm=LLMConfig.from_env(data_dir),
            data_dir=data_dir,
            relay_url=os.environ.get("STICKERMIND_RELAY_URL") or None,
            host=os.environ.get("HOST", cls.host),
            port=int(os.environ.get("PORT", cls.port)),
            cors_origins=[o.strip() for o in cors.split(",") if o.strip()] or ["*"],
        )

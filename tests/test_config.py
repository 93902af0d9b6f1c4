"""Tests for LLM config resolution and the stored credential."""

from __future__ import annotations

from pathlib import Path

import pytest

from stickermind.config import Config
from stickermind.credentials import (
    clear_stored_api_key,
    get_stored_api_key,
    mask_key,
    resolve_data_dir,
    set_stored_api_key,
)
from stickermind.llm import LLMConfig, get_provider
from stickermind.storage import DEFAULT_DATA_DIR


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all stickermind/provider env vars so tests are isolated."""
    for key in (
        "STICKERMIND_DATA_DIR",
        "STICKERMIND_PROVIDER",
        "STICKERMIND_MODEL",
        "STICKERMIND_API_BASE",
        "STICKERMIND_API_KEY",
        "STICKERMIND_RELAY_URL",
        "GEMINI_API_KEY",
        "OPENAI_API_KEY",
        "DEEPSEEK_API_KEY",
        "PORT",
        "HOST",
        "CORS_ORIGIN",
    ):
        monkeypatch.delenv(key, raising=False)


class TestDataDir:
    def test_default(self) -> None:
        assert resolve_data_dir() == DEFAULT_DATA_DIR

    def test_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("STICKERMIND_DATA_DIR", str(tmp_path))
        assert resolve_data_dir() == tmp_path.resolve()

    def test_whitespace_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STICKERMIND_DATA_DIR", "   ")
        assert resolve_data_dir() == DEFAULT_DATA_DIR


class TestStoredKey:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert get_stored_api_key(tmp_path) is None

    def test_set_trims(self, tmp_path: Path) -> None:
        set_stored_api_key("  abc  ", tmp_path)
        assert get_stored_api_key(tmp_path) == "abc"

    def test_clear(self, tmp_path: Path) -> None:
        set_stored_api_key("abc", tmp_path)
        clear_stored_api_key(tmp_path)
        assert get_stored_api_key(tmp_path) is None

    def test_corrupted_file(self, tmp_path: Path) -> None:
        (tmp_path / "settings.json").write_text("{oops", encoding="utf-8")
        assert get_stored_api_key(tmp_path) is None

    def test_mask(self) -> None:
        assert mask_key("abcdefgh") == "****efgh"
        assert mask_key("abc") == "***"


class TestLLMConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        cfg = LLMConfig.from_env(tmp_path)
        assert cfg.model == "gemini/gemini-2.0-flash"
        assert cfg.api_key is None
        assert cfg.env_key == "GEMINI_API_KEY"

    def test_provider_env_key(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        assert LLMConfig.from_env(tmp_path).api_key == "g-key"

    def test_explicit_key_wins(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        monkeypatch.setenv("STICKERMIND_API_KEY", "s-key")
        set_stored_api_key("stored", tmp_path)
        assert LLMConfig.from_env(tmp_path).api_key == "s-key"

    def test_stored_key_fallback(self, tmp_path: Path) -> None:
        set_stored_api_key("stored", tmp_path)
        assert LLMConfig.from_env(tmp_path).api_key == "stored"

    def test_provider_preset(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("STICKERMIND_PROVIDER", "deepseek")
        monkeypatch.setenv("DEEPSEEK_API_KEY", "d-key")
        cfg = LLMConfig.from_env(tmp_path)
        assert cfg.model == "openai/deepseek-chat"
        assert cfg.api_base == "https://api.deepseek.com/v1"
        assert cfg.api_key == "d-key"
        assert cfg.env_key == "DEEPSEEK_API_KEY"

    def test_litellm_kwargs(self) -> None:
        cfg = LLMConfig(model="openai/gpt-4o-mini", api_key="k")
        assert cfg.to_litellm_kwargs() == {"model": "openai/gpt-4o-mini", "api_key": "k"}

    def test_provider_lookup_case_insensitive(self) -> None:
        provider = get_provider("Google")
        assert provider is not None
        assert provider.env_key == "GEMINI_API_KEY"


class TestConfig:
    def test_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("STICKERMIND_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("STICKERMIND_RELAY_URL", "http://relay:3001")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("CORS_ORIGIN", "http://a.test, http://b.test")
        cfg = Config.from_env()
        assert cfg.data_dir == tmp_path.resolve()
        assert cfg.relay_url == "http://relay:3001"
        assert cfg.port == 8080
        assert cfg.cors_origins == ["http://a.test", "http://b.test"]

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("STICKERMIND_DATA_DIR", str(tmp_path))
        cfg = Config.from_env()
        assert cfg.relay_url is None
        assert cfg.port == 3001
        assert cfg.cors_origins == ["*"]

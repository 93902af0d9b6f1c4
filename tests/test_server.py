"""Tests for the FastAPI generation relay."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from stickermind.config import Config
from stickermind.llm import LLMConfig
from stickermind.server import create_app

_STICKERS = [
    {"role": "貓", "scenario": "趴著", "emotion": "累", "catchphrase": "想回家", "cultureTag": "職場"},
]
_THEMES = [
    {"title": "社畜貓", "description": "d", "sellingPoint": "s", "examplePhrases": ["a", "b", "c"]},
]


def _llm_returning(payload: object) -> AsyncMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = json.dumps(payload, ensure_ascii=False)
    return AsyncMock(return_value=response)


@pytest.fixture
def client() -> TestClient:
    config = Config(llm=LLMConfig(api_key="test-key"))
    return TestClient(create_app(config))


@pytest.fixture
def keyless_client() -> TestClient:
    return TestClient(create_app(Config(llm=LLMConfig(api_key=None))))


class TestHealth:
    def test_ok(self, client: TestClient) -> None:
        data = client.get("/health").json()
        assert data["status"] == "ok"
        assert data["hasApiKey"] is True


class TestGenerateStickers:
    def test_success(self, client: TestClient) -> None:
        mock = _llm_returning(_STICKERS)
        with patch("stickermind.generator.litellm.acompletion", mock):
            resp = client.post(
                "/api/generate-stickers",
                json={"roleType": "貓", "targetAudience": "學生", "style": "像素風格", "count": 8},
            )
        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 1
        assert body[0]["name"] == "貓 累 - 想回家"
        assert body[0]["targetAudience"] == "學生"
        assert body[0]["isFavorite"] is False
        assert body[0]["status"] == "new"

    def test_missing_role_is_400(self, client: TestClient) -> None:
        mock = AsyncMock()
        with patch("stickermind.generator.litellm.acompletion", mock):
            resp = client.post("/api/generate-stickers", json={"targetAudience": "學生"})
        assert resp.status_code == 400
        assert "roleType" in resp.json()["error"]
        mock.assert_not_called()

    def test_non_json_body_is_400(self, client: TestClient) -> None:
        resp = client.post(
            "/api/generate-stickers",
            content=b"nope",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_array_body_is_400(self, client: TestClient) -> None:
        resp = client.post("/api/generate-stickers", json=[1, 2])
        assert resp.status_code == 400

    def test_llm_failure_is_500(self, client: TestClient) -> None:
        mock = AsyncMock(side_effect=RuntimeError("upstream exploded"))
        with patch("stickermind.generator.litellm.acompletion", mock):
            resp = client.post("/api/generate-stickers", json={"roleType": "貓"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "upstream exploded"}

    def test_missing_key_is_500(self, keyless_client: TestClient) -> None:
        resp = keyless_client.post("/api/generate-stickers", json={"roleType": "貓"})
        assert resp.status_code == 500
        assert "API key" in resp.json()["error"]


class TestGenerateThemes:
    def test_success_with_default_count(self, client: TestClient) -> None:
        mock = _llm_returning(_THEMES)
        with patch("stickermind.generator.litellm.acompletion", mock):
            resp = client.post("/api/generate-themes", json={"roleType": "貓"})
        assert resp.status_code == 200
        assert resp.json()[0]["examplePhrases"] == ["a", "b", "c"]
        prompt = mock.await_args.kwargs["messages"][1]["content"]
        assert "發想 4 個" in prompt

    def test_null_theme_count_uses_default(self, client: TestClient) -> None:
        mock = _llm_returning(_THEMES)
        with patch("stickermind.generator.litellm.acompletion", mock):
            resp = client.post("/api/generate-themes", json={"roleType": "貓", "themeCount": None})
        assert resp.status_code == 200
        assert "發想 4 個" in mock.await_args.kwargs["messages"][1]["content"]

    def test_malformed_llm_output_is_500(self, client: TestClient) -> None:
        mock = _llm_returning({"title": "not an array"})
        with patch("stickermind.generator.litellm.acompletion", mock):
            resp = client.post("/api/generate-themes", json={"roleType": "貓", "themeCount": 2})
        assert resp.status_code == 500
        assert "malformed" in resp.json()["error"]

"""Tests for the relay HTTP client."""

from __future__ import annotations

import json

import httpx
import pytest

from stickermind.client import RelayClient
from stickermind.errors import GenerationError
from stickermind.models import GenerationParams, StickerIdea

_PARAMS = GenerationParams(role_type="貓", count=8)

_IDEA = StickerIdea(
    id="abc",
    name="貓 累 - 想回家",
    role="貓",
    scenario="趴著",
    emotion="累",
    catchphrase="想回家",
    culture_tag="職場",
    target_audience="上班族 (社畜)",
)


def _client(handler: object) -> RelayClient:
    return RelayClient("http://relay.test/", transport=httpx.MockTransport(handler))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_posts_camel_case_params() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[_IDEA.to_json_dict()])

    ideas = await _client(handler).generate_sticker_ideas(_PARAMS)

    assert seen["path"] == "/api/generate-stickers"
    assert seen["body"]["roleType"] == "貓"  # type: ignore[index]
    assert seen["body"]["count"] == 8  # type: ignore[index]
    assert ideas == [_IDEA]


@pytest.mark.asyncio
async def test_error_body_message_is_surfaced() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "quota exhausted"})

    with pytest.raises(GenerationError, match="quota exhausted"):
        await _client(handler).generate_sticker_themes(_PARAMS)


@pytest.mark.asyncio
async def test_error_without_body_uses_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    with pytest.raises(GenerationError, match="Bad Gateway"):
        await _client(handler).generate_sticker_ideas(_PARAMS)


@pytest.mark.asyncio
async def test_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenerationError, match="Relay request failed"):
        await _client(handler).generate_sticker_ideas(_PARAMS)


@pytest.mark.asyncio
async def test_malformed_records_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"id": "x"}])

    with pytest.raises(GenerationError, match="malformed"):
        await _client(handler).generate_sticker_ideas(_PARAMS)

"""HTTP client for a stickermind relay (``stickermind serve``).

Lets a machine without the API key generate through a relay that holds it.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from stickermind.errors import GenerationError
from stickermind.models import GenerationParams, StickerIdea, ThemeIdea

_DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}

_IDEAS = TypeAdapter(list[StickerIdea])
_THEMES = TypeAdapter(list[ThemeIdea])


class RelayClient:
    """POSTs GenerationParams to the relay and validates the returned records."""

    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def _post_json(self, path: str, body: dict[str, Any]) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=_DEFAULT_HEADERS,
                transport=self._transport,
                timeout=None,
            ) as client:
                resp = await client.post(path, json=body)
        except httpx.HTTPError as e:
            raise GenerationError(f"Relay request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            if not isinstance(message, str) or not message:
                message = resp.reason_phrase or f"Request failed ({resp.status_code})"
            raise GenerationError(message)
        return data

    async def generate_sticker_ideas(self, params: GenerationParams) -> list[StickerIdea]:
        data = await self._post_json("/api/generate-stickers", params.to_json_dict())
        try:
            return _IDEAS.validate_python(data)
        except ValidationError as e:
            raise GenerationError(f"Relay returned malformed sticker ideas: {e}") from e

    async def generate_sticker_themes(self, params: GenerationParams) -> list[ThemeIdea]:
        data = await self._post_json("/api/generate-themes", params.to_json_dict())
        try:
            return _THEMES.validate_python(data)
        except ValidationError as e:
            raise GenerationError(f"Relay returned malformed themes: {e}") from e

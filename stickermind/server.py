"""
Generation Relay
================
FastAPI app that keeps the generation API key on the server and exposes
the generation proxy over HTTP.

Run with:
    stickermind serve
or
    uvicorn stickermind.server:create_app --factory
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from stickermind import __version__
from stickermind.config import Config
from stickermind.errors import GenerationError, InvalidParamsError
from stickermind.generator import generate_sticker_ideas, generate_sticker_themes, validate_params
from stickermind.models import GenerationParams

logger = logging.getLogger(__name__)


async def _read_params(request: Request) -> GenerationParams:
    """Parse the JSON body; anything unusable is an InvalidParamsError."""
    try:
        body: Any = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidParamsError("Missing or invalid body; roleType is required.") from e
    if not isinstance(body, dict):
        raise InvalidParamsError("Missing or invalid body; roleType is required.")
    try:
        params = GenerationParams.model_validate(body)
    except ValidationError as e:
        raise InvalidParamsError(f"Invalid body: {e.errors()[0]['msg']}") from e
    validate_params(params)
    return params


def create_app(config: Config | None = None) -> FastAPI:
    """Build the relay app. The LLM settings are fixed at creation time."""
    if config is None:
        config = Config.from_env()

    app = FastAPI(
        title="StickerMind Relay",
        description="Generation proxy for sticker ideas and pack themes",
        version=__version__,
    )
    app.state.llm = config.llm

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidParamsError)
    async def _invalid_params(request: Request, exc: InvalidParamsError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(GenerationError)
    async def _generation_failed(request: Request, exc: GenerationError) -> JSONResponse:
        logger.error("Generation failed for %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        return {"status": "ok", "version": __version__, "hasApiKey": bool(app.state.llm.api_key)}

    @app.post("/api/generate-stickers")
    async def generate_stickers(request: Request) -> JSONResponse:
        params = await _read_params(request)
        ideas = await generate_sticker_ideas(params, llm=app.state.llm)
        return JSONResponse([i.to_json_dict() for i in ideas])

    @app.post("/api/generate-themes")
    async def generate_themes(request: Request) -> JSONResponse:
        params = await _read_params(request)
        themes = await generate_sticker_themes(params, llm=app.state.llm)
        return JSONResponse([t.to_json_dict() for t in themes])

    if not config.llm.api_key:
        logger.warning(
            "No API key configured (%s); /api/generate-* will return 500.", config.llm.env_key
        )
    return app

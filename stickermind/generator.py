"""Generation proxy: turns GenerationParams into sticker/theme records via an LLM."""

from __future__ import annotations

import logging
import re
from typing import Any

import litellm
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from stickermind.errors import GenerationError, InvalidParamsError, MissingCredentialError
from stickermind.llm import LLMConfig
from stickermind.models import GenerationParams, StickerIdea, ThemeIdea, build_name

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

STICKER_JSON_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "role": {"type": "string", "description": "The character role."},
            "scenario": {
                "type": "string",
                "description": "Detailed visual description of the character's ACTION or POSE.",
            },
            "emotion": {"type": "string", "description": "The primary emotion."},
            "catchphrase": {"type": "string", "description": "Short, punchy phrase (2-6 chars)."},
            "cultureTag": {"type": "string", "description": "Category tag."},
        },
        "required": ["role", "scenario", "emotion", "catchphrase", "cultureTag"],
    },
}

THEME_JSON_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": "Creative Title for the Sticker Pack."},
            "description": {"type": "string", "description": "Concept description."},
            "sellingPoint": {
                "type": "string",
                "description": "Why this target audience would buy it.",
            },
            "examplePhrases": {
                "type": "array",
                "items": {"type": "string"},
                "description": "3 example catchphrases.",
            },
        },
        "required": ["title", "description", "sellingPoint", "examplePhrases"],
    },
}


class _StickerDraft(BaseModel):
    model_config = ConfigDict(strict=True)

    role: str
    scenario: str
    emotion: str
    catchphrase: str
    culture_tag: str = Field(alias="cultureTag")


class _ThemeDraft(BaseModel):
    model_config = ConfigDict(strict=True)

    title: str
    description: str
    selling_point: str = Field(alias="sellingPoint")
    example_phrases: list[str] = Field(alias="examplePhrases")


_STICKER_DRAFTS = TypeAdapter(list[_StickerDraft])
_THEME_DRAFTS = TypeAdapter(list[_ThemeDraft])

DEFAULT_THEME_COUNT = 4

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_CODE_FENCE_RE = re.compile(
    r"^\s*```(?:json)?\s*\n(.*?)\n\s*```\s*$",
    re.DOTALL,
)


def _strip_code_fences(content: str) -> str:
    """Remove wrapping ```json fences if the LLM added them."""
    match = _CODE_FENCE_RE.match(content.strip())
    if match:
        return match.group(1).strip()
    return content.strip()


def validate_params(params: GenerationParams) -> None:
    """Reject requests that must never reach the generation service."""
    if not params.role_type.strip():
        raise InvalidParamsError("請選擇或輸入角色類型 (roleType is required)")


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

_STICKER_SYSTEM = "You are a professional LINE Sticker Planner."

_THEME_SYSTEM = "You are a creative director for LINE Creators Market Taiwan."


def build_sticker_prompt(params: GenerationParams) -> str:
    count = params.count
    theme = params.theme or "無特定主題 (請以該角色的日常生活為主)"
    return f"""\
你是一位資深的 LINE 貼圖企劃師。
使用者的需求是：**規劃一套完整的 LINE 貼圖 (共 {count} 張)**。

請針對以下設定，設計出一份**連貫、實用且具有角色特色**的貼圖列表。

**企劃設定：**
- 角色設定: {params.role_type}
- 貼圖風格: {params.style}
- 特定主題: {theme}
- 目標客群: {params.target_audience}

**規劃原則 (Sticker Pack Logic)：**
請將 {count} 張貼圖分配為以下類別，確保使用者購買後能應付各種聊天情境：
1. **基本問候 (約 10%)**：早安、晚安、Hi、Bye。
2. **對話回應 (約 20%)**：OK、好的、收到、謝謝、對不起、沒問題、+1。
3. **情緒表達 (約 30%)**：開心、大笑、生氣、崩潰、哭泣、驚訝、無言(點點點)。
4. **工作/生活實用 (約 20%)**：在忙、加班中、吃飯了嗎、要遲到了、累。
5. **角色特色/時事梗 (約 20%)**：符合 "{params.role_type}" 個性的專屬動作或台灣流行語。

**欄位要求 (Output Requirements)：**
1. **catchphrase (台詞)**：極短，2~6 字為佳；口語化，台灣人日常用語。
2. **scenario (畫面動作)**：描述**具體的視覺畫面**或**角色動作**，讓畫師可以直接看文字畫圖。
   - 正確範例：「趴在地上流淚」、「雙手比讚」、「拿著珍珠奶茶吸一口」。
   - 錯誤範例：「悲傷的感覺」、「工作的樣子」(太抽象)。

**Output Language**: 繁體中文 (Traditional Chinese, Taiwan).

請回傳一個包含 {count} 個物件的 JSON Array，每個物件包含 role、scenario、emotion、catchphrase、cultureTag。
"""


def build_theme_prompt(params: GenerationParams) -> str:
    count = params.theme_count or DEFAULT_THEME_COUNT
    return f"""\
你是一位暢銷 LINE 貼圖的創意總監。
使用者還沒有具體的貼圖內容想法，請根據他的「角色」與「目標客群」，
**發想 {count} 個不同切入點的「貼圖包主題 (Theme Concept)」**。

**輸入條件：**
- 角色設定: {params.role_type}
- 目標客群: {params.target_audience}
- 繪畫風格: {params.style}

**思考方向 (Brainstorming Angles)：**
請提供 {count} 個截然不同的主題方向，例如：
1. **極度實用型** (針對該客群最常用的情境)
2. **反差萌/性格型** (突出角色的特殊個性)
3. **特殊情境型** (例如：職場生存、戀愛攻防、節日限定)
4. **流行梗/迷因型** (結合台灣最新網路用語)
5. 如果需要更多，請混合以上風格或發想全新的創意情境。

**Output Requirements:**
- title: 吸引人的貼圖標題 (e.g., "社畜貓的崩潰週一")
- description: 簡單說明這個主題的內容與風格。
- sellingPoint: 為什麼這個主題會賣？(Target Audience Insight)
- examplePhrases: 3 句這個主題會出現的代表性台詞。

**Output Language**: 繁體中文 (Traditional Chinese, Taiwan).

請回傳一個 JSON Array。
"""


# ---------------------------------------------------------------------------
# LLM call helper
# ---------------------------------------------------------------------------


async def _llm_call(
    system: str,
    user: str,
    schema_name: str,
    schema: dict[str, Any],
    llm: LLMConfig,
    *,
    max_tokens: int,
) -> str:
    """Send a JSON-mode chat completion request and return the stripped content.

    No retries and no timeout: a failure surfaces on the first attempt.
    """
    if not llm.api_key:
        raise MissingCredentialError(llm.env_key)

    kwargs: dict[str, Any] = dict(llm.to_litellm_kwargs())
    kwargs.update({
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        "response_format": {
            "type": "json_schema",
            "json_schema": {"name": schema_name, "schema": schema},
        },
        "temperature": 1.0,
        "max_tokens": max_tokens,
        "num_retries": 0,
    })
    try:
        response = await litellm.acompletion(**kwargs)
    except Exception as e:
        logger.error("Generation request failed: %s", e)
        raise GenerationError(str(e) or type(e).__name__) from e

    if not response.choices:
        raise GenerationError("LLM returned empty choices list")
    content = response.choices[0].message.content
    if content is None:
        raise GenerationError("LLM returned None content (possibly content-filtered)")
    return _strip_code_fences(content)


def _parse(adapter: TypeAdapter[Any], content: str, what: str) -> Any:
    try:
        return adapter.validate_json(content)
    except ValidationError as e:
        logger.error("Malformed %s response: %s", what, e)
        raise GenerationError(f"Generation service returned malformed {what}: {e}") from e


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def generate_sticker_ideas(
    params: GenerationParams,
    *,
    llm: LLMConfig | None = None,
) -> list[StickerIdea]:
    """Ask the LLM for a sticker plan and map it to fresh ``StickerIdea`` records.

    The requested count is a hint to the model; whatever array length comes
    back (including zero) is accepted. Without *llm*, settings come from
    the environment and the stored key.
    """
    if llm is None:
        llm = LLMConfig.from_env()

    content = await _llm_call(
        _STICKER_SYSTEM,
        build_sticker_prompt(params),
        "sticker_ideas",
        STICKER_JSON_SCHEMA,
        llm,
        max_tokens=8192,
    )
    drafts: list[_StickerDraft] = _parse(_STICKER_DRAFTS, content, "sticker ideas")
    return [
        StickerIdea(
            name=build_name(d.role, d.emotion, d.catchphrase),
            role=d.role,
            scenario=d.scenario,
            emotion=d.emotion,
            catchphrase=d.catchphrase,
            culture_tag=d.culture_tag,
            target_audience=params.target_audience,
        )
        for d in drafts
    ]


async def generate_sticker_themes(
    params: GenerationParams,
    *,
    llm: LLMConfig | None = None,
) -> list[ThemeIdea]:
    """Brainstorm pack-level theme concepts."""
    if llm is None:
        llm = LLMConfig.from_env()

    content = await _llm_call(
        _THEME_SYSTEM,
        build_theme_prompt(params),
        "sticker_themes",
        THEME_JSON_SCHEMA,
        llm,
        max_tokens=4096,
    )
    drafts: list[_ThemeDraft] = _parse(_THEME_DRAFTS, content, "themes")
    return [
        ThemeIdea(
            title=d.title,
            description=d.description,
            selling_point=d.selling_point,
            example_phrases=d.example_phrases,
        )
        for d in drafts
    ]

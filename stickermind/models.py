"""Core data models for stickermind."""

from __future__ import annotations

import time
import uuid
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

Status = Literal["new", "drafting", "completed"]
StatusFilter = Literal["all", "new", "completed", "favorite"]

STATUSES: tuple[str, ...] = ("new", "drafting", "completed")
STATUS_FILTERS: tuple[str, ...] = ("all", "new", "completed", "favorite")

# Preset choices offered by the generator form.
TARGET_AUDIENCES: list[str] = [
    "上班族 (社畜)",
    "情侶 (放閃/吵架)",
    "學生 (校園生活)",
    "長輩 (早安圖風格)",
    "貓奴/狗奴",
    "通用大眾",
]

ROLE_TYPES: list[str] = [
    "可愛動物 (貓/狗/兔)",
    "搞怪生物 (不明物體)",
    "職場人物 (老闆/同事)",
    "純文字 (大字報)",
    "女性角色 (可愛/氣質)",
    "男性角色 (帥氣/醜怪)",
]

STYLES: list[str] = [
    "可愛療癒風",
    "醜怪白爛風",
    "手繪隨意風",
    "精緻插畫風",
    "像素風格",
    "迷因梗圖風",
]


def new_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def build_name(role: str, emotion: str, catchphrase: str | None) -> str:
    """Display label for a sticker: ``role emotion - catchphrase``."""
    return f"{role} {emotion} - {catchphrase or ''}"


class _Record(BaseModel):
    """Shared config: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class StickerIdea(_Record):
    """One conceived sticker."""

    id: str = Field(default_factory=new_id)
    name: str
    role: str
    scenario: str
    emotion: str
    catchphrase: str
    culture_tag: str = Field(alias="cultureTag")
    target_audience: str = Field(alias="targetAudience")
    status: Status = "new"
    is_favorite: bool = Field(default=False, alias="isFavorite")
    created_at: int = Field(default_factory=now_ms, alias="createdAt")


class ThemeIdea(_Record):
    """A brainstormed concept for a whole sticker pack."""

    id: str = Field(default_factory=new_id)
    title: str
    description: str
    selling_point: str = Field(alias="sellingPoint")
    example_phrases: list[str] = Field(default_factory=list, alias="examplePhrases")
    created_at: int = Field(default_factory=now_ms, alias="createdAt")


class GenerationParams(_Record, frozen=True):
    """User input for a generation request. Never persisted."""

    target_audience: str = Field(default=TARGET_AUDIENCES[0], alias="targetAudience")
    role_type: str = Field(default="", alias="roleType")
    style: str = STYLES[0]
    theme: str = ""
    count: int = 16
    theme_count: int = Field(default=4, alias="themeCount")

    @field_validator("count", "theme_count", mode="before")
    @classmethod
    def null_count_is_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

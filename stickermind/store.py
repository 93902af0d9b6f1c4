"""Record store: sole owner of the sticker and theme collections."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, TypeVar

from pydantic import BaseModel, ValidationError

from stickermind.migrations import upgrade_sticker_records
from stickermind.models import Status, StickerIdea, ThemeIdea
from stickermind.storage import IDEAS_KEY, THEMES_KEY, Storage

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)


def _parse_collection(raw: str | None, key: str) -> list[dict[str, Any]]:
    """Decode a stored blob into a list of dicts, or [] if unusable."""
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse stored %s: %s", key, e)
        return []
    if not isinstance(data, list):
        logger.warning("Stored %s is not a list of records; ignoring it", key)
        return []
    rows = [item for item in data if isinstance(item, dict)]
    if len(rows) != len(data):
        logger.warning("Skipping %d non-object entries in stored %s", len(data) - len(rows), key)
    return rows


def _build_records(model: type[_M], rows: list[dict[str, Any]], key: str) -> list[_M]:
    """Validate rows one at a time; rows that fail are logged and skipped."""
    records: list[_M] = []
    for index, row in enumerate(rows):
        try:
            records.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning("Skipping invalid record %d in stored %s: %s", index, key, e)
    return records


class IdeaStore:
    """In-memory sticker/theme collections, persisted whole after each change.

    The store is handed its storage backend and never prompts; destructive
    operations take an explicit confirmation flag instead.
    """

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._ideas: list[StickerIdea] = []
        self._themes: list[ThemeIdea] = []

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def ideas(self) -> list[StickerIdea]:
        return list(self._ideas)

    @property
    def themes(self) -> list[ThemeIdea]:
        return list(self._themes)

    def get_idea(self, idea_id: str) -> StickerIdea | None:
        return next((i for i in self._ideas if i.id == idea_id), None)

    def get_theme(self, theme_id: str) -> ThemeIdea | None:
        return next((t for t in self._themes if t.id == theme_id), None)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Read both collections from storage. Never raises on bad data."""
        rows = _parse_collection(self._storage.read(IDEAS_KEY), IDEAS_KEY)
        upgraded = upgrade_sticker_records(rows)
        self._ideas = _build_records(StickerIdea, rows, IDEAS_KEY)
        if upgraded and self._ideas:
            logger.info("Upgraded stored sticker ideas")
            self._save_ideas()

        rows = _parse_collection(self._storage.read(THEMES_KEY), THEMES_KEY)
        self._themes = _build_records(ThemeIdea, rows, THEMES_KEY)

    def _save_ideas(self) -> None:
        payload = [idea.to_json_dict() for idea in self._ideas]
        self._storage.write(IDEAS_KEY, json.dumps(payload, ensure_ascii=False))

    def _save_themes(self) -> None:
        payload = [theme.to_json_dict() for theme in self._themes]
        self._storage.write(THEMES_KEY, json.dumps(payload, ensure_ascii=False))

    # ------------------------------------------------------------------
    # Sticker operations
    # ------------------------------------------------------------------

    def add_ideas(self, new_ideas: Iterable[StickerIdea]) -> list[StickerIdea]:
        """Prepend *new_ideas* (batch order kept). Returns what was added.

        Records whose id is already present are skipped.
        """
        seen = {idea.id for idea in self._ideas}
        batch: list[StickerIdea] = []
        for idea in new_ideas:
            if idea.id in seen:
                logger.debug("Skipping sticker idea with duplicate id %s", idea.id)
                continue
            seen.add(idea.id)
            batch.append(idea)
        self._ideas = batch + self._ideas
        self._save_ideas()
        return batch

    def remove_idea(self, idea_id: str) -> None:
        self._ideas = [i for i in self._ideas if i.id != idea_id]
        self._save_ideas()

    def toggle_favorite(self, idea_id: str) -> None:
        self._ideas = [
            i.model_copy(update={"is_favorite": not i.is_favorite}) if i.id == idea_id else i
            for i in self._ideas
        ]
        self._save_ideas()

    def update_status(self, idea_id: str, status: Status) -> None:
        self._ideas = [
            i.model_copy(update={"status": status}) if i.id == idea_id else i
            for i in self._ideas
        ]
        self._save_ideas()

    # ------------------------------------------------------------------
    # Theme operations
    # ------------------------------------------------------------------

    def add_theme(self, theme: ThemeIdea) -> bool:
        """Prepend *theme* unless one with the same title exists."""
        if any(t.title == theme.title for t in self._themes):
            return False
        self._themes = [theme] + self._themes
        self._save_themes()
        return True

    def remove_theme(self, theme_id: str) -> None:
        self._themes = [t for t in self._themes if t.id != theme_id]
        self._save_themes()

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------

    def clear_all(self, *, confirmed: bool) -> bool:
        """Empty both collections. Does nothing unless *confirmed*."""
        if not confirmed:
            return False
        self._ideas = []
        self._themes = []
        self._save_ideas()
        self._save_themes()
        return True

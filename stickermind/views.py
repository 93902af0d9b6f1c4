"""Derived views over store snapshots: filters and aggregate counts.

Everything here is a pure function of its arguments.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, NamedTuple, Sequence

from stickermind.models import StickerIdea, ThemeIdea


class Summary(NamedTuple):
    total: int
    completed: int
    favorite: int


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def matches_sticker_query(idea: StickerIdea, query: str) -> bool:
    needle = query.lower()
    fields = (idea.name, idea.catchphrase, idea.role, idea.scenario, idea.emotion)
    return any(needle in (value or "").lower() for value in fields)


def matches_theme_query(theme: ThemeIdea, query: str) -> bool:
    needle = query.lower()
    return needle in theme.title.lower() or needle in theme.description.lower()


def matches_status(idea: StickerIdea, status: str) -> bool:
    """``favorite`` looks at the flag only; ``drafting`` has no bucket of its own."""
    if status == "all":
        return True
    if status == "favorite":
        return idea.is_favorite
    return idea.status == status


def filter_ideas(
    ideas: Iterable[StickerIdea],
    query: str = "",
    status: str = "all",
) -> list[StickerIdea]:
    return [i for i in ideas if matches_sticker_query(i, query) and matches_status(i, status)]


def filter_themes(themes: Iterable[ThemeIdea], query: str = "") -> list[ThemeIdea]:
    return [t for t in themes if matches_theme_query(t, query)]


# ---------------------------------------------------------------------------
# Aggregations
# ---------------------------------------------------------------------------


def emotion_distribution(
    ideas: Iterable[StickerIdea], limit: int | None = 6
) -> list[tuple[str, int]]:
    """Count per emotion, most frequent first.

    Ties keep first-seen order: ``Counter`` preserves insertion order and
    ``sorted`` is stable.
    """
    counts = Counter(idea.emotion for idea in ideas)
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return ranked if limit is None else ranked[:limit]


def audience_distribution(ideas: Iterable[StickerIdea]) -> list[tuple[str, int]]:
    """Count per target audience, in first-seen order."""
    return list(Counter(idea.target_audience for idea in ideas).items())


def summarize(ideas: Sequence[StickerIdea]) -> Summary:
    return Summary(
        total=len(ideas),
        completed=sum(1 for i in ideas if i.status == "completed"),
        favorite=sum(1 for i in ideas if i.is_favorite),
    )


def recent_ideas(ideas: Sequence[StickerIdea], limit: int = 5) -> list[StickerIdea]:
    """Newest ideas; the collection is already kept newest first."""
    return list(ideas[:limit])

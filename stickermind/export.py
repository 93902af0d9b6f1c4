"""Export the current filtered view as CSV or a LINE phrase-set document."""

from __future__ import annotations

import csv
import io
import json
from datetime import date
from pathlib import Path
from typing import Any, Literal, Sequence

from stickermind.models import StickerIdea, ThemeIdea

Kind = Literal["ideas", "themes"]

BOM = "\ufeff"
PHRASE_SEPARATOR = " | "
LINE_GRID_MAX = 16

STICKER_COLUMNS = ["ID", "Name", "Role", "Emotion", "Catchphrase", "Scenario", "CultureTag", "Status"]
THEME_COLUMNS = ["ID", "Title", "Description", "SellingPoint", "ExamplePhrases"]

_FILENAME_PREFIX: dict[str, str] = {
    "ideas": "sticker_ideas",
    "themes": "sticker_themes",
}


def _sticker_row(idea: StickerIdea) -> list[str]:
    return [
        idea.id,
        idea.name,
        idea.role,
        idea.emotion,
        idea.catchphrase,
        idea.scenario,
        idea.culture_tag,
        idea.status,
    ]


def _theme_row(theme: ThemeIdea) -> list[str]:
    return [
        theme.id,
        theme.title,
        theme.description,
        theme.selling_point,
        PHRASE_SEPARATOR.join(theme.example_phrases),
    ]


def _to_csv(header: list[str], rows: list[list[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return BOM + buf.getvalue().rstrip("\n")


def ideas_to_csv(ideas: Sequence[StickerIdea]) -> str:
    """Every field quoted, embedded quotes doubled, BOM-prefixed."""
    return _to_csv(STICKER_COLUMNS, [_sticker_row(i) for i in ideas])


def themes_to_csv(themes: Sequence[ThemeIdea]) -> str:
    return _to_csv(THEME_COLUMNS, [_theme_row(t) for t in themes])


def export_filename(kind: Kind, today: date | None = None, suffix: str = "csv") -> str:
    stamp = (today or date.today()).isoformat()
    return f"{_FILENAME_PREFIX[kind]}_{stamp}.{suffix}"


def write_csv(
    records: Sequence[StickerIdea] | Sequence[ThemeIdea],
    kind: Kind,
    output_dir: str,
    today: date | None = None,
) -> Path:
    """Write *records* to ``<output_dir>/<kind>_<date>.csv``. Returns the path."""
    text = ideas_to_csv(records) if kind == "ideas" else themes_to_csv(records)  # type: ignore[arg-type]
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / export_filename(kind, today)
    path.write_text(text, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# LINE phrase set
# ---------------------------------------------------------------------------


def to_line_phrase_set(ideas: Sequence[StickerIdea]) -> dict[str, Any]:
    """Phrase-set document for LINE tooling.

    Up to 16 ideas fit a single 4x4 sheet; larger sets carry no grid.
    """
    doc: dict[str, Any] = {
        "format": "line-sticker-phrase-set",
        "version": 1,
    }
    if len(ideas) <= LINE_GRID_MAX:
        doc.update({"mode": "single", "gridCols": 4, "gridRows": 4})
    else:
        doc["mode"] = "set"
    doc["phrases"] = [i.catchphrase for i in ideas]
    doc["actionDescs"] = [i.scenario for i in ideas]
    return doc


def write_line_phrase_set(
    ideas: Sequence[StickerIdea],
    output_dir: str,
    today: date | None = None,
) -> Path:
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / export_filename("ideas", today, suffix="json")
    path.write_text(
        json.dumps(to_line_phrase_set(ideas), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return path

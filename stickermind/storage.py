"""Key-value blob storage backing the idea store.

Each key maps to one JSON document holding a whole collection. Reads
return the raw text (or ``None`` when the key was never written); parsing
is the caller's business so that corrupted blobs can be handled there.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol

IDEAS_KEY = "stickermind_ideas_v1"
THEMES_KEY = "stickermind_themes_v1"

DEFAULT_DATA_DIR = Path.home() / ".stickermind"


class Storage(Protocol):
    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage, used by tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        self.data[key] = value


class FileStorage:
    """One ``<key>.json`` file per key inside *root*."""

    def __init__(self, root: str | Path) -> None:
        self.root = expand_path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, value: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)


def expand_path(raw: str | Path) -> Path:
    """Expand ~ prefix and resolve to an absolute path."""
    text = str(raw).strip()
    if not text:
        raise ValueError("empty path")
    return Path(text).expanduser().resolve()

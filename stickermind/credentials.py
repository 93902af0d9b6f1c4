"""Locally stored generation credential.

The key lives in a small JSON settings file inside the data directory, so
it never has to be passed on the command line. Resolution order for the
directory:

  1. ``STICKERMIND_DATA_DIR``
  2. ``~/.stickermind``
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from stickermind.storage import DEFAULT_DATA_DIR, expand_path

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"
_API_KEY_FIELD = "apiKey"


def resolve_data_dir() -> Path:
    explicit = os.environ.get("STICKERMIND_DATA_DIR", "").strip()
    if explicit:
        return expand_path(explicit)
    return DEFAULT_DATA_DIR


def _settings_path(data_dir: Path | None = None) -> Path:
    return (data_dir or resolve_data_dir()) / SETTINGS_FILENAME


def _read_settings(data_dir: Path | None = None) -> dict[str, Any]:
    """Read the settings file; missing or unreadable files count as empty."""
    path = _settings_path(data_dir)
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _write_settings(settings: dict[str, Any], data_dir: Path | None = None) -> Path:
    path = _settings_path(data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings, indent=2), encoding="utf-8")
    return path


def get_stored_api_key(data_dir: Path | None = None) -> str | None:
    value = _read_settings(data_dir).get(_API_KEY_FIELD, "")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def set_stored_api_key(key: str, data_dir: Path | None = None) -> Path:
    """Store *key* (trimmed). An empty key removes the stored value."""
    settings = _read_settings(data_dir)
    trimmed = key.strip()
    if trimmed:
        settings[_API_KEY_FIELD] = trimmed
    else:
        settings.pop(_API_KEY_FIELD, None)
    return _write_settings(settings, data_dir)


def clear_stored_api_key(data_dir: Path | None = None) -> Path:
    return set_stored_api_key("", data_dir)


def mask_key(key: str) -> str:
    """Show only the last four characters."""
    if len(key) <= 4:
        return "*" * len(key)
    return f"{'*' * (len(key) - 4)}{key[-4:]}"

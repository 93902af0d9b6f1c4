"""Upgrade-on-load steps for persisted sticker records.

Stored collections carry no schema version, so each migration keys off
field presence and is one-way: once a record has been upgraded and
written back, the step leaves it alone on every later load.
"""

from __future__ import annotations

from typing import Any, Callable

from stickermind.models import build_name

Migration = Callable[[dict[str, Any]], bool]


def backfill_name(record: dict[str, Any]) -> bool:
    """Synthesize ``name`` for records written before the field existed.

    Returns True when *record* was modified in place.
    """
    if record.get("name"):
        return False
    record["name"] = build_name(
        str(record.get("role", "")),
        str(record.get("emotion", "")),
        record.get("catchphrase"),
    )
    return True


def default_catchphrase(record: dict[str, Any]) -> bool:
    """Give records with a missing or null ``catchphrase`` an empty one."""
    if isinstance(record.get("catchphrase"), str):
        return False
    record["catchphrase"] = ""
    return True


STICKER_MIGRATIONS: list[Migration] = [backfill_name, default_catchphrase]


def upgrade_sticker_records(records: list[dict[str, Any]]) -> bool:
    """Run every sticker migration over *records*. Returns True if any changed."""
    changed = False
    for record in records:
        for migration in STICKER_MIGRATIONS:
            if migration(record):
                changed = True
    return changed

"""Named setup collection: save, reorder, delete, import and export.

Setup names are matched case-insensitively everywhere: saving "Squats"
over an existing "squats" updates it in place and keeps its spot in the
list.

Export format (one object per setup, in list order)::

    [
      {
        "name": "Wall sits",
        "config": {"move_to_seconds": 5, "exercise_seconds": 30, ...},
        "sounds": {"start-rep": "chime", "complete": null, ...}
      }
    ]

Config values may also be numeric strings on import.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Mapping

import structlog
from sqlalchemy import func

from ..audio.catalog import (
    CUE_SOUND_FIELDS,
    DEFAULT_CUE_SOUNDS,
    normalize_sound_name,
)
from ..timer.config import TimerConfig
from ..timer.schedule import Cue
from .db import get_session
from .models import Setup

log = structlog.get_logger()


class SetupImportError(ValueError):
    """An import payload that isn't a usable list of setups."""


# ── queries ───────────────────────────────────────────────────────────────


def list_setups() -> list[Setup]:
    with get_session() as db:
        return db.query(Setup).order_by(Setup.position, Setup.id).all()


def find_setup(name: str) -> Setup | None:
    key = _key(name)
    if not key:
        return None
    with get_session() as db:
        return _find(db, key)


# ── mutations ─────────────────────────────────────────────────────────────


def add_or_update_setup(
    name: str,
    config: TimerConfig,
    sounds: Mapping[Cue, str | None] | None = None,
) -> Setup | None:
    """Save *config* under *name*.  A blank name is ignored."""
    name = (name or "").strip()
    if not name:
        return None
    sounds = DEFAULT_CUE_SOUNDS if sounds is None else sounds

    with get_session() as db:
        setup = _find(db, name.lower())
        created = setup is None
        if created:
            setup = Setup(position=_next_position(db))
            db.add(setup)
        setup.name = name
        _fill(setup, config, sounds)
        db.flush()

    log.info("setup_saved", name=name, created=created)
    return setup


def move_setup_up(name: str) -> bool:
    return _move(name, -1)


def move_setup_down(name: str) -> bool:
    return _move(name, +1)


def delete_setup(name: str) -> bool:
    key = _key(name)
    with get_session() as db:
        setup = _find(db, key) if key else None
        if setup is None:
            return False
        db.delete(setup)
        db.flush()
        _renumber(db.query(Setup).order_by(Setup.position, Setup.id).all())
    log.info("setup_deleted", name=name)
    return True


def clear_setups() -> int:
    with get_session() as db:
        count = db.query(Setup).delete()
    log.info("setups_cleared", count=count)
    return count


# ── import / export ───────────────────────────────────────────────────────


def export_setups_json() -> str:
    payload = [
        {
            "name": setup.name,
            "config": setup.to_config().to_dict(),
            "sounds": {cue.value: sound for cue, sound in setup.cue_sounds().items()},
        }
        for setup in list_setups()
    ]
    return json.dumps(payload, indent=2) + "\n"


def import_setups_json(text: str) -> list[Setup]:
    """Replace the whole collection with the setups in *text*.

    An empty array leaves the collection untouched.  Later entries win
    over earlier ones with the same name.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SetupImportError(f"not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise SetupImportError("expected a JSON array of setups")

    entries: dict[str, tuple[str, TimerConfig, dict[Cue, str | None]]] = {}
    for index, item in enumerate(data):
        name, config, sounds = _parse_entry(index, item)
        entries[name.lower()] = (name, config, sounds)

    if not entries:
        return []

    with get_session() as db:
        db.query(Setup).delete()
        for position, (name, config, sounds) in enumerate(entries.values()):
            setup = Setup(name=name, position=position)
            _fill(setup, config, sounds)
            db.add(setup)

    log.info("setups_imported", count=len(entries))
    return list_setups()


# ── internal ──────────────────────────────────────────────────────────────


def _key(name: str | None) -> str:
    return (name or "").strip().lower()


def _find(db, key: str) -> Setup | None:
    return db.query(Setup).filter(func.lower(Setup.name) == key).first()


def _next_position(db) -> int:
    last = db.query(func.max(Setup.position)).scalar()
    return 0 if last is None else last + 1


def _renumber(ordered: list[Setup]) -> None:
    for position, setup in enumerate(ordered):
        setup.position = position


def _move(name: str, offset: int) -> bool:
    key = _key(name)
    with get_session() as db:
        ordered = db.query(Setup).order_by(Setup.position, Setup.id).all()
        index = next(
            (i for i, s in enumerate(ordered) if s.name.lower() == key), None,
        )
        if index is None:
            return False
        target = index + offset
        if not 0 <= target < len(ordered):
            return False
        ordered[index], ordered[target] = ordered[target], ordered[index]
        _renumber(ordered)
    log.info("setup_moved", name=name, offset=offset)
    return True


def _fill(
    setup: Setup, config: TimerConfig, sounds: Mapping[Cue, str | None],
) -> None:
    for field_name, value in config.to_dict().items():
        setattr(setup, field_name, value)
    for cue, attr in CUE_SOUND_FIELDS.items():
        setattr(setup, attr, normalize_sound_name(sounds.get(cue)))
    setup.updated_at = datetime.now()


def _parse_entry(
    index: int, item: Any,
) -> tuple[str, TimerConfig, dict[Cue, str | None]]:
    if not isinstance(item, dict):
        raise SetupImportError(f"entry {index} is not an object")

    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        raise SetupImportError(f"entry {index} has no name")

    config_data = item.get("config", {})
    if not isinstance(config_data, dict):
        raise SetupImportError(f"entry {index} ({name!r}) has a bad config")

    sounds_data = item.get("sounds")
    if sounds_data is None:
        sounds = dict(DEFAULT_CUE_SOUNDS)
    elif isinstance(sounds_data, dict):
        sounds = {cue: sounds_data.get(cue.value) for cue in Cue}
    else:
        raise SetupImportError(f"entry {index} ({name!r}) has bad sounds")

    return name.strip(), TimerConfig.from_mapping(config_data), sounds

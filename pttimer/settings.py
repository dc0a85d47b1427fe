"""Application preferences with JSON persistence.

Preferences are stored at:
    ~/.pttimer/settings.json

They hold the last-used timer configuration, the sound chosen for each
cue, and the name of the setup that was active, so the next launch picks
up where the last one left off.

Usage::

    settings = load_settings()
    settings.apply_config(TimerConfig(exercise_seconds=45))
    save_settings(settings)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from .audio.catalog import CUE_SOUND_FIELDS, DEFAULT_CUE_SOUNDS, cue_sounds_of
from .timer.config import TimerConfig
from .timer.schedule import Cue

if TYPE_CHECKING:
    from .setups.models import Setup

log = structlog.get_logger()

APP_DATA_DIR = Path.home() / ".pttimer"
SETTINGS_PATH = APP_DATA_DIR / "settings.json"

_CONFIG_FIELDS = tuple(f.name for f in fields(TimerConfig))


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer (seconds / counts, mirrors TimerConfig) ─────────────────
    move_to_seconds: int = 5
    exercise_seconds: int = 30
    move_from_seconds: int = 0
    rest_seconds: int = 10
    set_rest_seconds: int = 60
    reps: int = 1
    sets: int = 1
    total_time_seconds: int = 0

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100
    start_rep_sound: str | None = DEFAULT_CUE_SOUNDS[Cue.START_REP]
    start_rest_sound: str | None = DEFAULT_CUE_SOUNDS[Cue.START_REST]
    start_set_rest_sound: str | None = DEFAULT_CUE_SOUNDS[Cue.START_SET_REST]
    complete_sound: str | None = DEFAULT_CUE_SOUNDS[Cue.COMPLETE]

    # ── session ───────────────────────────────────────────────────────
    active_setup_name: str | None = None
    log_level: str = "INFO"

    def to_config(self) -> TimerConfig:
        return TimerConfig.from_mapping(
            {name: getattr(self, name) for name in _CONFIG_FIELDS}
        )

    def apply_config(self, config: TimerConfig) -> None:
        for name, value in config.to_dict().items():
            setattr(self, name, value)

    def cue_sounds(self) -> dict[Cue, str | None]:
        return cue_sounds_of(self)

    def apply_setup(self, setup: Setup) -> None:
        """Copy a named setup's config and sounds, and mark it active."""
        self.apply_config(setup.to_config())
        for cue, name in setup.cue_sounds().items():
            setattr(self, CUE_SOUND_FIELDS[cue], name)
        self.active_setup_name = setup.name


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    if not SETTINGS_PATH.exists():
        return Settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
        # Only use keys that exist in the dataclass
        valid_keys = {f.name for f in fields(Settings)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        log.warning("settings_unreadable", path=str(SETTINGS_PATH), error=str(exc))
        return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )

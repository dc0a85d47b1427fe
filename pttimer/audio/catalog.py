"""Which sounds exist and which cue plays which.

Kept free of Qt so settings and setups can use it without pulling in
QtMultimedia.

Sound names
-----------
- ``beep``         short mid beep
- ``chime``        three ascending notes
- ``bell``         soft bell with a long decay
- ``double_beep``  two quick high beeps
- ``whistle``      rising sweep
- ``fanfare``      four-note finish arpeggio
"""

from __future__ import annotations

from typing import Any

from ..timer.schedule import Cue

SOUND_NAMES = (
    "beep",
    "chime",
    "bell",
    "double_beep",
    "whistle",
    "fanfare",
)

# A cue mapped to NO_SOUND stays silent.
NO_SOUND = None

DEFAULT_CUE_SOUNDS: dict[Cue, str | None] = {
    Cue.START_REP: "chime",
    Cue.START_REST: "bell",
    Cue.START_SET_REST: "double_beep",
    Cue.COMPLETE: "fanfare",
}

# Attribute names used by Settings and the Setup model.
CUE_SOUND_FIELDS: dict[Cue, str] = {
    Cue.START_REP: "start_rep_sound",
    Cue.START_REST: "start_rest_sound",
    Cue.START_SET_REST: "start_set_rest_sound",
    Cue.COMPLETE: "complete_sound",
}


def normalize_sound_name(value: Any) -> str | None:
    """Return *value* if it names a known sound, else ``NO_SOUND``."""
    if isinstance(value, str) and value in SOUND_NAMES:
        return value
    return NO_SOUND


def cue_sounds_of(obj: Any) -> dict[Cue, str | None]:
    """Read the per-cue sound attributes off a Settings or Setup."""
    return {
        cue: normalize_sound_name(getattr(obj, attr, None))
        for cue, attr in CUE_SOUND_FIELDS.items()
    }

"""Run configuration for the interval timer.

A ``TimerConfig`` is the only thing the engine needs to know about a
workout: phase durations in seconds, the rep and set counts, and the
total-time budget.  Values are normalised on construction so the engine
never has to second-guess them:

- negative durations and counts clamp to 0
- ``sets`` below 1 is coerced to 1

Which mode a run uses is decided by ``reps`` first, then
``total_time_seconds``.  A config where both are 0 has no mode and the
engine refuses to start it.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping


class TimerMode(Enum):
    REPS = "reps"
    TOTAL_TIME = "total_time"


@dataclass(frozen=True)
class TimerConfig:
    """Immutable, validated run parameters (all times in seconds)."""

    move_to_seconds: int = 5
    exercise_seconds: int = 30
    move_from_seconds: int = 0
    rest_seconds: int = 10
    set_rest_seconds: int = 60
    reps: int = 1
    sets: int = 1
    total_time_seconds: int = 0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = max(0, int(getattr(self, f.name)))
            object.__setattr__(self, f.name, value)
        if self.sets < 1:
            object.__setattr__(self, "sets", 1)

    # ── derived values ────────────────────────────────────────────────

    @property
    def exercise_duration(self) -> int:
        """Length of an Exercise phase: move into position + exercise."""
        return self.move_to_seconds + self.exercise_seconds

    @property
    def rest_duration(self) -> int:
        """Length of a rep Rest phase: move out of position + rest."""
        return self.move_from_seconds + self.rest_seconds

    @property
    def mode(self) -> TimerMode | None:
        if self.reps > 0:
            return TimerMode.REPS
        if self.total_time_seconds > 0:
            return TimerMode.TOTAL_TIME
        return None

    # ── conversion ────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TimerConfig:
        """Build a config from loosely-typed values.

        Values may be ints or numeric strings ("30", " 5 ").  Anything
        that doesn't parse falls back to the field default, and unknown
        keys are ignored.
        """
        kwargs: dict[str, int] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            parsed = _parse_int(data[f.name])
            if parsed is not None:
                kwargs[f.name] = parsed
        return cls(**kwargs)


def _parse_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None

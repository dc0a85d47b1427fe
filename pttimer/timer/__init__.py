"""Timer package."""

from .config import TimerConfig, TimerMode
from .schedule import (
    Cue,
    PhaseLoop,
    ResumePoint,
    RunCancelled,
    Status,
    TimerSnapshot,
)
from .engine import TimerEngine, TICK_INTERVAL_MS

__all__ = [
    "TimerConfig",
    "TimerMode",
    "Cue",
    "PhaseLoop",
    "ResumePoint",
    "RunCancelled",
    "Status",
    "TimerSnapshot",
    "TimerEngine",
    "TICK_INTERVAL_MS",
]

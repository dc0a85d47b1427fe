"""Shared test helpers for PT Timer."""

from pttimer.timer.engine import TimerEngine
from pttimer.timer.schedule import Status


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


def tick(engine: TimerEngine, count: int = 1) -> None:
    """Fire *count* one-second ticks without waiting."""
    for _ in range(count):
        engine._on_tick()


def run_to_end(engine: TimerEngine, limit: int = 100_000) -> int:
    """Tick until the run finishes; returns the number of ticks fired."""
    fired = 0
    while engine.is_running:
        assert fired < limit, "run did not finish"
        engine._on_tick()
        fired += 1
    return fired


def countdown_ticks(snapshots) -> list:
    """Snapshots that represent a counted second (not pause/stop/finish)."""
    return [
        s for s in snapshots
        if s.status in (Status.EXERCISE, Status.REST, Status.SET_REST)
        and not s.is_paused
    ]

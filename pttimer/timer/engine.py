"""Qt driver for the interval-timer phase loop.

States
------
READY      Idle, waiting for ``start()``.
RUNNING    Counting down through EXERCISE / REST / SET_REST.
PAUSED     Frozen at the loop's current position.
FINISHED   Schedule exhausted; ``start()`` begins a new run.

Transitions
-----------
READY | FINISHED → RUNNING     (start)
RUNNING → PAUSED               (pause)
PAUSED → RUNNING               (resume, same phase, remaining time only)
RUNNING | PAUSED → READY       (stop)
RUNNING → FINISHED             (schedule exhausted)

Calls that don't fit the current state are ignored, so duplicate clicks
from the UI are harmless.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Generator

import structlog
from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .config import TimerConfig
from .schedule import (
    PhaseLoop,
    ResumePoint,
    RunCancelled,
    Status,
    TimerSnapshot,
)

log = structlog.get_logger()

TICK_INTERVAL_MS = 1000


@dataclass
class _RunState:
    """The active run: its loop and the generator stepping through it."""

    loop: PhaseLoop
    steps: Generator[None, None, None]


class TimerEngine(QObject):
    """Interval timer driven by a one-second ``QTimer``.

    Signals
    -------
    snapshot_changed(snapshot: TimerSnapshot)
        Emitted once per tick, on pause, on stop, and on completion.
        The latest value is authoritative.
    cue(cue: Cue)
        Emitted on entry into a phase and once on completion.  Meant for
        a sound player; the engine never waits on it.
    """

    snapshot_changed = pyqtSignal(object)
    cue = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        config: TimerConfig | None = None,
        tick_interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)

        self._config: TimerConfig = config or TimerConfig()
        self._snapshot: TimerSnapshot = TimerSnapshot()
        self._run: _RunState | None = None
        self._resume_point: ResumePoint | None = None

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(tick_interval_ms)
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def snapshot(self) -> TimerSnapshot:
        return self._snapshot

    @property
    def status(self) -> Status:
        return self._snapshot.status

    @property
    def is_running(self) -> bool:
        """True while a run is counting down (not paused, not idle)."""
        return self._run is not None

    @property
    def is_paused(self) -> bool:
        return self._resume_point is not None

    @property
    def resume_point(self) -> ResumePoint | None:
        return self._resume_point

    @property
    def config(self) -> TimerConfig:
        return self._config

    @config.setter
    def config(self, value: TimerConfig) -> None:
        """Replace the config.  Ignored while a run is active or paused."""
        if self.is_running or self.is_paused:
            log.debug("config_change_refused", status=self.status.value)
            return
        self._config = value

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, config: TimerConfig | None = None) -> None:
        """Begin a new run.  Only valid when READY or FINISHED."""
        if self.is_running or self.is_paused:
            log.debug("start_refused", status=self.status.value)
            return
        if config is not None:
            self._config = config
        mode = self._config.mode
        if mode is None:
            log.debug("start_refused_no_mode")
            return

        log.info("timer_started", mode=mode.value, **self._config.to_dict())
        self._launch(None)

    def pause(self) -> None:
        """Freeze the run at its current position.

        Refused once the schedule is exhausted: the completion cue and
        the Finished snapshot belong to a run that is already over.
        """
        run = self._run
        if run is None or run.loop.finishing:
            log.debug("pause_refused", status=self.status.value)
            return
        self._resume_point = ResumePoint.capture(run.loop)
        frozen = replace(run.loop.snapshot(), is_paused=True)
        self._cancel()
        log.info(
            "timer_paused",
            status=self._resume_point.status.value,
            remaining=self._resume_point.remaining_seconds,
        )
        self._publish(frozen)

    def resume(self) -> None:
        """Continue from the frozen position."""
        resume = self._resume_point
        if resume is None or self.is_running:
            log.debug("resume_refused", status=self.status.value)
            return
        self._resume_point = None
        log.info(
            "timer_resumed",
            status=resume.status.value,
            remaining=resume.remaining_seconds,
        )
        self._launch(resume)

    def stop(self) -> None:
        """Cancel any run and go back to READY.  Always succeeds."""
        was_active = self.is_running or self.is_paused
        self._cancel()
        self._resume_point = None
        if was_active:
            log.info("timer_stopped")
        self._publish(TimerSnapshot())

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: run mechanics
    # ══════════════════════════════════════════════════════════════════

    def _launch(self, resume: ResumePoint | None) -> None:
        loop = PhaseLoop(
            self._config,
            publish=self._publish,
            emit_cue=self.cue.emit,
            resume=resume,
        )
        self._run = _RunState(loop=loop, steps=loop.run())
        self._qt_timer.start()
        # Run up to the first tick boundary right away so the first
        # phase's cue and snapshot don't wait a second.
        self._on_tick()

    def _on_tick(self) -> None:
        run = self._run
        if run is None:
            return
        try:
            next(run.steps)
        except StopIteration:
            self._finish(run)
        except RunCancelled:
            pass
        else:
            # pause()/stop() from a slot connected to our own signals
            # lands while the generator is executing; close it now.
            if run.loop.cancelled:
                run.steps.close()

    def _cancel(self) -> None:
        self._qt_timer.stop()
        run, self._run = self._run, None
        if run is None:
            return
        run.loop.cancel()
        if not run.steps.gi_running:
            run.steps.close()

    def _finish(self, run: _RunState) -> None:
        if self._run is run:
            self._run = None
            self._qt_timer.stop()
        log.info(
            "timer_finished",
            sets=run.loop.config.sets,
            reps=run.loop.config.reps,
        )

    def _publish(self, snapshot: TimerSnapshot) -> None:
        self._snapshot = snapshot
        self.snapshot_changed.emit(snapshot)

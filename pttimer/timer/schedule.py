"""Phase sequencing for interval workouts.

Phases
------
EXERCISE   move into position + exercise
REST       move out of position + rest (between reps)
SET_REST   rest between sets

Reps mode
---------
For each set, for each rep: EXERCISE, then REST unless it is the last
rep of the set.  After every set except the last: SET_REST.

Total-time mode
---------------
Each set gets a time budget of ``time_left // sets_remaining`` computed
when the set begins, so rounding slack from earlier sets rolls forward.
Within a set, EXERCISE and REST alternate until the budget runs out,
cutting the running phase short if needed.  SET_REST does not consume
budget.

A phase whose duration is 0 is skipped outright: no cue, no snapshot,
no tick.

``PhaseLoop.run()`` is a generator.  Each ``yield`` is one tick boundary,
the one-second wait between snapshots; the caller decides when to advance
it.  Everything between two yields (snapshots, cues) happens in one go.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generator

from .config import TimerConfig, TimerMode


# ── enums ─────────────────────────────────────────────────────────────────


class Status(Enum):
    READY = "Ready"
    EXERCISE = "Exercise"
    REST = "Rest"
    SET_REST = "SetRest"
    FINISHED = "Finished"


class Cue(Enum):
    START_REP = "start-rep"
    START_REST = "start-rest"
    START_SET_REST = "start-set-rest"
    COMPLETE = "complete"


PHASE_STATUSES = (Status.EXERCISE, Status.REST, Status.SET_REST)

_ENTRY_CUES: dict[Status, Cue] = {
    Status.EXERCISE: Cue.START_REP,
    Status.REST: Cue.START_REST,
    Status.SET_REST: Cue.START_SET_REST,
}


# ── value objects ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerSnapshot:
    """What the timer looks like right now.

    The default instance is the idle snapshot shown before a run and
    after ``stop()``.
    """

    status: Status = Status.READY
    remaining_seconds: int = 0
    current_set: int = 0
    current_rep: int = 0
    progress_display: str = ""
    is_paused: bool = False


@dataclass(frozen=True)
class ResumePoint:
    """Exact position of a paused run.

    Read off the loop rather than the last published snapshot: a pause
    from a phase's entry cue lands at the start of that phase, before
    its first tick is shown.  ``set_budget`` and ``time_left`` are the
    total-time bookkeeping at the same instant (both 0 in reps mode).
    """

    status: Status
    current_set: int
    current_rep: int
    remaining_seconds: int
    set_budget: int = 0
    time_left: int = 0

    @classmethod
    def capture(cls, loop: PhaseLoop) -> ResumePoint:
        return cls(
            status=loop.status,
            current_set=loop.current_set,
            current_rep=loop.current_rep,
            remaining_seconds=loop.remaining_seconds,
            set_budget=loop.set_budget,
            time_left=loop.time_left,
        )


class RunCancelled(Exception):
    """Raised out of ``PhaseLoop.run()`` once its run has been cancelled."""


# ── loop ──────────────────────────────────────────────────────────────────


class PhaseLoop:
    """Walks one run of the phase schedule.

    ``publish`` receives a ``TimerSnapshot`` once per tick and once on
    completion; ``emit_cue`` receives a ``Cue`` on every phase entry and
    on completion.  Passing a ``ResumePoint`` starts the loop in the
    middle of the schedule: the phase it names runs for its frozen
    remainder and its entry cue is not repeated.

    ``cancel()`` is checked at the top of every phase, before every
    tick and before every cue.  Once set, the generator raises
    ``RunCancelled`` and publishes nothing further.

    A phase's entry cue goes out just before its first snapshot, in the
    same step.  ``finishing`` is set once the schedule is exhausted,
    before the completion cue.
    """

    def __init__(
        self,
        config: TimerConfig,
        publish: Callable[[TimerSnapshot], None],
        emit_cue: Callable[[Cue], None],
        resume: ResumePoint | None = None,
    ) -> None:
        self.config = config
        self.cancelled = False
        self.finishing = False
        self._publish = publish
        self._emit_cue = emit_cue
        self._resume = resume

        if resume is None:
            self._status = Status.READY
            self._set = 1
            self._rep = 1 if config.mode is TimerMode.REPS else 0
            self._remaining = 0
            self.set_budget = 0
            self.time_left = config.total_time_seconds
        else:
            self._status = resume.status
            self._set = resume.current_set
            self._rep = resume.current_rep
            self._remaining = resume.remaining_seconds
            self.set_budget = resume.set_budget
            self.time_left = resume.time_left

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def status(self) -> Status:
        return self._status

    @property
    def current_set(self) -> int:
        return self._set

    @property
    def current_rep(self) -> int:
        return self._rep

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    def snapshot(self) -> TimerSnapshot:
        """The tick snapshot for the loop's current position."""
        return self._snapshot(self._status)

    def run(self) -> Generator[None, None, None]:
        mode = self.config.mode
        if mode is TimerMode.REPS:
            yield from self._run_reps()
        elif mode is TimerMode.TOTAL_TIME:
            yield from self._run_total_time()
        else:
            return

        self.finishing = True
        self._checkpoint()
        self._emit_cue(Cue.COMPLETE)
        self._checkpoint()
        self._status = Status.FINISHED
        self._publish(TimerSnapshot(
            status=Status.FINISHED,
            remaining_seconds=self._remaining,
            current_set=self._set,
            current_rep=self._rep,
        ))

    # ── modes ─────────────────────────────────────────────────────────

    def _run_reps(self) -> Generator[None, None, None]:
        cfg = self.config
        first_set, first_rep = self._set, self._rep

        for set_no in range(first_set, cfg.sets + 1):
            self._set = set_no
            start_rep = first_rep if set_no == first_set else 1
            for rep in range(start_rep, cfg.reps + 1):
                self._rep = rep
                yield from self._phase(Status.EXERCISE, cfg.exercise_duration)
                if rep < cfg.reps:
                    yield from self._phase(Status.REST, cfg.rest_duration)
            if set_no < cfg.sets:
                yield from self._phase(Status.SET_REST, cfg.set_rest_seconds)

    def _run_total_time(self) -> Generator[None, None, None]:
        cfg = self.config
        cycle = cfg.exercise_duration + cfg.rest_duration

        for set_no in range(self._set, cfg.sets + 1):
            self._checkpoint()
            self._set = set_no
            if self._resume is None:
                self.set_budget = self.time_left // (cfg.sets - set_no + 1)
            else:
                self.set_budget = self._resume.set_budget

            # A zero-length cycle can never spend the budget; leave it
            # in time_left for the remaining sets.
            while self.set_budget > 0 and cycle > 0:
                yield from self._phase(
                    Status.EXERCISE, cfg.exercise_duration, budgeted=True,
                )
                if self.set_budget <= 0:
                    break
                yield from self._phase(
                    Status.REST, cfg.rest_duration, budgeted=True,
                )

            if set_no < cfg.sets:
                yield from self._phase(Status.SET_REST, cfg.set_rest_seconds)

    # ── phases and ticks ──────────────────────────────────────────────

    def _phase(
        self, status: Status, duration: int, *, budgeted: bool = False,
    ) -> Generator[None, None, None]:
        self._checkpoint()

        cue = None
        resume = self._resume
        if resume is not None:
            # Fast-forward: phases before the resume point already ran.
            if status is not resume.status:
                return
            self._resume = None
            duration = resume.remaining_seconds
        elif duration <= 0:
            return
        else:
            cue = _ENTRY_CUES[status]

        yield from self._countdown(status, duration, budgeted, cue)

    def _countdown(
        self,
        status: Status,
        seconds: int,
        budgeted: bool,
        cue: Cue | None = None,
    ) -> Generator[None, None, None]:
        self._status = status
        self._remaining = seconds
        if cue is not None:
            # The loop already sits at the phase's first second, so a
            # handler that pauses on the cue freezes right there.
            self._emit_cue(cue)
        for remaining in range(seconds, 0, -1):
            self._checkpoint()
            self._remaining = remaining
            self._publish(self._snapshot(status))
            yield
            if budgeted:
                self.set_budget -= 1
                self.time_left -= 1
                if self.set_budget <= 0:
                    return

    def _snapshot(self, status: Status) -> TimerSnapshot:
        return TimerSnapshot(
            status=status,
            remaining_seconds=self._remaining,
            current_set=self._set,
            current_rep=self._rep,
            progress_display=self._progress(status),
        )

    def _progress(self, status: Status) -> str:
        cfg = self.config
        if status is Status.SET_REST:
            return f"Set {self._set} of {cfg.sets} done"
        if cfg.mode is TimerMode.TOTAL_TIME:
            return f"Time: {self.set_budget} sec"
        return f"Reps left: {cfg.reps - self._rep}"

    def _checkpoint(self) -> None:
        if self.cancelled:
            raise RunCancelled()

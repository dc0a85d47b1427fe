"""SQLAlchemy ORM models for named setups."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import DeclarativeBase

from ..audio.catalog import cue_sounds_of
from ..timer.config import TimerConfig
from ..timer.schedule import Cue


class Base(DeclarativeBase):
    pass


class Setup(Base):
    """A saved workout: timer config plus the sound for each cue."""

    __tablename__ = "setups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False, unique=True)
    position = Column(Integer, nullable=False, default=0)  # list order, 0 = top

    move_to_seconds = Column(Integer, nullable=False, default=0)
    exercise_seconds = Column(Integer, nullable=False, default=0)
    move_from_seconds = Column(Integer, nullable=False, default=0)
    rest_seconds = Column(Integer, nullable=False, default=0)
    set_rest_seconds = Column(Integer, nullable=False, default=0)
    reps = Column(Integer, nullable=False, default=0)
    sets = Column(Integer, nullable=False, default=1)
    total_time_seconds = Column(Integer, nullable=False, default=0)

    start_rep_sound = Column(String(40), nullable=True)        # None = silent
    start_rest_sound = Column(String(40), nullable=True)
    start_set_rest_sound = Column(String(40), nullable=True)
    complete_sound = Column(String(40), nullable=True)

    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    def to_config(self) -> TimerConfig:
        return TimerConfig(
            move_to_seconds=self.move_to_seconds,
            exercise_seconds=self.exercise_seconds,
            move_from_seconds=self.move_from_seconds,
            rest_seconds=self.rest_seconds,
            set_rest_seconds=self.set_rest_seconds,
            reps=self.reps,
            sets=self.sets,
            total_time_seconds=self.total_time_seconds,
        )

    def cue_sounds(self) -> dict[Cue, str | None]:
        return cue_sounds_of(self)

    def __repr__(self) -> str:
        return (
            f"<Setup name={self.name!r} position={self.position} "
            f"reps={self.reps} sets={self.sets}>"
        )

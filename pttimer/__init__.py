"""PT Timer: interval workout timer with reps and total-time modes."""

__version__ = "0.1.0"

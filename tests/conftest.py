"""Shared pytest fixtures for PT Timer tests."""

import sys
import pytest
import structlog

from PyQt6.QtCore import QCoreApplication

from pttimer.setups.db import configure_engine, init_db
from pttimer.timer.config import TimerConfig
from pttimer.timer.engine import TimerEngine


@pytest.fixture(scope="session", autouse=True)
def structlog_to_stderr():
    """Keep structlog's default PrintLogger off stdout, which tests capture."""
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))
    yield


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep settings.json out of the real home directory."""
    monkeypatch.setattr("pttimer.settings.SETTINGS_PATH", tmp_path / "settings.json")
    yield tmp_path / "settings.json"


@pytest.fixture
def engine(qapp):
    """Fresh TimerEngine; tests drive it with ``_on_tick()``."""
    return TimerEngine(parent=None)


@pytest.fixture
def reps_config():
    """30 s exercise / 10 s rest, 2 reps, 1 set, no move time."""
    return TimerConfig(
        move_to_seconds=0,
        exercise_seconds=30,
        move_from_seconds=0,
        rest_seconds=10,
        set_rest_seconds=0,
        reps=2,
        sets=1,
    )

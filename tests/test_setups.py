"""Tests for the named setup library.

Covers: saving and case-insensitive updates, ordering moves, deletion,
clearing, and JSON import/export including malformed payloads.
"""

import json

import pytest
from sqlalchemy import text

from pttimer.setups.db import _get_engine, configure_engine, get_session, init_db
from pttimer.setups.library import (
    SetupImportError,
    add_or_update_setup,
    clear_setups,
    delete_setup,
    export_setups_json,
    find_setup,
    import_setups_json,
    list_setups,
    move_setup_down,
    move_setup_up,
)
from pttimer.setups.models import Setup
from pttimer.timer.config import TimerConfig
from pttimer.timer.schedule import Cue


def _names():
    return [s.name for s in list_setups()]


def _seed(*names):
    for i, name in enumerate(names):
        add_or_update_setup(name, TimerConfig(exercise_seconds=10 + i))


# ═══════════════════════════════════════════════════════════════════════════
#  SAVE / FIND
# ═══════════════════════════════════════════════════════════════════════════


class TestSave:

    def test_add_new_setup(self):
        saved = add_or_update_setup("Wall sits", TimerConfig(exercise_seconds=45, reps=5))
        assert saved is not None
        assert saved.name == "Wall sits"
        assert saved.position == 0
        assert find_setup("Wall sits").to_config().exercise_seconds == 45

    def test_appends_in_order(self):
        _seed("A", "B", "C")
        assert _names() == ["A", "B", "C"]
        assert [s.position for s in list_setups()] == [0, 1, 2]

    def test_blank_name_ignored(self):
        assert add_or_update_setup("   ", TimerConfig()) is None
        assert add_or_update_setup("", TimerConfig()) is None
        assert list_setups() == []

    def test_update_is_case_insensitive(self):
        _seed("Squats", "Lunges")
        add_or_update_setup("SQUATS", TimerConfig(exercise_seconds=99))
        setups = list_setups()
        assert [s.name for s in setups] == ["SQUATS", "Lunges"]
        assert setups[0].exercise_seconds == 99

        with get_session() as db:
            assert db.query(Setup).count() == 2

    def test_find_is_case_insensitive(self):
        _seed("Plank")
        assert find_setup("plank").name == "Plank"
        assert find_setup("  PLANK ").name == "Plank"

    def test_find_missing(self):
        assert find_setup("nope") is None
        assert find_setup("") is None

    def test_sounds_stored(self):
        add_or_update_setup(
            "Quiet",
            TimerConfig(),
            {Cue.START_REP: "beep", Cue.START_REST: None,
             Cue.START_SET_REST: "not-a-sound", Cue.COMPLETE: "fanfare"},
        )
        sounds = find_setup("Quiet").cue_sounds()
        assert sounds[Cue.START_REP] == "beep"
        assert sounds[Cue.START_REST] is None
        assert sounds[Cue.START_SET_REST] is None
        assert sounds[Cue.COMPLETE] == "fanfare"

    def test_default_sounds_when_omitted(self):
        add_or_update_setup("Defaults", TimerConfig())
        assert find_setup("Defaults").cue_sounds()[Cue.COMPLETE] == "fanfare"


# ═══════════════════════════════════════════════════════════════════════════
#  ORDERING / DELETION
# ═══════════════════════════════════════════════════════════════════════════


class TestOrdering:

    def test_move_up(self):
        _seed("A", "B", "C")
        assert move_setup_up("C") is True
        assert _names() == ["A", "C", "B"]

    def test_move_down(self):
        _seed("A", "B", "C")
        assert move_setup_down("a") is True
        assert _names() == ["B", "A", "C"]

    def test_move_up_at_top_is_noop(self):
        _seed("A", "B")
        assert move_setup_up("A") is False
        assert _names() == ["A", "B"]

    def test_move_down_at_bottom_is_noop(self):
        _seed("A", "B")
        assert move_setup_down("B") is False
        assert _names() == ["A", "B"]

    def test_move_missing(self):
        _seed("A")
        assert move_setup_up("Z") is False

    def test_delete_renumbers(self):
        _seed("A", "B", "C")
        assert delete_setup("b") is True
        assert _names() == ["A", "C"]
        assert [s.position for s in list_setups()] == [0, 1]
        add_or_update_setup("D", TimerConfig())
        assert _names() == ["A", "C", "D"]

    def test_delete_missing(self):
        assert delete_setup("ghost") is False

    def test_clear(self):
        _seed("A", "B")
        assert clear_setups() == 2
        assert list_setups() == []


# ═══════════════════════════════════════════════════════════════════════════
#  IMPORT / EXPORT
# ═══════════════════════════════════════════════════════════════════════════


class TestImportExport:

    def test_export_shape(self):
        add_or_update_setup("Bridge", TimerConfig(exercise_seconds=20, reps=4, sets=2))
        data = json.loads(export_setups_json())
        assert len(data) == 1
        entry = data[0]
        assert entry["name"] == "Bridge"
        assert entry["config"]["exercise_seconds"] == 20
        assert entry["config"]["sets"] == 2
        assert set(entry["sounds"]) == {c.value for c in Cue}

    def test_export_then_import_restores_collection(self):
        _seed("A", "B", "C")
        move_setup_up("C")
        payload = export_setups_json()
        clear_setups()
        imported = import_setups_json(payload)
        assert [s.name for s in imported] == ["A", "C", "B"]
        assert find_setup("C").exercise_seconds == 12

    def test_import_replaces_everything(self):
        _seed("Old")
        import_setups_json(json.dumps([{"name": "New", "config": {"reps": 3}}]))
        assert _names() == ["New"]

    def test_import_accepts_string_numbers(self):
        import_setups_json(json.dumps([
            {"name": "Legacy", "config": {"exercise_seconds": "40", "sets": "0"}},
        ]))
        config = find_setup("Legacy").to_config()
        assert config.exercise_seconds == 40
        assert config.sets == 1

    def test_import_empty_is_noop(self):
        _seed("Keep")
        assert import_setups_json("[]") == []
        assert _names() == ["Keep"]

    def test_import_duplicate_names_later_wins(self):
        import_setups_json(json.dumps([
            {"name": "Dup", "config": {"reps": 1}},
            {"name": "Other"},
            {"name": "dup", "config": {"reps": 7}},
        ]))
        assert _names() == ["dup", "Other"]
        assert find_setup("DUP").reps == 7

    def test_import_reuses_existing_name(self):
        _seed("Same")
        import_setups_json(json.dumps([{"name": "Same", "config": {"reps": 2}}]))
        assert find_setup("Same").reps == 2

    @pytest.mark.parametrize("payload", [
        "not json",
        '{"name": "solo"}',
        '[42]',
        '[{"config": {}}]',
        '[{"name": "  "}]',
        '[{"name": "x", "config": [1, 2]}]',
        '[{"name": "x", "sounds": "loud"}]',
    ])
    def test_import_rejects_malformed(self, payload):
        _seed("Untouched")
        with pytest.raises(SetupImportError):
            import_setups_json(payload)
        assert _names() == ["Untouched"]

    def test_import_error_is_value_error(self):
        with pytest.raises(ValueError):
            import_setups_json("{")


# ═══════════════════════════════════════════════════════════════════════════
#  SCHEMA UPGRADE
# ═══════════════════════════════════════════════════════════════════════════


class TestSchemaUpgrade:

    def test_old_table_gains_new_columns(self):
        configure_engine("sqlite:///:memory:")
        with _get_engine().begin() as conn:
            conn.execute(text(
                "CREATE TABLE setups ("
                "id INTEGER PRIMARY KEY, name VARCHAR(120) NOT NULL UNIQUE, "
                "position INTEGER NOT NULL, move_to_seconds INTEGER NOT NULL, "
                "exercise_seconds INTEGER NOT NULL, move_from_seconds INTEGER NOT NULL, "
                "rest_seconds INTEGER NOT NULL, set_rest_seconds INTEGER NOT NULL, "
                "reps INTEGER NOT NULL, sets INTEGER NOT NULL, "
                "updated_at DATETIME NOT NULL)"
            ))
            conn.execute(text(
                "INSERT INTO setups VALUES "
                "(1, 'Old', 0, 5, 30, 0, 10, 60, 3, 2, '2024-01-01 00:00:00')"
            ))

        init_db()

        old = find_setup("old")
        assert old.to_config().total_time_seconds == 0
        assert old.to_config().reps == 3
        assert set(old.cue_sounds().values()) == {None}

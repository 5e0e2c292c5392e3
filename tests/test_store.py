"""Tests for tracker/store.py — CRUD, validation, load/save."""

import json
from datetime import date
from unittest.mock import patch

import pytest
from tracker.errors import DuplicateKeyError, NotFoundError, PersistenceError, ValidationError
from tracker.fileio import read_json
from tracker.models import Habit, HabitState
from tracker.store import (
    add_habit,
    delete_habit,
    get_habit,
    list_habits,
    load_state,
    replace_all,
    save_state,
)


# ── add_habit ─────────────────────────────────────────────────


def test_add_habit():
    s = HabitState()
    h = add_habit(s, "rd", "Read 20 pages")
    assert h.short_name == "rd"
    assert h.period == "daily"
    assert h.count is None
    assert h.streak == 0
    assert h.last_done is None
    assert s.habits["rd"] is h


def test_add_habit_strips_whitespace():
    s = HabitState()
    h = add_habit(s, "  rd ", " Read ")
    assert h.short_name == "rd"
    assert h.name == "Read"


def test_add_times_per_week():
    s = HabitState()
    h = add_habit(s, "gym", "Gym", "times-per-week", "3")
    assert h.count == 3


@pytest.mark.parametrize("count", [None, "", "abc", 0, -2, True])
def test_add_times_per_week_bad_count(count):
    with pytest.raises(ValidationError):
        add_habit(HabitState(), "gym", "Gym", "times-per-week", count)


def test_add_times_per_week_fractional_count():
    s = HabitState()
    with pytest.raises(ValidationError, match="whole number"):
        add_habit(s, "gym", "Gym", "times-per-week", 2.5)
    assert s.habits == {}


def test_add_times_per_week_whole_float_count():
    h = add_habit(HabitState(), "gym", "Gym", "times-per-week", 3.0)
    assert h.count == 3


def test_add_weekly_ignores_count():
    h = add_habit(HabitState(), "wk", "Review", "weekly", 4)
    assert h.count is None


def test_add_blank_fields():
    s = HabitState()
    with pytest.raises(ValidationError):
        add_habit(s, "", "Read")
    with pytest.raises(ValidationError):
        add_habit(s, "rd", "   ")
    assert s.habits == {}


def test_add_unknown_period():
    with pytest.raises(ValidationError):
        add_habit(HabitState(), "rd", "Read", "monthly")


def test_add_duplicate():
    s = HabitState()
    add_habit(s, "rd", "Read")
    with pytest.raises(DuplicateKeyError):
        add_habit(s, "rd", "Read again")
    assert s.habits["rd"].name == "Read"


# ── get / delete / list ───────────────────────────────────────


def test_get_habit():
    s = HabitState(habits={"rd": Habit(short_name="rd", name="Read")})
    assert get_habit(s, "rd").name == "Read"
    with pytest.raises(NotFoundError):
        get_habit(s, "gym")


def test_delete_habit():
    s = HabitState(habits={"rd": Habit(short_name="rd", name="Read")}, xp=30)
    removed = delete_habit(s, "rd")
    assert removed.name == "Read"
    assert s.habits == {}
    assert s.xp == 30


def test_delete_missing():
    with pytest.raises(NotFoundError):
        delete_habit(HabitState(), "rd")


def test_list_habits_sorted():
    s = HabitState(habits={
        "rd": Habit(short_name="rd", name="Read"),
        "gym": Habit(short_name="gym", name="Gym"),
        "med": Habit(short_name="med", name="Meditate"),
    })
    assert [h.short_name for h in list_habits(s)] == ["gym", "med", "rd"]


def test_list_habits_query():
    s = HabitState(habits={
        "rd": Habit(short_name="rd", name="Read"),
        "gym": Habit(short_name="gym", name="Gym session"),
    })
    assert [h.short_name for h in list_habits(s, "SESSION")] == ["gym"]
    assert [h.short_name for h in list_habits(s, "rd")] == ["rd"]
    assert list_habits(s, "zzz") == []


def test_replace_all_resets_counters():
    s = HabitState(habits={"rd": Habit(short_name="rd")}, xp=300, freeze_tokens=4)
    replace_all(s, {"gym": Habit(short_name="gym", name="Gym")})
    assert list(s.habits) == ["gym"]
    assert s.xp == 0
    assert s.freeze_tokens == 1


# ── load / save ───────────────────────────────────────────────


def test_load_state(workspace):
    s = load_state(workspace)
    assert set(s.habits) == {"rd", "gym", "med"}
    assert s.xp == 120
    assert s.freeze_tokens == 1
    assert s.habits["rd"].last_done == date(2026, 2, 10)
    assert s.habits["gym"].count == 3


def test_load_state_missing_file(empty_workspace):
    s = load_state(empty_workspace)
    assert s.habits == {}
    assert s.xp == 0
    assert s.freeze_tokens == 1


def test_load_state_corrupt_file(workspace):
    (workspace / "state.json").write_text("{not json", encoding="utf-8")
    s = load_state(workspace)
    assert s.habits == {}
    assert s.freeze_tokens == 1


def test_load_state_non_object(workspace):
    (workspace / "state.json").write_text("[1, 2, 3]", encoding="utf-8")
    assert load_state(workspace).habits == {}


def test_load_state_migrates_legacy(empty_workspace):
    legacy = {
        "rd": {"name": "Read", "period": "daily", "done": "09-02-2026"},
        "wk": {"name": "Review", "period": "weekly", "done": ""},
    }
    (empty_workspace / "habits_v1.json").write_text(json.dumps(legacy), encoding="utf-8")
    s = load_state(empty_workspace)
    assert s.habits["rd"].last_done == date(2026, 2, 9)
    assert s.habits["rd"].streak == 0
    assert s.habits["wk"].period == "weekly"
    assert s.xp == 0


def test_current_state_wins_over_legacy(workspace):
    (workspace / "habits_v1.json").write_text(
        json.dumps({"old": {"name": "Old"}}), encoding="utf-8"
    )
    assert "old" not in load_state(workspace).habits


def test_save_state_roundtrip(empty_workspace):
    s = HabitState(xp=40, freeze_tokens=2)
    add_habit(s, "rd", "Read")
    save_state(s, empty_workspace)
    data = read_json(empty_workspace / "state.json")
    assert data["xp"] == 40
    assert data["freezeTokens"] == 2
    assert data["habits"]["rd"]["name"] == "Read"
    assert load_state(empty_workspace) == s


def test_save_state_failure_raises_persistence_error(empty_workspace):
    with patch("tracker.store.write_json_atomic", side_effect=OSError("disk full")):
        with pytest.raises(PersistenceError) as exc:
            save_state(HabitState(), empty_workspace)
    assert exc.value.kind == "io_error"
    assert "disk full" in exc.value.message

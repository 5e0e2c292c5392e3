"""Tests for tracker/transfer.py — JSON/CSV import and export."""

import json
from datetime import date

import pytest
from tracker.errors import MalformedImportError
from tracker.models import Habit, HabitState
from tracker.transfer import (
    export_compat_csv,
    export_csv,
    export_json,
    habits_from_mapping,
    parse_import,
)


def _state():
    return HabitState(
        habits={
            "rd": Habit(short_name="rd", name="Read", last_done=date(2026, 2, 10), streak=3),
            "gym": Habit(short_name="gym", name="Gym", period="times-per-week", count=3),
        },
        xp=70,
        freeze_tokens=2,
    )


# ── Import ────────────────────────────────────────────────────


def test_import_json_habit_map():
    text = json.dumps({
        "rd": {"name": "Read", "period": "daily", "lastDone": "2026-02-10", "streak": 3},
        "gym": {"name": "Gym", "period": "times-per-week", "count": 3},
    })
    habits = parse_import(text)
    assert set(habits) == {"rd", "gym"}
    assert habits["rd"].last_done == date(2026, 2, 10)
    assert habits["rd"].streak == 3
    assert habits["gym"].count == 3


def test_import_json_state_export():
    habits = parse_import(export_json(_state()))
    assert set(habits) == {"rd", "gym"}
    assert habits["rd"].streak == 3


def test_import_json_habits_wrapper_without_counters():
    text = json.dumps({"habits": {"rd": {"name": "Read", "lastDone": "2026-02-10", "streak": 2}}})
    habits = parse_import(text)
    assert list(habits) == ["rd"]
    assert habits["rd"].streak == 2


def test_import_json_habit_named_habits():
    habits = parse_import(json.dumps({"habits": {"name": "Track habits", "period": "weekly"}}))
    assert list(habits) == ["habits"]
    assert habits["habits"].period == "weekly"


def test_import_json_normalizes_legacy_dates():
    habits = parse_import(json.dumps({"rd": {"name": "Read", "lastDone": "10-02-2026", "streak": 1}}))
    assert habits["rd"].last_done == date(2026, 2, 10)


def test_import_json_drops_bad_dates():
    habits = parse_import(json.dumps({"rd": {"name": "Read", "lastDone": "soon", "streak": 4}}))
    assert habits["rd"].last_done is None
    assert habits["rd"].streak == 0


def test_import_json_unknown_period():
    with pytest.raises(MalformedImportError):
        parse_import(json.dumps({"rd": {"name": "Read", "period": "monthly"}}))


def test_import_json_not_habits():
    with pytest.raises(MalformedImportError):
        parse_import(json.dumps({"xp": 10, "name": "x"}))


def test_import_row_csv():
    text = (
        "short,name,period,count,lastDone,streak\n"
        "rd,Read,daily,,2026-02-10,3\n"
        "\n"
        "gym,Gym,times-per-week,3,08-02-2026,5\n"
    )
    habits = parse_import(text)
    assert list(habits) == ["rd", "gym"]
    assert habits["gym"].last_done == date(2026, 2, 8)
    assert habits["gym"].count == 3
    assert habits["gym"].streak == 5


def test_import_row_csv_short_name_header():
    habits = parse_import("short_name,name\nrd,Read\n")
    assert habits["rd"].name == "Read"
    assert habits["rd"].period == "daily"


def test_import_compat_csv():
    text = (
        ",rd,gym\n"
        "name,Read,Gym\n"
        "period,daily,times per week\n"
        "done,10-02-2026,\n"
        "streak,3,0\n"
        "count,,2\n"
    )
    habits = parse_import(text)
    assert habits["rd"].last_done == date(2026, 2, 10)
    assert habits["rd"].streak == 3
    assert habits["gym"].period == "times-per-week"
    assert habits["gym"].count == 2
    assert habits["gym"].last_done is None


def test_import_empty():
    with pytest.raises(MalformedImportError, match="Empty file"):
        parse_import("   \n")


def test_import_unrecognized():
    with pytest.raises(MalformedImportError, match="Unrecognized"):
        parse_import("hello,world\n1,2\n")


def test_import_json_array_is_unrecognized():
    with pytest.raises(MalformedImportError):
        parse_import("[1, 2, 3]")


def test_habits_from_mapping_requires_object():
    with pytest.raises(MalformedImportError, match="Habits object required"):
        habits_from_mapping(None)
    with pytest.raises(MalformedImportError):
        habits_from_mapping({"rd": "Read"})


def test_habits_from_mapping_blank_short():
    with pytest.raises(MalformedImportError):
        habits_from_mapping({" ": {"name": "Nothing"}})


def test_habits_from_mapping_blank_name():
    with pytest.raises(MalformedImportError, match="name is required"):
        habits_from_mapping({"x": {"name": "  ", "period": "daily"}})
    with pytest.raises(MalformedImportError):
        parse_import("short,name,period\nx,,daily\n")


# ── Export ────────────────────────────────────────────────────


def test_export_json():
    data = json.loads(export_json(_state()))
    assert data["xp"] == 70
    assert data["freezeTokens"] == 2
    assert data["habits"]["rd"]["lastDone"] == "2026-02-10"


def test_export_csv():
    lines = export_csv(_state()).splitlines()
    assert lines[0] == "short,name,period,count,lastDone,streak"
    assert lines[1] == "rd,Read,daily,,2026-02-10,3"
    assert lines[2] == "gym,Gym,times-per-week,3,,0"


def test_export_compat_csv():
    lines = export_compat_csv(_state()).splitlines()
    assert lines[0] == ",rd,gym"
    assert lines[1] == "name,Read,Gym"
    assert lines[3] == "lastDone,2026-02-10,"


def test_export_csv_quotes_commas():
    s = HabitState(habits={"rd": Habit(short_name="rd", name="Read, then write")})
    assert '"Read, then write"' in export_csv(s)


def test_csv_export_reimports():
    habits = parse_import(export_csv(_state()))
    assert habits["rd"].streak == 3
    assert habits["gym"].count == 3
    habits = parse_import(export_compat_csv(_state()))
    assert habits["rd"].last_done == date(2026, 2, 10)

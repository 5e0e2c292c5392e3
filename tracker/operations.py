"""Serialized habit operations used by the REST app and the terminal UI.

Every operation loads the state fresh, mutates it, and saves it back inside
``transaction``, which holds a process-wide lock plus an ``flock`` on the
workspace lock file. Two requests can therefore never interleave their
read-modify-write cycles, and nothing is cached between operations.

Failures are raised as ``HabitError`` subclasses; nothing is saved when an
operation raises.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from tracker.days import display_day, format_day, today
from tracker.economy import purchase_freeze, status as economy_status
from tracker.errors import ValidationError
from tracker.fileio import locked
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
from tracker.streaks import complete, settle
from tracker.transfer import export_compat_csv, export_csv, export_json, habits_from_mapping, parse_import
from tracker.workspace import lock_path, workspace_root

logger = logging.getLogger(__name__)

_LOCK = threading.Lock()

EXPORT_FORMATS = ("json", "csv", "compat")


@contextmanager
def transaction(root: Path | None = None, save: bool = True) -> Iterator[HabitState]:
    """Load state under the lock, yield it, and save it if the block succeeds."""
    if root is None:
        root = workspace_root()
    with _LOCK, locked(lock_path(root)):
        state = load_state(root)
        yield state
        if save:
            save_state(state, root)


def habit_view(habit: Habit, display: bool = False) -> dict[str, Any]:
    """Habit as a JSON-ready dict including its short name.

    With *display*, the last completion is shown as DD-MM-YYYY.
    """
    d = habit.to_dict()
    d["short"] = habit.short_name
    if display:
        d["lastDone"] = display_day(habit.last_done)
    return d


# ── Records ───────────────────────────────────────────────────


def add(
    short_name: str,
    name: str,
    period: str = "daily",
    count: Any = None,
    root: Path | None = None,
) -> dict[str, Any]:
    with transaction(root) as state:
        habit = add_habit(state, short_name, name, period, count)
    logger.info("Added habit %r (%s)", habit.short_name, habit.period)
    return {"ok": True, "habit": habit_view(habit)}


def get(short_name: str, display: bool = False, root: Path | None = None) -> dict[str, Any]:
    with transaction(root, save=False) as state:
        habit = get_habit(state, short_name)
    return habit_view(habit, display)


def delete(short_name: str, root: Path | None = None) -> dict[str, Any]:
    with transaction(root) as state:
        delete_habit(state, short_name)
    logger.info("Deleted habit %r", short_name)
    return {"ok": True, "short": short_name}


def list_all(query: str = "", root: Path | None = None) -> dict[str, dict[str, Any]]:
    """Settle streaks, then return habits keyed by short name, sorted."""
    with transaction(root) as state:
        settle(state, today())
        habits = list_habits(state, query)
    return {h.short_name: h.to_dict() for h in habits}


def settle_all(root: Path | None = None) -> dict[str, Any]:
    """Run the settlement sweep on its own (start of a session)."""
    day = today()
    with transaction(root) as state:
        report = settle(state, day)
    return {
        "ok": True,
        "day": format_day(day),
        "forgiven": report.forgiven,
        "reset": report.reset,
    }


# ── Completion & economy ──────────────────────────────────────


def done(short_name: str, root: Path | None = None) -> dict[str, Any]:
    """Mark a habit done today."""
    with transaction(root) as state:
        result = complete(state, short_name, today())
    return {
        "ok": True,
        "short": short_name,
        "streak": result.streak,
        "xpGain": result.xp_gain,
        "freezeUsed": result.freeze_used,
        "xp": state.xp,
        "freezeTokens": state.freeze_tokens,
    }


def purchase(root: Path | None = None) -> dict[str, Any]:
    with transaction(root) as state:
        purchase_freeze(state)
    return {"ok": True, "xp": state.xp, "freezeTokens": state.freeze_tokens}


def status(root: Path | None = None) -> dict[str, Any]:
    """Settle streaks, then return XP, freeze tokens and longest streak."""
    with transaction(root) as state:
        settle(state, today())
        result = economy_status(state)
    return result


# ── Import / export ───────────────────────────────────────────


def import_habits(mapping: Any, root: Path | None = None) -> dict[str, Any]:
    """Replace all habits from a ``{short: {...}}`` mapping.

    XP is reset to 0 and freeze tokens to 1, whatever they were before.
    """
    habits = habits_from_mapping(mapping)
    with transaction(root) as state:
        replace_all(state, habits)
    logger.info("Imported %d habits; XP and freeze tokens reset", len(habits))
    return {"ok": True, "count": len(habits)}


def import_text(text: str, root: Path | None = None) -> dict[str, Any]:
    """Replace all habits from JSON or CSV text. Resets XP and freeze tokens."""
    habits = parse_import(text)
    with transaction(root) as state:
        replace_all(state, habits)
    logger.info("Imported %d habits from text; XP and freeze tokens reset", len(habits))
    return {"ok": True, "count": len(habits)}


def clear(root: Path | None = None) -> dict[str, Any]:
    """Remove every habit and reset XP and freeze tokens."""
    with transaction(root) as state:
        removed = len(state.habits)
        replace_all(state, {})
    logger.info("Cleared %d habits", removed)
    return {"ok": True, "removed": removed}


def export(fmt: str = "json", root: Path | None = None) -> str:
    if fmt not in EXPORT_FORMATS:
        raise ValidationError(f"Unknown export format: {fmt}")
    with transaction(root, save=False) as state:
        if fmt == "csv":
            return export_csv(state)
        if fmt == "compat":
            return export_compat_csv(state)
        return export_json(state)


"""Habit record store: CRUD on the state, plus the load/save gateway."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from tracker.errors import DuplicateKeyError, NotFoundError, PersistenceError, ValidationError
from tracker.fileio import read_json, write_json_atomic
from tracker.models import (
    STARTING_FREEZES,
    TIMES_PER_WEEK,
    Habit,
    HabitState,
    normalize_period,
)
from tracker.workspace import legacy_state_path, state_path

logger = logging.getLogger(__name__)


# ── Persistence gateway ───────────────────────────────────────


def load_state(root: Path | None = None) -> HabitState:
    """Load state.json into a HabitState.

    Never fails: a missing, unreadable or malformed file yields defaults.
    When no state file exists yet, habits from a legacy habits_v1.json are
    migrated.
    """
    path = state_path(root)
    if not path.exists():
        legacy = legacy_state_path(root)
        if legacy.exists():
            return _migrate_legacy(legacy)
        return HabitState()
    try:
        data = read_json(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Unreadable state file %s, starting from defaults: %s", path, e)
        return HabitState()
    if not isinstance(data, dict):
        logger.warning("State file %s is not an object, starting from defaults", path)
        return HabitState()
    return HabitState.from_dict(data)


def save_state(state: HabitState, root: Path | None = None) -> None:
    """Write the whole state atomically. Raises PersistenceError on failure."""
    path = state_path(root)
    try:
        write_json_atomic(path, state.to_dict())
    except OSError as e:
        logger.error("Failed to save state to %s: %s", path, e)
        raise PersistenceError(f"Could not save state: {e}") from e


def _migrate_legacy(path: Path) -> HabitState:
    """Build a fresh state from the v1 format (``done`` as DD-MM-YYYY)."""
    try:
        old = read_json(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable legacy file %s: %s", path, e)
        return HabitState()
    state = HabitState()
    if not isinstance(old, dict):
        return state
    for short, h in old.items():
        if not isinstance(h, dict):
            continue
        state.habits[str(short)] = Habit.from_dict(str(short), {
            "name": h.get("name", ""),
            "period": h.get("period", ""),
            "lastDone": h.get("done", ""),
            "streak": 0,
        })
    logger.info("Migrated %d habits from %s", len(state.habits), path)
    return state


# ── CRUD ──────────────────────────────────────────────────────


def add_habit(
    state: HabitState,
    short_name: str,
    name: str,
    period: str = "daily",
    count: Any = None,
) -> Habit:
    """Create a habit. Raises ValidationError or DuplicateKeyError."""
    short_name = (short_name or "").strip()
    name = (name or "").strip()
    if not short_name:
        raise ValidationError("Short name is required")
    if not name:
        raise ValidationError("Habit name is required")
    try:
        period = normalize_period(period)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    target: int | None = None
    if period == TIMES_PER_WEEK:
        try:
            target = int(count)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError("A times-per-week habit needs a target count") from None
        if isinstance(count, float) and not count.is_integer():
            raise ValidationError("Target count must be a whole number")
        if isinstance(count, bool) or target < 1:
            raise ValidationError("Target count must be a positive integer")

    if short_name in state.habits:
        raise DuplicateKeyError(short_name)

    habit = Habit(short_name=short_name, name=name, period=period, count=target)
    state.habits[short_name] = habit
    return habit


def get_habit(state: HabitState, short_name: str) -> Habit:
    habit = state.habits.get(short_name)
    if habit is None:
        raise NotFoundError(short_name)
    return habit


def delete_habit(state: HabitState, short_name: str) -> Habit:
    """Remove a habit and return it. No confirmation here; callers ask first."""
    if short_name not in state.habits:
        raise NotFoundError(short_name)
    return state.habits.pop(short_name)


def list_habits(state: HabitState, query: str = "") -> list[Habit]:
    """Habits sorted by short name, optionally filtered.

    *query* matches case-insensitively against short name or display name.
    """
    q = (query or "").strip().lower()
    result = []
    for short in sorted(state.habits):
        habit = state.habits[short]
        if q and q not in short.lower() and q not in habit.name.lower():
            continue
        result.append(habit)
    return result


def replace_all(state: HabitState, habits: dict[str, Habit]) -> None:
    """Replace every habit (import). Always resets XP to 0 and freezes to 1."""
    state.habits = dict(habits)
    state.xp = 0
    state.freeze_tokens = STARTING_FREEZES

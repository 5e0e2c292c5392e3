"""Import and export of habits as JSON or CSV.

Three import shapes are recognized:

- JSON: a habit map ``{short: {name, period, count, lastDone, streak}}`` or a
  full state export ``{"habits": {...}, "xp": ..., "freezeTokens": ...}``.
- Row CSV: header ``short,name,period,count,lastDone,streak`` (first header
  cell ``short`` or ``short_name``), one habit per line.
- Compat CSV: first header cell empty and short names across the header,
  one attribute per row (``name``, ``period``, ``lastDone``/``done``,
  ``streak``, ``count``).

Dates in DD-MM-YYYY form are normalized to YYYY-MM-DD on the way in.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any

from tracker.days import format_day, parse_day
from tracker.errors import MalformedImportError
from tracker.models import Habit, HabitState, normalize_period

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["short", "name", "period", "count", "lastDone", "streak"]


# ── Import ────────────────────────────────────────────────────


def _normalize_date(short: str, value: Any) -> str:
    try:
        return format_day(parse_day(value))
    except (TypeError, ValueError):
        logger.warning("Dropping unparseable date %r for habit %r", value, short)
        return ""


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def build_habit(short: str, fields: dict[str, Any]) -> Habit:
    """Build a Habit from loosely typed imported fields.

    Raises MalformedImportError for a blank short name or name, or an
    unknown period.
    """
    short = str(short).strip()
    if not short:
        raise MalformedImportError("Habit entry without a short name")
    name = str(fields.get("name") or "").strip()
    if not name:
        raise MalformedImportError(f"{short}: habit name is required")
    try:
        period = normalize_period(fields.get("period"))
    except ValueError as e:
        raise MalformedImportError(f"{short}: {e}") from e
    return Habit.from_dict(short, {
        "name": name,
        "period": period,
        "count": _parse_int(fields.get("count")),
        "lastDone": _normalize_date(short, fields.get("lastDone")),
        "streak": _parse_int(fields.get("streak")) or 0,
    })


def habits_from_mapping(mapping: Any) -> dict[str, Habit]:
    """Build habits from a ``{short: {...}}`` mapping."""
    if not isinstance(mapping, dict):
        raise MalformedImportError("Habits object required")
    habits: dict[str, Habit] = {}
    for short, fields in mapping.items():
        if not isinstance(fields, dict):
            raise MalformedImportError(f"Habit {short!r} is not an object")
        habit = build_habit(short, fields)
        habits[habit.short_name] = habit
    return habits


def _from_json(obj: dict[str, Any]) -> dict[str, Habit]:
    # A habit record holds plain values, so a "habits" key mapping to
    # objects is the state-export wrapper, not a habit named "habits"
    wrapped = obj.get("habits")
    if isinstance(wrapped, dict) and all(isinstance(v, dict) for v in wrapped.values()):
        return habits_from_mapping(wrapped)
    if all(isinstance(v, dict) for v in obj.values()):
        return habits_from_mapping(obj)
    raise MalformedImportError("JSON is neither a habit map nor a state export")


def _from_row_csv(rows: list[list[str]]) -> dict[str, Habit]:
    habits: dict[str, Habit] = {}
    for row in rows[1:]:
        if not any(cell.strip() for cell in row):
            continue
        cols = (row + [""] * len(CSV_COLUMNS))[: len(CSV_COLUMNS)]
        short = cols[0].strip()
        if not short:
            continue
        habits[short] = build_habit(short, dict(zip(CSV_COLUMNS, cols)))
    return habits


def _from_compat_csv(rows: list[list[str]]) -> dict[str, Habit]:
    shorts = [s.strip() for s in rows[0][1:]]
    fields: dict[str, dict[str, Any]] = {s: {} for s in shorts if s}
    for row in rows[1:]:
        if not row:
            continue
        key = row[0].strip().lower()
        if key == "done":
            key = "lastdone"
        attr = {"name": "name", "period": "period", "lastdone": "lastDone",
                "streak": "streak", "count": "count"}.get(key)
        if attr is None:
            continue
        for idx, short in enumerate(shorts):
            if not short:
                continue
            value = row[idx + 1] if idx + 1 < len(row) else ""
            fields[short][attr] = value
    return {s: build_habit(s, f) for s, f in fields.items()}


def parse_import(text: str) -> dict[str, Habit]:
    """Detect the format of *text* and return the habits it describes."""
    text = (text or "").strip()
    if not text:
        raise MalformedImportError("Empty file")

    try:
        obj = json.loads(text)
    except json.JSONDecodeError:
        obj = None
    if isinstance(obj, dict):
        return _from_json(obj)

    rows = list(csv.reader(io.StringIO(text)))
    if not rows or not rows[0]:
        raise MalformedImportError("Unrecognized file format")
    first = rows[0][0].strip().lower()
    if first in ("short", "short_name"):
        return _from_row_csv(rows)
    if first == "":
        return _from_compat_csv(rows)
    raise MalformedImportError("Unrecognized file format")


# ── Export ────────────────────────────────────────────────────


def export_json(state: HabitState) -> str:
    return json.dumps(state.to_dict(), indent=2, ensure_ascii=False)


def _write_csv(rows: list[list[Any]]) -> str:
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerows(rows)
    return buf.getvalue()


def export_csv(state: HabitState) -> str:
    """One habit per row, same columns the row-CSV importer reads."""
    rows: list[list[Any]] = [list(CSV_COLUMNS)]
    for short, h in state.habits.items():
        rows.append([
            short,
            h.name,
            h.period,
            h.count if h.count is not None else "",
            format_day(h.last_done),
            h.streak,
        ])
    return _write_csv(rows)


def export_compat_csv(state: HabitState) -> str:
    """Transposed layout: short names across, one attribute per row."""
    shorts = list(state.habits)
    habits = [state.habits[s] for s in shorts]
    rows: list[list[Any]] = [
        [""] + shorts,
        ["name"] + [h.name for h in habits],
        ["period"] + [h.period for h in habits],
        ["lastDone"] + [format_day(h.last_done) for h in habits],
        ["streak"] + [h.streak for h in habits],
        ["count"] + [h.count if h.count is not None else "" for h in habits],
    ]
    return _write_csv(rows)

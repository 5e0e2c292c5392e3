"""Typed dataclasses for the habit tracker data model.

Models use from_dict/to_dict for JSON serialization. camelCase in JSON is
mapped to snake_case in Python. Unknown keys are ignored; missing or
malformed values fall back to defaults so that a damaged state file still
loads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from tracker.days import format_day, parse_day

DAILY = "daily"
WEEKLY = "weekly"
TIMES_PER_WEEK = "times-per-week"
PERIODS = (DAILY, WEEKLY, TIMES_PER_WEEK)

STARTING_FREEZES = 1


def normalize_period(value: Any) -> str:
    """Map user input to one of PERIODS. Blank means daily.

    Accepts the legacy spelling 'times per week'. Raises ValueError otherwise.
    """
    s = str(value or "").strip().lower()
    if not s:
        return DAILY
    s = s.replace("_", "-").replace(" ", "-")
    if s in PERIODS:
        return s
    raise ValueError(f"Unknown period: {value!r}")


def _non_negative_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return n if n >= 0 else default


def _positive_int_or_none(value: Any) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def _safe_day(value: Any) -> date | None:
    try:
        return parse_day(value)
    except (TypeError, ValueError):
        return None


def _first(d: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in d:
            return d[k]
    return default


# ── Habit ─────────────────────────────────────────────────────


@dataclass
class Habit:
    short_name: str
    name: str = ""
    period: str = DAILY
    count: int | None = None  # target per week, times-per-week only
    last_done: date | None = None
    streak: int = 0
    frozen_day: date | None = None  # missed day already forgiven by a freeze

    @classmethod
    def from_dict(cls, short_name: str, d: dict[str, Any]) -> Habit:
        if not d or not isinstance(d, dict):
            return cls(short_name=short_name)
        try:
            period = normalize_period(d.get("period"))
        except ValueError:
            period = DAILY
        count = _positive_int_or_none(_first(d, "count", "targetCount"))
        if period == TIMES_PER_WEEK:
            count = count or 1
        else:
            count = None
        last_done = _safe_day(_first(d, "lastDone", "lastCompletedDay"))
        streak = _non_negative_int(d.get("streak"), 0) if last_done else 0
        return cls(
            short_name=short_name,
            name=str(_first(d, "name", "displayName", default="") or ""),
            period=period,
            count=count,
            last_done=last_done,
            streak=streak,
            frozen_day=_safe_day(d.get("frozenDay")) if last_done else None,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "period": self.period,
            "count": self.count,
            "lastDone": format_day(self.last_done),
            "streak": self.streak,
        }
        if self.frozen_day:
            d["frozenDay"] = format_day(self.frozen_day)
        return d

    def period_label(self) -> str:
        if self.period == TIMES_PER_WEEK and self.count:
            return f"{self.period} ({self.count}/wk)"
        return self.period


# ── State ─────────────────────────────────────────────────────


@dataclass
class HabitState:
    habits: dict[str, Habit] = field(default_factory=dict)
    xp: int = 0
    freeze_tokens: int = STARTING_FREEZES

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HabitState:
        if not d or not isinstance(d, dict):
            return cls()
        raw_habits = d.get("habits")
        habits = {}
        if isinstance(raw_habits, dict):
            for short, hd in raw_habits.items():
                if isinstance(hd, dict):
                    habits[str(short)] = Habit.from_dict(str(short), hd)
        return cls(
            habits=habits,
            xp=_non_negative_int(d.get("xp"), 0),
            freeze_tokens=_non_negative_int(
                _first(d, "freezeTokens", "freezes"), STARTING_FREEZES
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "habits": {s: h.to_dict() for s, h in self.habits.items()},
            "xp": self.xp,
            "freezeTokens": self.freeze_tokens,
        }

    def longest_streak(self) -> int:
        return max((h.streak for h in self.habits.values()), default=0)

"""Streak and freeze-token transitions.

A single rule decides what a gap between the last completion and the
observation day does to a streak:

    gap 0 or 1  streak still valid (done today, or done yesterday)
    gap 2       one missed day: a freeze token forgives it, otherwise reset
    gap > 2     reset, no forgiveness

The same rule drives the passive settlement sweep (decay only, no XP) and
the active completion of a habit (streak continues or restarts at 1, XP
awarded). A missed day is forgiven at most once: the habit remembers it in
``frozen_day`` so repeated sweeps on the same day are idempotent and a
completion after a sweep does not pay twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from tracker.days import day_gap
from tracker.errors import AlreadyDoneToday
from tracker.models import Habit, HabitState
from tracker.progress import xp_for_completion
from tracker.store import get_habit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    streak: int
    freeze_used: bool = False


@dataclass
class Settlement:
    """What a sweep changed: habits forgiven by a token and habits reset."""

    day: date
    forgiven: list[str] = field(default_factory=list)
    reset: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.forgiven or self.reset)


@dataclass(frozen=True)
class Completion:
    short_name: str
    streak: int
    xp_gain: int
    freeze_used: bool


def apply_gap(
    streak: int,
    gap: int,
    freeze_tokens: int,
    completing: bool = False,
    already_forgiven: bool = False,
) -> Transition:
    """Apply the gap rule to *streak*.

    *completing* selects the active-completion outcome (continue with +1 or
    restart at 1) over the passive one (keep or reset to 0).
    *already_forgiven* means the single missed day of a gap of 2 was paid for
    earlier, so no further token is taken. Negative gaps leave the streak
    untouched.
    """
    if gap < 0:
        return Transition(streak)
    if gap == 0:
        if completing:
            raise AlreadyDoneToday()
        return Transition(streak)
    if gap == 1:
        return Transition(streak + 1 if completing else streak)
    if gap == 2:
        if already_forgiven:
            return Transition(streak + 1 if completing else streak)
        if freeze_tokens > 0:
            return Transition(streak + 1 if completing else streak, freeze_used=True)
    return Transition(1 if completing else 0)


def _missed_day(habit: Habit) -> date | None:
    if habit.last_done is None:
        return None
    return habit.last_done + timedelta(days=1)


def _already_forgiven(habit: Habit) -> bool:
    return habit.frozen_day is not None and habit.frozen_day == _missed_day(habit)


def settle(state: HabitState, day: date) -> Settlement:
    """Decay stale streaks as of *day*, consuming freeze tokens where allowed.

    Never changes ``last_done`` and never awards XP.
    """
    report = Settlement(day=day)
    for short, habit in state.habits.items():
        if habit.last_done is None:
            habit.streak = 0
            continue
        gap = day_gap(habit.last_done, day)
        if gap < 0:
            logger.warning(
                "Habit %r last done %s, after observation day %s; leaving streak as is",
                short, habit.last_done, day,
            )
            continue
        t = apply_gap(
            habit.streak, gap, state.freeze_tokens,
            already_forgiven=_already_forgiven(habit),
        )
        if t.freeze_used:
            state.freeze_tokens -= 1
            habit.frozen_day = _missed_day(habit)
            report.forgiven.append(short)
            logger.info("Freeze token used for %r (missed %s)", short, habit.frozen_day)
        elif t.streak != habit.streak:
            report.reset.append(short)
            logger.info("Streak of %r reset from %d", short, habit.streak)
        habit.streak = t.streak
    return report


def complete(state: HabitState, short_name: str, day: date) -> Completion:
    """Mark *short_name* done on *day*: update streak, freezes and XP."""
    habit = get_habit(state, short_name)
    freeze_used = False
    if habit.last_done is None:
        new_streak = 1
    else:
        gap = day_gap(habit.last_done, day)
        if gap < 0:
            logger.warning(
                "Habit %r last done %s, after %s; treating as already done",
                short_name, habit.last_done, day,
            )
        if gap <= 0:
            raise AlreadyDoneToday(short_name)
        t = apply_gap(
            habit.streak, gap, state.freeze_tokens,
            completing=True, already_forgiven=_already_forgiven(habit),
        )
        new_streak = t.streak
        freeze_used = t.freeze_used

    if freeze_used:
        state.freeze_tokens -= 1
    habit.streak = new_streak
    habit.last_done = day
    habit.frozen_day = None
    xp_gain = xp_for_completion(new_streak)
    state.xp += xp_gain
    logger.info("Completed %r on %s: streak %d, +%d XP", short_name, day, new_streak, xp_gain)
    return Completion(short_name, new_streak, xp_gain, freeze_used)

"""XP award curve, leveling, and the motivation line."""

from __future__ import annotations

BASE_XP = 10
STREAK_BONUS_XP = 5
XP_PER_LEVEL = 100
FREEZE_PRICE = 50


def xp_for_completion(streak: int) -> int:
    """XP earned by a completion, given the streak *after* the completion.

    10 for the first day, plus 5 for every consecutive day beyond it.
    """
    return BASE_XP + max(0, streak - 1) * STREAK_BONUS_XP


def level(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1


def level_progress(xp: int) -> int:
    """Percent (0-99) toward the next level."""
    return xp % XP_PER_LEVEL


def motivation_message(longest_streak: int, habit_count: int) -> str:
    """One-line encouragement based on the longest current streak."""
    if habit_count == 0:
        return "Add your first habit to get started!"
    if longest_streak == 0:
        return "Let's build some momentum! Complete a habit today."
    if longest_streak < 3:
        return f"Nice! You have a {longest_streak}-day streak going."
    if longest_streak < 7:
        return f"Great job! A {longest_streak}-day streak! Keep going!"
    if longest_streak < 14:
        return f"Awesome! Your {longest_streak}-day streak is impressive."
    return f"Incredible! You're on a {longest_streak}-day streak!"

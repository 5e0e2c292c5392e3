"""Tests for tracker/economy.py — freeze purchases and status."""

import pytest
from tracker.economy import purchase_freeze, status
from tracker.errors import InsufficientFundsError
from tracker.models import Habit, HabitState


def test_purchase_with_exact_price():
    s = HabitState(xp=50, freeze_tokens=1)
    purchase_freeze(s)
    assert s.xp == 0
    assert s.freeze_tokens == 2


def test_purchase_insufficient_xp():
    s = HabitState(xp=49, freeze_tokens=1)
    with pytest.raises(InsufficientFundsError) as exc:
        purchase_freeze(s)
    assert exc.value.xp == 49
    assert exc.value.price == 50
    assert s.xp == 49
    assert s.freeze_tokens == 1


def test_purchase_custom_price():
    s = HabitState(xp=30, freeze_tokens=0)
    purchase_freeze(s, price=20)
    assert s.xp == 10
    assert s.freeze_tokens == 1


def test_repeated_purchases():
    s = HabitState(xp=120, freeze_tokens=0)
    purchase_freeze(s)
    purchase_freeze(s)
    assert s.xp == 20
    assert s.freeze_tokens == 2
    with pytest.raises(InsufficientFundsError):
        purchase_freeze(s)


def test_status():
    s = HabitState(
        habits={
            "rd": Habit(short_name="rd", name="Read", streak=3),
            "gym": Habit(short_name="gym", name="Gym", streak=5),
        },
        xp=120,
        freeze_tokens=2,
    )
    result = status(s)
    assert result["xp"] == 120
    assert result["freezeTokens"] == 2
    assert result["longestStreak"] == 5
    assert result["level"] == 2
    assert result["levelProgress"] == 20
    assert result["habitCount"] == 2
    assert "5-day" in result["motivation"]


def test_status_empty():
    result = status(HabitState())
    assert result["longestStreak"] == 0
    assert result["habitCount"] == 0

"""Freeze-token purchases and the aggregate status view."""

from __future__ import annotations

import logging
from typing import Any

from tracker.errors import InsufficientFundsError
from tracker.models import HabitState
from tracker.progress import FREEZE_PRICE, level, level_progress, motivation_message

logger = logging.getLogger(__name__)


def purchase_freeze(state: HabitState, price: int = FREEZE_PRICE) -> None:
    """Spend *price* XP on one freeze token."""
    if state.xp < price:
        raise InsufficientFundsError(state.xp, price)
    state.xp -= price
    state.freeze_tokens += 1
    logger.info("Freeze token purchased: %d tokens, %d XP left", state.freeze_tokens, state.xp)


def status(state: HabitState) -> dict[str, Any]:
    longest = state.longest_streak()
    return {
        "xp": state.xp,
        "freezeTokens": state.freeze_tokens,
        "longestStreak": longest,
        "level": level(state.xp),
        "levelProgress": level_progress(state.xp),
        "habitCount": len(state.habits),
        "motivation": motivation_message(longest, len(state.habits)),
    }

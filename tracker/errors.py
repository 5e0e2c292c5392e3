"""Error taxonomy for habit operations.

Every error carries a machine-readable ``kind`` and a human message so the
transport layers can report it without knowing the concrete class.
"""

from __future__ import annotations

from typing import Any


class HabitError(Exception):
    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "error": self.kind, "message": self.message}


class ValidationError(HabitError, ValueError):
    """A required field is missing, blank or out of range."""

    kind = "validation"


class DuplicateKeyError(HabitError, ValueError):
    kind = "duplicate_key"

    def __init__(self, short_name: str) -> None:
        super().__init__(f"Habit already exists: {short_name}")
        self.short_name = short_name


class NotFoundError(HabitError):
    kind = "not_found"

    def __init__(self, short_name: str) -> None:
        super().__init__(f"Habit not found: {short_name}")
        self.short_name = short_name


class AlreadyDoneToday(HabitError):
    """A completion was reported twice on the same calendar day."""

    kind = "already_done_today"

    def __init__(self, short_name: str = "") -> None:
        msg = f"Already marked done today: {short_name}" if short_name else "Already marked done today"
        super().__init__(msg)
        self.short_name = short_name


class InsufficientFundsError(HabitError):
    kind = "insufficient_funds"

    def __init__(self, xp: int, price: int) -> None:
        super().__init__(f"Not enough XP: have {xp}, need {price}")
        self.xp = xp
        self.price = price


class PersistenceError(HabitError):
    """Reading or writing durable state failed."""

    kind = "io_error"


class MalformedImportError(HabitError, ValueError):
    kind = "malformed_import"

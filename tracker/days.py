"""Calendar-day helpers: today, day gaps, and date parsing/formatting."""

from __future__ import annotations

import re
from datetime import date

_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LEGACY_RE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")


def today() -> date:
    """The local calendar day."""
    return date.today()


def day_gap(a: date, b: date) -> int:
    """Whole calendar days from *a* to *b* (negative when *b* is earlier)."""
    return (b - a).days


def parse_day(value: str | date | None) -> date | None:
    """Parse ``YYYY-MM-DD`` or legacy ``DD-MM-YYYY`` into a date.

    Blank input gives None. Anything else raises ValueError.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None
    # Exported values may carry a time component
    if len(s) > 10 and s[10] in "T ":
        s = s[:10]
    if _ISO_RE.match(s):
        return date.fromisoformat(s)
    m = _LEGACY_RE.match(s)
    if m:
        d, mo, y = (int(g) for g in m.groups())
        return date(y, mo, d)
    raise ValueError(f"Invalid calendar day: {value!r}")


def format_day(day: date | None) -> str:
    """Canonical ``YYYY-MM-DD``; empty string when absent."""
    return day.isoformat() if day else ""


def display_day(day: date | None) -> str:
    """``DD-MM-YYYY`` for display; ``-`` when absent."""
    if day is None:
        return "-"
    return day.strftime("%d-%m-%Y")

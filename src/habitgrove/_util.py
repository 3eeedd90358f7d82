"""Small date/time helpers shared by models and services."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""

    return datetime.now(timezone.utc)


def day_key(value: date | str | None = None) -> str:
    """Normalize a date (or ISO string, or None for today) to ``YYYY-MM-DD``."""

    if value is None:
        return date.today().isoformat()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(value.strip()).isoformat()


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a UI would (0.5 goes up), not banker's rounding."""

    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale

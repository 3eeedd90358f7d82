"""Streak helpers computed from completion events.

Streaks are never stored: every call rescans the ledger, so the result always
agrees with the events it was given.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from ..models.habit import HabitCompletion

STREAK_LOOKBACK_DAYS = 365


def completed_days(entries: Iterable[HabitCompletion], habit_id: str | None = None) -> set[str]:
    """Return the day keys with a ``completed=True`` event, optionally for one habit."""

    return {
        e.completed_date
        for e in entries
        if e.completed and (habit_id is None or e.habit_id == habit_id)
    }


def compute_streak(days: Iterable[str], as_of: date) -> int:
    """Count consecutive completed days walking back from ``as_of``.

    A missing ``as_of`` day does not break the walk (today may simply not be
    done yet); any later gap does. The walk covers at most 365 days.
    """

    done = days if isinstance(days, (set, frozenset)) else set(days)
    if not done:
        return 0

    streak = 0
    for offset in range(STREAK_LOOKBACK_DAYS):
        key = (as_of - timedelta(days=offset)).isoformat()
        if key in done:
            streak += 1
        elif offset > 0:
            break
    return streak


def longest_streak(days: Iterable[str]) -> int:
    """Return the longest run of consecutive days found anywhere in ``days``."""

    ordered = sorted(date.fromisoformat(d) for d in set(days))
    longest = 0
    run = 0
    last_day: date | None = None
    for d in ordered:
        if last_day is not None and d == last_day + timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        last_day = d
    return longest


def streaks_for(
    habit_ids: Iterable[str], entries: Iterable[HabitCompletion], as_of: date
) -> dict[str, int]:
    """Map each habit id to its current streak, scanning ``entries`` once."""

    by_habit: dict[str, set[str]] = {}
    for e in entries:
        if e.completed:
            by_habit.setdefault(e.habit_id, set()).add(e.completed_date)
    return {hid: compute_streak(by_habit.get(hid, set()), as_of) for hid in habit_ids}


__all__ = [
    "STREAK_LOOKBACK_DAYS",
    "completed_days",
    "compute_streak",
    "longest_streak",
    "streaks_for",
]

"""Health score: the 0-100 vigor value that drives the plant visual."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from .._util import round_half_up
from ..models.habit import Habit, HabitCompletion
from .streaks import streaks_for

NEUTRAL_HEALTH = 50
TODAY_WEIGHT = 50
STREAK_WEIGHT = 50
POINTS_PER_STREAK_DAY = 5


def compute_health(
    active_habits: Sequence[Habit],
    completions: Iterable[HabitCompletion],
    as_of: date | None = None,
) -> int:
    """Blend today's completion ratio with the average streak.

    Half the score is today's ratio, half is ``min(avg_streak * 5, 50)``, so
    streaks stop adding once the average reaches 10 days. With nothing active
    the score is a neutral 50.
    """

    if not active_habits:
        return NEUTRAL_HEALTH

    as_of = as_of or date.today()
    today = as_of.isoformat()
    events = list(completions)
    ids = [h.id for h in active_habits]

    done_today = {e.habit_id for e in events if e.completed and e.completed_date == today}
    completed_today = sum(1 for hid in ids if hid in done_today)

    streak_map = streaks_for(ids, events, as_of)
    avg_streak = sum(streak_map[hid] for hid in ids) / len(ids)

    today_score = completed_today / len(ids) * TODAY_WEIGHT
    streak_score = min(avg_streak * POINTS_PER_STREAK_DAY, STREAK_WEIGHT)
    return int(max(0, min(100, round_half_up(today_score + streak_score))))


__all__ = ["NEUTRAL_HEALTH", "compute_health"]

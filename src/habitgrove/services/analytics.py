"""Analytics aggregation for the reporting view.

Everything here is recomputed from the raw collections on each call; nothing
is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Sequence

from .._util import round_half_up
from ..models.daily_log import DailyLog
from ..models.disruption import DisruptionEpisode
from ..models.habit import Habit, HabitCompletion
from .streaks import streaks_for

WINDOW_DAYS = 30
MOOD_HISTORY_LIMIT = 30


@dataclass(slots=True)
class HabitStreak:
    habit_id: str
    habit_name: str
    streak: int


@dataclass(slots=True)
class MoodPoint:
    date: str
    mood: int


@dataclass(slots=True)
class AnalyticsSnapshot:
    """Summary statistics derived from habits, completions, logs and episodes."""

    average_mood: float = 0.0
    longest_streak: int = 0
    # Sum of every habit's streak, not a single "current streak".
    current_streak_sum: int = 0
    total_completions: int = 0
    disruption_count: int = 0
    completion_rate: float = 0.0
    streaks_by_habit: list[HabitStreak] = field(default_factory=list)
    mood_history: list[MoodPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Payload shape consumed by the reporting view."""

        return {
            "averageMood": self.average_mood,
            "longestStreak": self.longest_streak,
            "currentStreak": self.current_streak_sum,
            "totalCompletions": self.total_completions,
            "disruptionCount": self.disruption_count,
            "completionRate": self.completion_rate,
            "streaksByHabit": [
                {"habitId": s.habit_id, "habitName": s.habit_name, "streak": s.streak}
                for s in self.streaks_by_habit
            ],
            "moodHistory": [{"date": m.date, "mood": m.mood} for m in self.mood_history],
        }


def completion_rate(
    habits: Sequence[Habit],
    completions: Iterable[HabitCompletion],
    today: date,
    window_days: int = WINDOW_DAYS,
) -> float:
    """Completed events in the window over ``active habits * window_days``.

    The denominator uses today's active count for the whole window, so the rate
    can exceed 1.0 or understate new habits. Kept as-is because it is the
    number users already see.
    """

    expected = sum(1 for h in habits if h.is_active) * window_days
    if expected == 0:
        return 0.0
    since = (today - timedelta(days=window_days - 1)).isoformat()
    recent = sum(1 for c in completions if c.completed and c.completed_date >= since)
    return round_half_up(recent / expected, 2)


def mood_summary(logs: Iterable[DailyLog]) -> tuple[float, list[MoodPoint]]:
    """Return (average mood to one decimal, oldest-to-newest mood history)."""

    with_mood = sorted(
        (log for log in logs if log.mood is not None),
        key=lambda log: log.log_date,
        reverse=True,
    )
    if not with_mood:
        return 0.0, []
    average = round_half_up(sum(log.mood for log in with_mood) / len(with_mood), 1)
    history = [MoodPoint(date=log.log_date, mood=log.mood) for log in with_mood[:MOOD_HISTORY_LIMIT]]
    history.reverse()
    return average, history


def build_analytics(
    *,
    habits: Sequence[Habit],
    completions: Iterable[HabitCompletion],
    logs: Iterable[DailyLog],
    episodes: Iterable[DisruptionEpisode],
    today: date | None = None,
) -> AnalyticsSnapshot:
    """Compose the analytics snapshot for one owner."""

    today = today or date.today()
    events = list(completions)

    streak_map = streaks_for([h.id for h in habits], events, today)
    per_habit = [HabitStreak(habit_id=h.id, habit_name=h.name, streak=streak_map[h.id]) for h in habits]
    values = [s.streak for s in per_habit]
    average_mood, history = mood_summary(logs)

    return AnalyticsSnapshot(
        average_mood=average_mood,
        longest_streak=max(values) if values else 0,
        current_streak_sum=sum(values),
        total_completions=sum(1 for c in events if c.completed),
        disruption_count=sum(1 for _ in episodes),
        completion_rate=completion_rate(habits, events, today),
        streaks_by_habit=per_habit,
        mood_history=history,
    )


__all__ = [
    "AnalyticsSnapshot",
    "HabitStreak",
    "MoodPoint",
    "build_analytics",
    "completion_rate",
    "mood_summary",
]

"""SQLModel table exports."""

from .daily_log import DailyLog
from .disruption import DETECTABLE_TYPES, DisruptionEpisode, DisruptionType
from .habit import MAX_ACTIVE_HABITS, Habit, HabitCategory, HabitCompletion
from .settings import OwnerSetting

__all__ = [
    "DETECTABLE_TYPES",
    "DailyLog",
    "DisruptionEpisode",
    "DisruptionType",
    "Habit",
    "HabitCategory",
    "HabitCompletion",
    "MAX_ACTIVE_HABITS",
    "OwnerSetting",
]

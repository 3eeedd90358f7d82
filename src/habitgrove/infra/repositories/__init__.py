"""Concrete repository implementations using SQLModel."""

from .completion import SQLModelCompletionRepository
from .daily_log import SQLModelDailyLogRepository
from .disruption import SQLModelDisruptionRepository
from .habit import SQLModelHabitRepository
from .settings import SQLModelSettingsRepository

__all__ = [
    "SQLModelCompletionRepository",
    "SQLModelDailyLogRepository",
    "SQLModelDisruptionRepository",
    "SQLModelHabitRepository",
    "SQLModelSettingsRepository",
]

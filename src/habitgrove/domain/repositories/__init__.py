"""Repository protocol definitions for domain layer."""

from .completion import CompletionRepository
from .daily_log import DailyLogRepository
from .disruption import DisruptionRepository
from .habit import HabitRepository
from .settings import SettingsRepository

__all__ = [
    "CompletionRepository",
    "DailyLogRepository",
    "DisruptionRepository",
    "HabitRepository",
    "SettingsRepository",
]

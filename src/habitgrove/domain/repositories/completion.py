"""Completion ledger repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.habit import HabitCompletion


class CompletionRepository(Protocol):
    """Stores at most one completion event per (habit, day)."""

    def get(self, habit_id: str, day: str, *, owner_id: str) -> Optional[HabitCompletion]:
        """Get the event for a habit on a day."""
        ...

    def list_for_owner(self, *, owner_id: str, since: Optional[str] = None) -> list[HabitCompletion]:
        """All events for an owner, optionally only those dated on/after ``since``."""
        ...

    def list_for_habit(self, habit_id: str, *, owner_id: str) -> list[HabitCompletion]:
        ...

    def upsert(self, completion: HabitCompletion, *, owner_id: str) -> HabitCompletion:
        """Insert or update the event keyed on (habit_id, completed_date)."""
        ...

    def delete(self, habit_id: str, day: str, *, owner_id: str) -> None:
        ...

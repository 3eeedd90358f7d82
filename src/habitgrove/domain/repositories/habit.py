"""Habit repository protocol."""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from ...models.habit import Habit, HabitCompletion


class HabitRepository(Protocol):
    """Repository for managing habit entities of one owner at a time."""

    def get_by_id(self, habit_id: str, *, owner_id: str) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_all(self, *, owner_id: str, include_inactive: bool = True) -> list[Habit]:
        """List habits in display order."""
        ...

    def list_active(self, *, owner_id: str) -> list[Habit]:
        """List only active habits."""
        ...

    def count_active(self, *, owner_id: str) -> int:
        ...

    def create(self, habit: Habit, *, owner_id: str) -> Habit:
        """Insert a habit as-is, without any cap check."""
        ...

    def create_within_cap(self, habit: Habit, cap: int, *, owner_id: str) -> Optional[Habit]:
        """Append an active habit unless ``cap`` active habits already exist.

        Count and insert happen in one transaction. Returns None when the cap is hit.
        """
        ...

    def activate_within_cap(self, habit_id: str, cap: int, *, owner_id: str) -> Optional[Habit]:
        """Activate a habit unless ``cap`` active habits already exist.

        Returns None (and changes nothing) when the cap is hit.
        """
        ...

    def deactivate(
        self, habit_id: str, *, owner_id: str, reason: Optional[str] = None
    ) -> Optional[Habit]:
        """Deactivate a habit, recording an optional pause reason."""
        ...

    def delete_with_history(self, habit_id: str, *, owner_id: str) -> Optional[tuple[int, int]]:
        """Delete a habit with its completions and paused-set references, atomically.

        Returns ``(completions_removed, episodes_touched)`` or None when missing.
        """
        ...

    def import_batch(
        self,
        habits: Iterable[Habit],
        completions: Iterable[HabitCompletion],
        cap: int,
        *,
        owner_id: str,
        over_cap_reason: str,
    ) -> list[Habit]:
        """Insert imported habits and completions in a single transaction."""
        ...

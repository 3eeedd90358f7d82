"""Habit registry: creation, activation and removal of an owner's habits."""

from __future__ import annotations

from typing import Optional

from ..domain.repositories import HabitRepository
from ..errors import CapacityExceeded, InvalidInput, NotFound
from ..logging_config import get_logger
from ..models.habit import MAX_ACTIVE_HABITS, Habit, HabitCategory
from .disruption import filter_expected_habits

logger = get_logger("registry")

NAME_MAX_LENGTH = 80


def normalize_category(category: str | HabitCategory) -> str:
    """Return the canonical category value or raise InvalidInput."""

    raw = category.value if isinstance(category, HabitCategory) else str(category or "")
    try:
        return HabitCategory(raw.strip().lower()).value
    except ValueError:
        allowed = ", ".join(c.value for c in HabitCategory)
        raise InvalidInput(f"Unknown category {raw!r}; expected one of: {allowed}") from None


class HabitRegistry:
    """Owns the habit set of a single owner and the active-habit cap."""

    def __init__(
        self,
        *,
        habit_repo: HabitRepository,
        owner_id: str,
        cap: int = MAX_ACTIVE_HABITS,
    ):
        self.habit_repo = habit_repo
        self.owner_id = owner_id
        self.cap = cap

    def habits(self) -> list[Habit]:
        return self.habit_repo.list_all(owner_id=self.owner_id)

    def active_habits(self) -> list[Habit]:
        return self.habit_repo.list_active(owner_id=self.owner_id)

    def active_count(self) -> int:
        return self.habit_repo.count_active(owner_id=self.owner_id)

    def expected_habits(self, disrupted: bool) -> list[Habit]:
        """Habits the owner is expected to do today given the disruption state."""

        return filter_expected_habits(self.habits(), disrupted)

    def get(self, habit_id: str) -> Habit:
        habit = self.habit_repo.get_by_id(habit_id, owner_id=self.owner_id)
        if habit is None:
            raise NotFound(f"Habit {habit_id} does not exist")
        return habit

    def add_habit(self, name: str, category: str | HabitCategory) -> Habit:
        """Create a new active habit at the end of the display order."""

        clean_name = (name or "").strip()
        if not clean_name:
            raise InvalidInput("Habit name must not be empty")
        if len(clean_name) > NAME_MAX_LENGTH:
            raise InvalidInput(f"Habit name must be at most {NAME_MAX_LENGTH} characters")
        category_value = normalize_category(category)

        habit = Habit(
            owner_id=self.owner_id,
            name=clean_name,
            category=category_value,
            is_active=True,
        )
        created = self.habit_repo.create_within_cap(habit, self.cap, owner_id=self.owner_id)
        if created is None:
            raise CapacityExceeded(
                f"Maximum {self.cap} active habits allowed. Deactivate one first."
            )
        logger.info(
            "Habit added",
            extra={"owner_id": self.owner_id, "habit_id": created.id, "category": category_value},
        )
        return created

    def remove_habit(self, habit_id: str) -> bool:
        """Delete a habit with its completions and paused-set references.

        All three go in one transaction. Removing an id that does not exist is
        a no-op and returns False.
        """

        outcome = self.habit_repo.delete_with_history(habit_id, owner_id=self.owner_id)
        if outcome is None:
            return False
        removed_events, touched = outcome
        logger.info(
            "Habit removed",
            extra={
                "owner_id": self.owner_id,
                "habit_id": habit_id,
                "completions_removed": removed_events,
                "episodes_touched": touched,
            },
        )
        return True

    def toggle_active(self, habit_id: str) -> Habit:
        """Flip the active flag; activation re-checks the cap."""

        habit = self.get(habit_id)
        if habit.is_active:
            updated = self.habit_repo.deactivate(habit_id, owner_id=self.owner_id)
        else:
            updated = self.habit_repo.activate_within_cap(habit_id, self.cap, owner_id=self.owner_id)
            if updated is None:
                raise CapacityExceeded(f"Maximum {self.cap} active habits allowed.")
        if updated is None:
            raise NotFound(f"Habit {habit_id} does not exist")
        return updated

    def pause(self, habit_id: str, reason: Optional[str]) -> Habit:
        """Deactivate a habit on the system's initiative, recording why."""

        updated = self.habit_repo.deactivate(
            habit_id, owner_id=self.owner_id, reason=(reason or "").strip() or None
        )
        if updated is None:
            raise NotFound(f"Habit {habit_id} does not exist")
        logger.info(
            "Habit paused",
            extra={"owner_id": self.owner_id, "habit_id": habit_id, "reason": updated.pause_reason},
        )
        return updated


__all__ = ["HabitRegistry", "NAME_MAX_LENGTH", "normalize_category"]

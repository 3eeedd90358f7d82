"""Completion ledger: the only writer of completion events."""

from __future__ import annotations

from datetime import date

from .._util import day_key
from ..domain.repositories import CompletionRepository, HabitRepository
from ..errors import NotFound
from ..logging_config import get_logger
from ..models.habit import HabitCompletion
from . import streaks

logger = get_logger("ledger")


class CompletionLedger:
    """Dated completion events for one owner."""

    def __init__(
        self,
        *,
        completion_repo: CompletionRepository,
        habit_repo: HabitRepository,
        owner_id: str,
    ):
        self.completion_repo = completion_repo
        self.habit_repo = habit_repo
        self.owner_id = owner_id

    def toggle_completion(self, habit_id: str, on: date | str | None = None) -> bool:
        """Flip completion for (habit, day) and return the new state.

        A completed event is deleted rather than kept with ``completed=False``.
        """

        if self.habit_repo.get_by_id(habit_id, owner_id=self.owner_id) is None:
            raise NotFound(f"Habit {habit_id} does not exist")
        day = day_key(on)
        existing = self.completion_repo.get(habit_id, day, owner_id=self.owner_id)
        if existing is not None and existing.completed:
            self.completion_repo.delete(habit_id, day, owner_id=self.owner_id)
            completed = False
        else:
            self.completion_repo.upsert(
                HabitCompletion(
                    habit_id=habit_id, owner_id=self.owner_id, completed_date=day, completed=True
                ),
                owner_id=self.owner_id,
            )
            completed = True
        logger.debug(
            "Completion toggled",
            extra={"habit_id": habit_id, "day": day, "completed": completed},
        )
        return completed

    def is_completed_on(self, habit_id: str, on: date | str | None = None) -> bool:
        event = self.completion_repo.get(habit_id, day_key(on), owner_id=self.owner_id)
        return bool(event and event.completed)

    def completions(self, since: date | str | None = None) -> list[HabitCompletion]:
        return self.completion_repo.list_for_owner(
            owner_id=self.owner_id, since=day_key(since) if since is not None else None
        )

    def compute_streak(self, habit_id: str, as_of: date | None = None) -> int:
        events = self.completion_repo.list_for_habit(habit_id, owner_id=self.owner_id)
        return streaks.compute_streak(streaks.completed_days(events), as_of or date.today())

    def longest_streak(self, habit_id: str) -> int:
        events = self.completion_repo.list_for_habit(habit_id, owner_id=self.owner_id)
        return streaks.longest_streak(streaks.completed_days(events))


__all__ = ["CompletionLedger"]

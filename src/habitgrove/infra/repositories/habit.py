"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...models.disruption import DisruptionEpisode
from ...models.habit import Habit, HabitCompletion
from ..database import SessionFactory


def _count_active(session: Session, owner_id: str) -> int:
    statement = (
        select(func.count())
        .select_from(Habit)
        .where(Habit.owner_id == owner_id, Habit.is_active == True)  # noqa: E712
    )
    return int(session.exec(statement).one())


def _next_display_order(session: Session, owner_id: str) -> int:
    highest = session.exec(
        select(func.max(Habit.display_order)).where(Habit.owner_id == owner_id)
    ).one()
    return 0 if highest is None else int(highest) + 1


def _delete_completions(session: Session, habit_id: str, owner_id: str) -> int:
    rows = session.exec(
        select(HabitCompletion)
        .where(HabitCompletion.owner_id == owner_id)
        .where(HabitCompletion.habit_id == habit_id)
    ).all()
    for row in rows:
        session.delete(row)
    return len(rows)


def _strip_paused_habit(session: Session, habit_id: str, owner_id: str) -> int:
    episodes = session.exec(
        select(DisruptionEpisode).where(DisruptionEpisode.owner_id == owner_id)
    ).all()
    touched = 0
    for episode in episodes:
        if habit_id in (episode.paused_habit_ids or []):
            # Reassign so the JSON column is flagged dirty.
            episode.paused_habit_ids = [hid for hid in episode.paused_habit_ids if hid != habit_id]
            session.add(episode)
            touched += 1
    return touched


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, habit_id: str, *, owner_id: str) -> Optional[Habit]:
        """Fetch one of the owner's habits, or None."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.owner_id == owner_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, owner_id: str, include_inactive: bool = True) -> list[Habit]:
        """List habits ordered by display order, then creation time."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.owner_id == owner_id)
                .order_by(Habit.display_order, Habit.created_at)  # type: ignore[arg-type]
            )
            if not include_inactive:
                statement = statement.where(Habit.is_active == True)  # noqa: E712
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_active(self, *, owner_id: str) -> list[Habit]:
        """List active habits only."""
        return self.list_all(owner_id=owner_id, include_inactive=False)

    def count_active(self, *, owner_id: str) -> int:
        """Number of active habits the owner has."""
        with self.session_factory() as session:
            return _count_active(session, owner_id)

    def create(self, habit: Habit, *, owner_id: str) -> Habit:
        """Insert a habit without any cap check."""
        with self.session_factory() as session:
            habit.owner_id = owner_id
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def create_within_cap(self, habit: Habit, cap: int, *, owner_id: str) -> Optional[Habit]:
        """Insert an active habit at the end of the order unless the cap is reached."""
        with self.session_factory() as session:
            # Row locks on backends that have them; SQLite serializes writers at BEGIN.
            session.exec(
                select(Habit.id)
                .where(Habit.owner_id == owner_id, Habit.is_active == True)  # noqa: E712
                .with_for_update()
            ).all()
            if _count_active(session, owner_id) >= cap:
                return None
            habit.owner_id = owner_id
            habit.is_active = True
            habit.display_order = _next_display_order(session, owner_id)
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def activate_within_cap(self, habit_id: str, cap: int, *, owner_id: str) -> Optional[Habit]:
        """Activate a habit unless the cap is reached; None leaves it untouched."""
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit)
                .where(Habit.id == habit_id, Habit.owner_id == owner_id)
                .with_for_update()
            ).first()
            if habit is None:
                return None
            if not habit.is_active:
                if _count_active(session, owner_id) >= cap:
                    return None
                habit.is_active = True
                habit.pause_reason = None
                session.add(habit)
                session.commit()
                session.refresh(habit)
            session.expunge(habit)
            return habit

    def deactivate(
        self, habit_id: str, *, owner_id: str, reason: Optional[str] = None
    ) -> Optional[Habit]:
        """Mark a habit inactive and record the pause reason."""
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.owner_id == owner_id)
            ).first()
            if habit is None:
                return None
            habit.is_active = False
            habit.pause_reason = reason
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def delete_with_history(self, habit_id: str, *, owner_id: str) -> Optional[tuple[int, int]]:
        """Delete a habit, its completions and its paused-set references together.

        Returns ``(completions_removed, episodes_touched)``, or None when the
        habit does not exist. Any failure rolls the whole removal back.
        """
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.owner_id == owner_id)
            ).first()
            if habit is None:
                return None
            removed = _delete_completions(session, habit_id, owner_id)
            touched = _strip_paused_habit(session, habit_id, owner_id)
            # Completions reference the habit; flush them out before the parent row.
            session.flush()
            session.delete(habit)
            session.commit()
            return removed, touched

    def import_batch(
        self,
        habits: Iterable[Habit],
        completions: Iterable[HabitCompletion],
        cap: int,
        *,
        owner_id: str,
        over_cap_reason: str,
    ) -> list[Habit]:
        """Insert habits and their completions in one transaction.

        Habits keep their relative order and are appended after the owner's
        existing ones. Active habits beyond ``cap`` are stored inactive with
        ``over_cap_reason``.
        """
        with self.session_factory() as session:
            active = _count_active(session, owner_id)
            order = _next_display_order(session, owner_id)
            stored: list[Habit] = []
            for habit in habits:
                habit.owner_id = owner_id
                habit.display_order = order
                order += 1
                if habit.is_active:
                    if active >= cap:
                        habit.is_active = False
                        habit.pause_reason = over_cap_reason
                    else:
                        active += 1
                session.add(habit)
                stored.append(habit)
            session.flush()
            for completion in completions:
                completion.owner_id = owner_id
                session.add(completion)
            session.commit()
            for habit in stored:
                session.refresh(habit)
            session.expunge_all()
            return stored


__all__ = ["SQLModelHabitRepository"]

"""SQLModel implementation of the completion ledger repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.habit import HabitCompletion
from ..database import SessionFactory


class SQLModelCompletionRepository:
    """SQLModel-based completion repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get(self, habit_id: str, day: str, *, owner_id: str) -> Optional[HabitCompletion]:
        """The event for a habit on one day, or None."""
        with self.session_factory() as session:
            obj = session.exec(
                select(HabitCompletion)
                .where(HabitCompletion.owner_id == owner_id)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.completed_date == day)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_for_owner(self, *, owner_id: str, since: Optional[str] = None) -> list[HabitCompletion]:
        """All of the owner's events in day order, optionally from ``since`` on."""
        with self.session_factory() as session:
            statement = (
                select(HabitCompletion)
                .where(HabitCompletion.owner_id == owner_id)
                .order_by(HabitCompletion.completed_date)  # type: ignore[arg-type]
            )
            if since is not None:
                statement = statement.where(HabitCompletion.completed_date >= since)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_for_habit(self, habit_id: str, *, owner_id: str) -> list[HabitCompletion]:
        """One habit's events in day order."""
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(HabitCompletion)
                    .where(HabitCompletion.owner_id == owner_id)
                    .where(HabitCompletion.habit_id == habit_id)
                    .order_by(HabitCompletion.completed_date)  # type: ignore[arg-type]
                ).all()
            )
            session.expunge_all()
            return rows

    def upsert(self, completion: HabitCompletion, *, owner_id: str) -> HabitCompletion:
        """Insert or overwrite the event for (habit, day)."""
        with self.session_factory() as session:
            existing = session.exec(
                select(HabitCompletion)
                .where(HabitCompletion.owner_id == owner_id)
                .where(HabitCompletion.habit_id == completion.habit_id)
                .where(HabitCompletion.completed_date == completion.completed_date)
            ).first()

            if existing:
                existing.completed = completion.completed
                target = existing
            else:
                completion.owner_id = owner_id
                target = completion
            session.add(target)
            session.commit()
            session.refresh(target)
            session.expunge(target)
            return target

    def delete(self, habit_id: str, day: str, *, owner_id: str) -> None:
        """Drop the event for (habit, day) if one exists."""
        with self.session_factory() as session:
            entry = session.exec(
                select(HabitCompletion)
                .where(HabitCompletion.owner_id == owner_id)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.completed_date == day)
            ).first()
            if entry:
                session.delete(entry)
                session.commit()


__all__ = ["SQLModelCompletionRepository"]

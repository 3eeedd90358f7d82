"""SQLModel implementation of the disruption episode repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from ...models.disruption import DisruptionEpisode
from ..database import SessionFactory


class SQLModelDisruptionRepository:
    """SQLModel-based disruption repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_open(self, *, owner_id: str) -> Optional[DisruptionEpisode]:
        """The owner's open episode, or None."""
        with self.session_factory() as session:
            obj = session.exec(
                select(DisruptionEpisode)
                .where(DisruptionEpisode.owner_id == owner_id)
                .where(DisruptionEpisode.ended_at == None)  # noqa: E711
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_for_owner(self, *, owner_id: str) -> list[DisruptionEpisode]:
        """Episodes newest first."""
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(DisruptionEpisode)
                    .where(DisruptionEpisode.owner_id == owner_id)
                    .order_by(DisruptionEpisode.started_at.desc())  # type: ignore[attr-defined]
                ).all()
            )
            session.expunge_all()
            return rows

    def count(self, *, owner_id: str) -> int:
        """Number of episodes ever recorded for the owner."""
        with self.session_factory() as session:
            statement = (
                select(func.count())
                .select_from(DisruptionEpisode)
                .where(DisruptionEpisode.owner_id == owner_id)
            )
            return int(session.exec(statement).one())

    def open_episode(self, episode: DisruptionEpisode, *, owner_id: str) -> Optional[DisruptionEpisode]:
        """Insert ``episode`` unless one is already open; None when refused."""
        with self.session_factory() as session:
            existing = session.exec(
                select(DisruptionEpisode)
                .where(DisruptionEpisode.owner_id == owner_id)
                .where(DisruptionEpisode.ended_at == None)  # noqa: E711
                .with_for_update()
            ).first()
            if existing is not None:
                return None
            episode.owner_id = owner_id
            episode.ended_at = None
            session.add(episode)
            try:
                session.commit()
            except IntegrityError:
                # Lost the race: the partial unique index saw another open episode.
                session.rollback()
                return None
            session.refresh(episode)
            session.expunge(episode)
            return episode

    def close_open(self, ended_at: datetime, *, owner_id: str) -> Optional[DisruptionEpisode]:
        """Stamp ``ended_at`` on the open episode and return it."""
        with self.session_factory() as session:
            episode = session.exec(
                select(DisruptionEpisode)
                .where(DisruptionEpisode.owner_id == owner_id)
                .where(DisruptionEpisode.ended_at == None)  # noqa: E711
            ).first()
            if episode is None:
                return None
            episode.ended_at = ended_at
            session.add(episode)
            session.commit()
            session.refresh(episode)
            session.expunge(episode)
            return episode


__all__ = ["SQLModelDisruptionRepository"]

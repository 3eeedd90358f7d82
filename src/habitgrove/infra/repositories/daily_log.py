"""SQLModel implementation of the daily log repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from ..._util import utcnow
from ...models.daily_log import DailyLog
from ..database import SessionFactory


def _fetch(session: Session, log_date: str, owner_id: str) -> Optional[DailyLog]:
    return session.exec(
        select(DailyLog).where(DailyLog.owner_id == owner_id, DailyLog.log_date == log_date)
    ).first()


class SQLModelDailyLogRepository:
    """SQLModel-based daily log repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get(self, log_date: str, *, owner_id: str) -> Optional[DailyLog]:
        """Fetch the log for one day, or None."""
        with self.session_factory() as session:
            obj = _fetch(session, log_date, owner_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_recent(
        self, *, owner_id: str, since: Optional[str] = None, limit: Optional[int] = None
    ) -> list[DailyLog]:
        """Logs newest first, optionally bounded by ``since`` and ``limit``."""
        with self.session_factory() as session:
            statement = (
                select(DailyLog)
                .where(DailyLog.owner_id == owner_id)
                .order_by(DailyLog.log_date.desc())  # type: ignore[attr-defined]
            )
            if since is not None:
                statement = statement.where(DailyLog.log_date >= since)
            if limit is not None:
                statement = statement.limit(limit)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def upsert(self, log_date: str, mood: Optional[int], notes: str, *, owner_id: str) -> DailyLog:
        """Write mood and notes for a day; changed notes clear the AI metadata."""
        with self.session_factory() as session:
            log = _fetch(session, log_date, owner_id)
            if log is None:
                log = DailyLog(owner_id=owner_id, log_date=log_date)
            elif log.notes != notes:
                # Classification belonged to the old text.
                log.disruption_type = None
                log.disruption_detected_at = None
                log.recovery_plan = None
            log.mood = mood
            log.notes = notes
            log.updated_at = utcnow()
            session.add(log)
            session.commit()
            session.refresh(log)
            session.expunge(log)
            return log

    def apply_classification(
        self,
        log_date: str,
        *,
        owner_id: str,
        disruption_type: str,
        recovery_plan: Optional[str],
        detected_at: datetime,
        based_on_notes: str,
    ) -> Optional[DailyLog]:
        """Merge classifier output unless the notes it was computed from have changed."""
        with self.session_factory() as session:
            log = _fetch(session, log_date, owner_id)
            if log is None or log.notes != based_on_notes:
                return None
            log.disruption_type = disruption_type
            log.recovery_plan = recovery_plan
            log.disruption_detected_at = detected_at
            session.add(log)
            session.commit()
            session.refresh(log)
            session.expunge(log)
            return log


__all__ = ["SQLModelDailyLogRepository"]

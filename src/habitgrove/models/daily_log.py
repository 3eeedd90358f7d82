"""Daily mood/notes log with optional AI-detected disruption metadata."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .._util import utcnow
from .habit import new_id


class DailyLog(SQLModel, table=True):
    """At most one entry per (owner, log_date)."""

    __tablename__: ClassVar[str] = "daily_log"
    __table_args__ = (UniqueConstraint("owner_id", "log_date", name="uq_daily_log_day"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    owner_id: str = Field(nullable=False, index=True, max_length=64)
    log_date: str = Field(nullable=False, index=True, max_length=10)
    mood: Optional[int] = Field(default=None, ge=1, le=5)
    notes: str = Field(default="")
    disruption_type: Optional[str] = Field(default=None, max_length=16)
    disruption_detected_at: Optional[datetime] = Field(default=None)
    recovery_plan: Optional[str] = Field(default=None)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

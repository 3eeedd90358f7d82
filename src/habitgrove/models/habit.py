"""Habit tracking data structures."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional
from uuid import uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .._util import utcnow

MAX_ACTIVE_HABITS = 3


def new_id() -> str:
    return str(uuid4())


class HabitCategory(str, Enum):
    """Keystone habits stay expected during disruptions; baseline habits pause."""

    KEYSTONE = "keystone"
    BASELINE = "baseline"


class Habit(SQLModel, table=True):
    """A user-defined habit tracked once per logical day."""

    __tablename__: ClassVar[str] = "habit"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    owner_id: str = Field(nullable=False, index=True, max_length=64)
    name: str = Field(nullable=False, max_length=80)
    category: str = Field(default=HabitCategory.BASELINE.value, nullable=False, max_length=16)
    is_active: bool = Field(default=True, nullable=False, index=True)
    pause_reason: Optional[str] = Field(default=None, max_length=255)
    display_order: int = Field(default=0, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    @property
    def is_keystone(self) -> bool:
        return self.category == HabitCategory.KEYSTONE.value


class HabitCompletion(SQLModel, table=True):
    """Completion record for a habit on a calendar day (``YYYY-MM-DD``)."""

    __tablename__: ClassVar[str] = "habit_completion"
    __table_args__ = (UniqueConstraint("habit_id", "completed_date", name="uq_completion_day"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    habit_id: str = Field(foreign_key="habit.id", nullable=False, index=True, max_length=36)
    owner_id: str = Field(nullable=False, index=True, max_length=64)
    completed_date: str = Field(nullable=False, index=True, max_length=10)
    completed: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

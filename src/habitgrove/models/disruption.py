"""Disruption episodes: time-bounded periods that relax habit expectations."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column, Index, text
from sqlmodel import Field, SQLModel

from .._util import utcnow
from .habit import new_id


class DisruptionType(str, Enum):
    TRAVEL = "travel"
    STRESS = "stress"
    FATIGUE = "fatigue"
    ILLNESS = "illness"
    MANUAL = "manual"


# Types a classifier may report; "manual" is only ever user-initiated.
DETECTABLE_TYPES = frozenset(
    t.value for t in DisruptionType if t is not DisruptionType.MANUAL
)


class DisruptionEpisode(SQLModel, table=True):
    """One disruption period; ``ended_at`` is None while the episode is open."""

    __tablename__: ClassVar[str] = "disruption_episode"
    __table_args__ = (
        # At most one open episode per owner, enforced by the store as well.
        Index(
            "uq_open_episode_per_owner",
            "owner_id",
            unique=True,
            sqlite_where=text("ended_at IS NULL"),
            postgresql_where=text("ended_at IS NULL"),
        ),
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    owner_id: str = Field(nullable=False, index=True, max_length=64)
    disruption_type: str = Field(nullable=False, max_length=16)
    started_at: datetime = Field(default_factory=utcnow, nullable=False)
    ended_at: Optional[datetime] = Field(default=None)
    recovery_plan: Optional[str] = Field(default=None)
    paused_habit_ids: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

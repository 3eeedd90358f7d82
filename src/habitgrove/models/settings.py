"""Per-owner key/value settings stored in the database."""

from __future__ import annotations

from typing import ClassVar

from sqlmodel import Field, SQLModel

AI_CONSENT_KEY = "ai_consent_given"


class OwnerSetting(SQLModel, table=True):
    """Key-value storage for small per-owner flags (banner dismissal, AI consent)."""

    __tablename__: ClassVar[str] = "owner_setting"

    owner_id: str = Field(primary_key=True, max_length=64)
    key: str = Field(primary_key=True, max_length=64)
    value: str = Field(nullable=False, max_length=255)

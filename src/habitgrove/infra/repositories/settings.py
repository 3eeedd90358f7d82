"""Settings repository for per-owner key/value pairs."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.settings import OwnerSetting
from ..database import SessionFactory


class SQLModelSettingsRepository:
    """SQLModel-based settings repository."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get(self, key: str, *, owner_id: str) -> Optional[str]:
        """Stored value for ``key``, or None."""
        with self.session_factory() as session:
            setting = session.exec(
                select(OwnerSetting).where(OwnerSetting.owner_id == owner_id, OwnerSetting.key == key)
            ).first()
            return setting.value if setting else None

    def set(self, key: str, value: str, *, owner_id: str) -> None:
        """Insert or overwrite ``key``."""
        with self.session_factory() as session:
            setting = session.exec(
                select(OwnerSetting).where(OwnerSetting.owner_id == owner_id, OwnerSetting.key == key)
            ).first()
            if setting:
                setting.value = value
            else:
                setting = OwnerSetting(owner_id=owner_id, key=key, value=value)
            session.add(setting)
            session.commit()

    def delete(self, key: str, *, owner_id: str) -> None:
        """Remove ``key`` if present."""
        with self.session_factory() as session:
            setting = session.exec(
                select(OwnerSetting).where(OwnerSetting.owner_id == owner_id, OwnerSetting.key == key)
            ).first()
            if setting:
                session.delete(setting)
                session.commit()


__all__ = ["SQLModelSettingsRepository"]

"""Per-owner settings repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol


class SettingsRepository(Protocol):
    def get(self, key: str, *, owner_id: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, *, owner_id: str) -> None:
        ...

    def delete(self, key: str, *, owner_id: str) -> None:
        ...

"""Disruption episode repository protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ...models.disruption import DisruptionEpisode


class DisruptionRepository(Protocol):
    """Stores disruption episodes; at most one open episode per owner."""

    def get_open(self, *, owner_id: str) -> Optional[DisruptionEpisode]:
        ...

    def list_for_owner(self, *, owner_id: str) -> list[DisruptionEpisode]:
        """Episodes newest first."""
        ...

    def count(self, *, owner_id: str) -> int:
        ...

    def open_episode(self, episode: DisruptionEpisode, *, owner_id: str) -> Optional[DisruptionEpisode]:
        """Insert ``episode`` unless one is already open; returns None in that case."""
        ...

    def close_open(self, ended_at: datetime, *, owner_id: str) -> Optional[DisruptionEpisode]:
        """Close the open episode, if any, and return it."""
        ...

"""Daily log repository protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ...models.daily_log import DailyLog


class DailyLogRepository(Protocol):
    """Stores at most one daily log per (owner, day)."""

    def get(self, log_date: str, *, owner_id: str) -> Optional[DailyLog]:
        ...

    def list_recent(
        self, *, owner_id: str, since: Optional[str] = None, limit: Optional[int] = None
    ) -> list[DailyLog]:
        """Logs newest first."""
        ...

    def upsert(self, log_date: str, mood: Optional[int], notes: str, *, owner_id: str) -> DailyLog:
        """Insert or update mood/notes for a day; bumps ``updated_at``."""
        ...

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
        """Attach classifier output to a log whose notes still read ``based_on_notes``.

        Returns None when the log is missing or its notes have changed since.
        """
        ...

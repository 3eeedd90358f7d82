"""Structured domain errors.

Every failure the engine reports carries a stable ``kind`` so callers can
render kind-specific feedback without string matching on messages.
"""

from __future__ import annotations

from typing import ClassVar


class HabitGroveError(Exception):
    """Base error with a machine-readable kind and a human message."""

    kind: ClassVar[str] = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class InvalidInput(HabitGroveError):
    """Empty or malformed field."""

    kind = "invalid_input"


class CapacityExceeded(HabitGroveError):
    """Activating another habit would exceed the active-habit cap."""

    kind = "capacity_exceeded"


class AlreadyDisrupted(HabitGroveError):
    """A disruption episode is already open for this owner."""

    kind = "already_disrupted"


class NotFound(HabitGroveError):
    """A required record does not exist."""

    kind = "not_found"


class CollaboratorUnavailable(HabitGroveError):
    """A remote collaborator (persistence, classifier, suggestions) failed."""

    kind = "collaborator_unavailable"


__all__ = [
    "AlreadyDisrupted",
    "CapacityExceeded",
    "CollaboratorUnavailable",
    "HabitGroveError",
    "InvalidInput",
    "NotFound",
]

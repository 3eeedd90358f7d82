"""Service module exports."""

from . import (
    analytics,
    classifier,
    disruption,
    export_csv,
    health,
    import_legacy,
    intake,
    ledger,
    registry,
    streaks,
    suggestions,
)

__all__ = [
    "analytics",
    "classifier",
    "disruption",
    "export_csv",
    "health",
    "import_legacy",
    "intake",
    "ledger",
    "registry",
    "streaks",
    "suggestions",
]

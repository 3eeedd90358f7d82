"""CSV export helpers for HabitGrove."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Sequence

from ..models.habit import Habit, HabitCompletion
from .streaks import streaks_for

EXPORT_HEADERS = ["Habit Name", "Category", "Date", "Completed", "Streak"]


@dataclass(slots=True)
class ExportRow:
    habit_name: str
    category: str
    date: str
    completed: str
    streak: int

    def as_list(self) -> list[str]:
        return [self.habit_name, self.category, self.date, self.completed, str(self.streak)]


def default_export_name(as_of: date | None = None) -> str:
    return f"habitgrove-export-{(as_of or date.today()).isoformat()}.csv"


def build_export_rows(
    habits: Sequence[Habit], completions: Iterable[HabitCompletion], as_of: date | None = None
) -> list[ExportRow]:
    """Flatten the ledger into one row per (habit, event).

    A habit without events still gets a single placeholder row. Every row of a
    habit repeats that habit's current streak.
    """

    as_of = as_of or date.today()
    events = sorted(completions, key=lambda c: c.completed_date)
    streak_map = streaks_for([h.id for h in habits], events, as_of)

    by_habit: dict[str, list[HabitCompletion]] = {}
    for event in events:
        by_habit.setdefault(event.habit_id, []).append(event)

    rows: list[ExportRow] = []
    for habit in habits:
        streak = streak_map[habit.id]
        records = by_habit.get(habit.id, [])
        if not records:
            rows.append(ExportRow(habit.name, habit.category, "No records", "-", streak))
            continue
        for record in records:
            rows.append(
                ExportRow(
                    habit.name,
                    habit.category,
                    record.completed_date,
                    "Yes" if record.completed else "No",
                    streak,
                )
            )
    return rows


def export_habits_csv(*, rows: Iterable[ExportRow], output_path: Path) -> Path:
    """Write export rows to CSV at ``output_path`` and return the path."""

    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh, quoting=csv.QUOTE_MINIMAL)
        writer.writerow(EXPORT_HEADERS)
        for row in rows:
            writer.writerow(row.as_list())

    return output_path


__all__ = [
    "EXPORT_HEADERS",
    "ExportRow",
    "build_export_rows",
    "default_export_name",
    "export_habits_csv",
]

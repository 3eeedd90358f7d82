"""Import of the legacy browser-storage blob.

Older clients kept everything in one JSON document with camelCase keys and,
depending on version, ``isActive`` or ``is_active`` for the active flag. This
module is the only place that knows those shapes; it produces canonical
models for the rest of the engine.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from .._util import day_key, utcnow
from ..domain.repositories import HabitRepository, SettingsRepository
from ..errors import CollaboratorUnavailable, InvalidInput
from ..logging_config import get_logger
from ..models.habit import MAX_ACTIVE_HABITS, Habit, HabitCategory, HabitCompletion, new_id
from ..models.settings import AI_CONSENT_KEY
from .disruption import DisruptionStateMachine

logger = get_logger("import_legacy")

OVER_CAP_REASON = "Imported while the active-habit limit was reached"


@dataclass(slots=True)
class LegacyImport:
    habits: list[Habit] = field(default_factory=list)
    completions: list[HabitCompletion] = field(default_factory=list)
    disruption_mode: bool = False
    ai_consent: Optional[bool] = None
    skipped: int = 0


def _first(row: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return default


def _parse_created(raw: Any) -> datetime:
    if isinstance(raw, str) and raw.strip():
        try:
            parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError:
            return utcnow()
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    return utcnow()


def habit_from_legacy(row: Mapping[str, Any], owner_id: str, position: int) -> Optional[Habit]:
    """Map one legacy habit object to a Habit, or None when it is unusable.

    The habit always gets a fresh id; legacy ids are only unique within the
    blob they came from.
    """

    name = str(_first(row, "name", default="")).strip()
    if not name:
        return None
    category = str(_first(row, "category", default=HabitCategory.BASELINE.value)).strip().lower()
    if category not in {c.value for c in HabitCategory}:
        category = HabitCategory.BASELINE.value
    order = _first(row, "order", "display_order", default=position)
    return Habit(
        id=new_id(),
        owner_id=owner_id,
        name=name[:80],
        category=category,
        is_active=bool(_first(row, "isActive", "is_active", default=True)),
        pause_reason=_first(row, "pauseReason", "pause_reason"),
        display_order=int(order) if isinstance(order, (int, float)) else position,
        created_at=_parse_created(_first(row, "createdAt", "created_at")),
    )


def load_legacy_store(blob: Mapping[str, Any] | str, owner_id: str) -> LegacyImport:
    """Parse a legacy store (dict or JSON text) into canonical entities."""

    if isinstance(blob, str):
        try:
            blob = json.loads(blob)
        except json.JSONDecodeError as exc:
            raise InvalidInput("Legacy store is not valid JSON") from exc
    if not isinstance(blob, Mapping):
        raise InvalidInput("Legacy store must be a JSON object")

    consent = blob.get("aiConsentGiven")
    result = LegacyImport(
        disruption_mode=bool(blob.get("disruptionMode", False)),
        ai_consent=consent if isinstance(consent, bool) else None,
    )
    # legacy id -> freshly minted id
    id_map: dict[str, str] = {}
    for position, row in enumerate(blob.get("habits") or []):
        habit = habit_from_legacy(row, owner_id, position) if isinstance(row, Mapping) else None
        if habit is None:
            result.skipped += 1
            continue
        legacy_id = str(_first(row, "id", default=""))
        if legacy_id:
            id_map[legacy_id] = habit.id
        result.habits.append(habit)

    # Later records for the same (habit, day) win, matching toggle semantics.
    by_key: dict[tuple[str, str], HabitCompletion] = {}
    for row in blob.get("dayRecords") or []:
        if not isinstance(row, Mapping):
            result.skipped += 1
            continue
        habit_id = id_map.get(str(_first(row, "habitId", "habit_id", default="")))
        try:
            day = day_key(str(_first(row, "date", "completed_date", default="")))
        except ValueError:
            result.skipped += 1
            continue
        if habit_id is None:
            result.skipped += 1
            continue
        by_key[(habit_id, day)] = HabitCompletion(
            habit_id=habit_id,
            owner_id=owner_id,
            completed_date=day,
            completed=bool(row.get("completed", True)),
        )
    result.completions = list(by_key.values())
    return result


def persist_legacy_import(
    result: LegacyImport,
    *,
    habit_repo: HabitRepository,
    owner_id: str,
    settings_repo: Optional[SettingsRepository] = None,
    disruptions: Optional[DisruptionStateMachine] = None,
    cap: int = MAX_ACTIVE_HABITS,
) -> LegacyImport:
    """Write an import through the repositories, honoring the active-habit cap.

    Habits and completions land in one transaction; a failure leaves the store
    as it was. Active habits beyond the cap are stored inactive with a pause
    reason.
    """

    try:
        habit_repo.import_batch(
            sorted(result.habits, key=lambda h: h.display_order),
            result.completions,
            cap,
            owner_id=owner_id,
            over_cap_reason=OVER_CAP_REASON,
        )
    except SQLAlchemyError as exc:
        raise CollaboratorUnavailable(f"Could not import legacy store: {exc}") from exc

    if result.ai_consent is not None and settings_repo is not None:
        settings_repo.set(AI_CONSENT_KEY, "1" if result.ai_consent else "0", owner_id=owner_id)

    if result.disruption_mode and disruptions is not None and not disruptions.is_disrupted():
        disruptions.start_disruption("manual")

    logger.info(
        "Legacy store imported",
        extra={
            "owner_id": owner_id,
            "habits": len(result.habits),
            "completions": len(result.completions),
            "skipped": result.skipped,
        },
    )
    return result


__all__ = [
    "LegacyImport",
    "OVER_CAP_REASON",
    "habit_from_legacy",
    "load_legacy_store",
    "persist_legacy_import",
]

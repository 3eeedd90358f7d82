"""Disruption state machine and the habit filter it governs.

An owner is either ``calm`` (no open episode) or ``disrupted`` (exactly one
open episode). While disrupted, baseline habits drop out of the expected set;
keystone habits always stay in it.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Sequence

from .._util import utcnow
from ..domain.repositories import DisruptionRepository, HabitRepository, SettingsRepository
from ..errors import AlreadyDisrupted, InvalidInput
from ..logging_config import get_logger
from ..models.disruption import DisruptionEpisode, DisruptionType
from ..models.habit import Habit, HabitCategory

logger = get_logger("disruption")

BANNER_DISMISSED_KEY = "disruption_banner_dismissed"


class DisruptionState(str, Enum):
    CALM = "calm"
    DISRUPTED = "disrupted"


def filter_expected_habits(habits: Iterable[Habit], disrupted: bool) -> list[Habit]:
    """Active habits that are expected, dropping baseline ones while disrupted."""

    return [
        h
        for h in habits
        if h.is_active and not (disrupted and h.category == HabitCategory.BASELINE.value)
    ]


def normalize_disruption_type(value: str | DisruptionType) -> str:
    raw = value.value if isinstance(value, DisruptionType) else str(value or "")
    try:
        return DisruptionType(raw.strip().lower()).value
    except ValueError:
        allowed = ", ".join(t.value for t in DisruptionType)
        raise InvalidInput(f"Unknown disruption type {raw!r}; expected one of: {allowed}") from None


class DisruptionStateMachine:
    """Opens and closes disruption episodes for one owner."""

    def __init__(
        self,
        *,
        disruption_repo: DisruptionRepository,
        habit_repo: HabitRepository,
        owner_id: str,
    ):
        self.disruption_repo = disruption_repo
        self.habit_repo = habit_repo
        self.owner_id = owner_id

    def active_episode(self) -> Optional[DisruptionEpisode]:
        return self.disruption_repo.get_open(owner_id=self.owner_id)

    def state(self) -> DisruptionState:
        return DisruptionState.DISRUPTED if self.active_episode() else DisruptionState.CALM

    def is_disrupted(self) -> bool:
        return self.state() is DisruptionState.DISRUPTED

    def history(self) -> list[DisruptionEpisode]:
        """All episodes, newest first."""
        return self.disruption_repo.list_for_owner(owner_id=self.owner_id)

    def disruption_count(self) -> int:
        return self.disruption_repo.count(owner_id=self.owner_id)

    def expected_habits(self) -> list[Habit]:
        return filter_expected_habits(
            self.habit_repo.list_all(owner_id=self.owner_id), self.is_disrupted()
        )

    def start_disruption(
        self,
        disruption_type: str | DisruptionType,
        recovery_plan: Optional[str] = None,
        paused_habit_ids: Optional[Sequence[str]] = None,
    ) -> DisruptionEpisode:
        """Open a new episode; fails with AlreadyDisrupted if one is open.

        Without an explicit paused set, every active baseline habit is paused.
        """

        type_value = normalize_disruption_type(disruption_type)
        if paused_habit_ids is None:
            paused_habit_ids = [
                h.id
                for h in self.habit_repo.list_active(owner_id=self.owner_id)
                if h.category == HabitCategory.BASELINE.value
            ]
        episode = DisruptionEpisode(
            owner_id=self.owner_id,
            disruption_type=type_value,
            recovery_plan=(recovery_plan or "").strip() or None,
            paused_habit_ids=list(dict.fromkeys(paused_habit_ids)),
        )
        opened = self.disruption_repo.open_episode(episode, owner_id=self.owner_id)
        if opened is None:
            raise AlreadyDisrupted("A disruption is already active; end it before starting another.")
        logger.info(
            "Disruption started",
            extra={
                "owner_id": self.owner_id,
                "episode_id": opened.id,
                "disruption_type": type_value,
                "paused": len(opened.paused_habit_ids),
            },
        )
        return opened

    def end_disruption(self) -> Optional[DisruptionEpisode]:
        """Close the open episode. Calling this while calm is a harmless no-op."""

        closed = self.disruption_repo.close_open(utcnow(), owner_id=self.owner_id)
        if closed is not None:
            logger.info(
                "Disruption ended",
                extra={"owner_id": self.owner_id, "episode_id": closed.id},
            )
        return closed

    def toggle_disruption(self) -> Optional[DisruptionEpisode]:
        """End the open episode, or start a manual one; returns the episode acted on."""

        if self.is_disrupted():
            return self.end_disruption()
        return self.start_disruption(DisruptionType.MANUAL)


class BannerTracker:
    """Remembers which episode's notice the owner dismissed.

    Dismissal is keyed by episode id so a new episode always shows again, and
    it never ends the episode itself.
    """

    def __init__(self, *, settings_repo: SettingsRepository, owner_id: str):
        self.settings_repo = settings_repo
        self.owner_id = owner_id

    def dismiss(self, episode: Optional[DisruptionEpisode]) -> None:
        if episode is None:
            return
        self.settings_repo.set(BANNER_DISMISSED_KEY, episode.id, owner_id=self.owner_id)

    def is_dismissed(self, active_episode: Optional[DisruptionEpisode]) -> bool:
        if active_episode is None:
            return True
        return self.settings_repo.get(BANNER_DISMISSED_KEY, owner_id=self.owner_id) == active_episode.id


__all__ = [
    "BANNER_DISMISSED_KEY",
    "BannerTracker",
    "DisruptionState",
    "DisruptionStateMachine",
    "filter_expected_habits",
    "normalize_disruption_type",
]

"""Daily log intake with optional AI disruption detection.

The log itself is always saved first; classification only ever adds to it.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from .._util import day_key, utcnow
from ..domain.repositories import DailyLogRepository
from ..errors import AlreadyDisrupted, CollaboratorUnavailable, InvalidInput
from ..logging_config import get_logger
from ..models.daily_log import DailyLog
from ..models.disruption import DisruptionEpisode
from .classifier import Classification, DisruptionClassifier
from .disruption import DisruptionStateMachine

logger = get_logger("intake")

# Notes this short are not worth a classifier round-trip.
MIN_CLASSIFY_LENGTH = 10


@dataclass(slots=True)
class LogEntryResult:
    log: DailyLog
    disruption_detected: bool = False
    disruption_type: Optional[str] = None
    recovery_plan: Optional[str] = None
    episode: Optional[DisruptionEpisode] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "log": self.log.model_dump(mode="json"),
            "disruption_detected": self.disruption_detected,
            "disruption_type": self.disruption_type,
            "recovery_plan": self.recovery_plan,
            "episode_id": self.episode.id if self.episode else None,
        }


def validate_mood(mood: Optional[int]) -> Optional[int]:
    if mood is None:
        return None
    if isinstance(mood, bool) or not isinstance(mood, int) or not 1 <= mood <= 5:
        raise InvalidInput("Mood must be an integer from 1 to 5")
    return mood


class DailyLogIntake:
    """Saves daily logs and turns positive classifications into episodes."""

    def __init__(
        self,
        *,
        log_repo: DailyLogRepository,
        disruptions: DisruptionStateMachine,
        owner_id: str,
        classifier: Optional[DisruptionClassifier] = None,
    ):
        self.log_repo = log_repo
        self.disruptions = disruptions
        self.owner_id = owner_id
        self.classifier = classifier
        self._executor: Optional[ThreadPoolExecutor] = None

    def should_classify(self, notes: str) -> bool:
        return self.classifier is not None and len(notes.strip()) > MIN_CLASSIFY_LENGTH

    def save_log(
        self,
        mood: Optional[int],
        notes: str = "",
        log_date: date | str | None = None,
    ) -> LogEntryResult:
        """Upsert the day's log, then classify the notes if possible."""

        log = self._store(mood, notes, log_date)
        if not self.should_classify(log.notes):
            return LogEntryResult(log=log)
        classification = self._classify(log.notes)
        if classification is None:
            return LogEntryResult(log=log)
        return self.merge_classification(log.log_date, classification, based_on=log)

    def save_log_deferred(
        self,
        mood: Optional[int],
        notes: str = "",
        log_date: date | str | None = None,
    ) -> tuple[LogEntryResult, Optional[Future]]:
        """Save now and classify on a worker thread.

        Returns the saved log and a future resolving to the merged result (or
        None when nothing needed classifying).
        """

        log = self._store(mood, notes, log_date)
        if not self.should_classify(log.notes):
            return LogEntryResult(log=log), None
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="habitgrove-classify")
        return LogEntryResult(log=log), self._executor.submit(self._classify_and_merge, log)

    def merge_classification(
        self, log_date: str, classification: Classification, *, based_on: DailyLog
    ) -> LogEntryResult:
        """Attach a classification to the stored log and open an episode if calm.

        A result computed from notes that have since been edited is dropped;
        edits that leave the notes alone (a mood change) still get it.
        """

        merged = self.log_repo.apply_classification(
            log_date,
            owner_id=self.owner_id,
            disruption_type=classification.disruption_type,
            recovery_plan=classification.recovery_plan,
            detected_at=utcnow(),
            based_on_notes=based_on.notes,
        )
        if merged is None:
            logger.info(
                "Discarded stale classification",
                extra={"owner_id": self.owner_id, "log_date": log_date},
            )
            current = self.log_repo.get(log_date, owner_id=self.owner_id) or based_on
            return LogEntryResult(log=current)

        episode = self._open_episode(classification)
        return LogEntryResult(
            log=merged,
            disruption_detected=True,
            disruption_type=classification.disruption_type,
            recovery_plan=classification.recovery_plan,
            episode=episode,
        )

    def log_for(self, log_date: date | str) -> Optional[DailyLog]:
        return self.log_repo.get(day_key(log_date), owner_id=self.owner_id)

    def recent_logs(self, since: date | str | None = None) -> list[DailyLog]:
        return self.log_repo.list_recent(
            owner_id=self.owner_id, since=day_key(since) if since is not None else None
        )

    def average_mood(self, days: int = 7) -> float:
        """Mean mood over the ``days`` most recent logs; 0 when none carry a mood."""

        recent = self.log_repo.list_recent(owner_id=self.owner_id, limit=days)
        moods = [log.mood for log in recent if log.mood is not None]
        if not moods:
            return 0.0
        return sum(moods) / len(moods)

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _store(self, mood: Optional[int], notes: str, log_date: date | str | None) -> DailyLog:
        mood = validate_mood(mood)
        day = day_key(log_date)
        try:
            log = self.log_repo.upsert(day, mood, (notes or "").strip(), owner_id=self.owner_id)
        except SQLAlchemyError as exc:
            raise CollaboratorUnavailable(f"Could not save daily log: {exc}") from exc
        logger.info("Daily log saved", extra={"owner_id": self.owner_id, "log_date": day})
        return log

    def _classify(self, notes: str) -> Optional[Classification]:
        if self.classifier is None:
            return None
        try:
            return self.classifier.classify(notes)
        except Exception as exc:
            # The log is already stored; any classifier failure just means no metadata.
            logger.warning(
                "Classifier unavailable; log saved without disruption metadata",
                extra={
                    "owner_id": self.owner_id,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return None

    def _classify_and_merge(self, log: DailyLog) -> LogEntryResult:
        classification = self._classify(log.notes)
        if classification is None:
            return LogEntryResult(log=log)
        return self.merge_classification(log.log_date, classification, based_on=log)

    def _open_episode(self, classification: Classification) -> Optional[DisruptionEpisode]:
        if self.disruptions.is_disrupted():
            return None
        try:
            return self.disruptions.start_disruption(
                classification.disruption_type, recovery_plan=classification.recovery_plan
            )
        except AlreadyDisrupted:
            return None
        except SQLAlchemyError as exc:
            # The log is the record of truth; a missing history row is tolerable.
            logger.warning(
                "Could not record detected disruption",
                extra={"owner_id": self.owner_id, "error": str(exc)},
            )
            return None


__all__ = ["DailyLogIntake", "LogEntryResult", "MIN_CLASSIFY_LENGTH", "validate_mood"]

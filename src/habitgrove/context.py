"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import SessionFactory, bootstrap_database
from .infra.repositories import (
    SQLModelCompletionRepository,
    SQLModelDailyLogRepository,
    SQLModelDisruptionRepository,
    SQLModelHabitRepository,
    SQLModelSettingsRepository,
)
from .models.habit import Habit
from .models.settings import AI_CONSENT_KEY
from .services.ai_client import ChatCompletionsClient
from .services.analytics import MOOD_HISTORY_LIMIT, AnalyticsSnapshot, build_analytics
from .services.classifier import DisruptionClassifier, HttpDisruptionClassifier
from .services.disruption import BannerTracker, DisruptionStateMachine
from .services.export_csv import ExportRow, build_export_rows
from .services.health import compute_health
from .services.intake import DailyLogIntake
from .services.ledger import CompletionLedger
from .services.registry import HabitRegistry
from .services.suggestions import (
    HttpSuggestionClient,
    Suggestion,
    SuggestionClient,
    fetch_suggestions,
)

@dataclass
class HabitGroveContext:
    """Every component wired for one owner against one store."""

    config: BaseConfig
    owner_id: str
    engine: Engine
    session_factory: SessionFactory

    habit_repo: SQLModelHabitRepository
    completion_repo: SQLModelCompletionRepository
    disruption_repo: SQLModelDisruptionRepository
    log_repo: SQLModelDailyLogRepository
    settings_repo: SQLModelSettingsRepository

    registry: HabitRegistry
    ledger: CompletionLedger
    disruptions: DisruptionStateMachine
    banner: BannerTracker
    intake: DailyLogIntake
    suggestion_client: Optional[SuggestionClient] = None
    ai_client: Optional[ChatCompletionsClient] = None

    def expected_habits(self) -> list[Habit]:
        return self.disruptions.expected_habits()

    def health(self, as_of: date | None = None) -> int:
        """Health over the habits expected right now."""
        return compute_health(self.expected_habits(), self.ledger.completions(), as_of)

    def analytics(self, today: date | None = None) -> AnalyticsSnapshot:
        """Snapshot over every habit and event; mood covers the latest 30 logs."""
        return build_analytics(
            habits=self.registry.habits(),
            completions=self.ledger.completions(),
            logs=self.log_repo.list_recent(owner_id=self.owner_id, limit=MOOD_HISTORY_LIMIT),
            episodes=self.disruptions.history(),
            today=today,
        )

    def export_rows(self, as_of: date | None = None) -> list[ExportRow]:
        return build_export_rows(self.registry.habits(), self.ledger.completions(), as_of)

    def ai_consent_given(self) -> bool:
        return self.settings_repo.get(AI_CONSENT_KEY, owner_id=self.owner_id) == "1"

    def set_ai_consent(self, consent: bool) -> None:
        self.settings_repo.set(AI_CONSENT_KEY, "1" if consent else "0", owner_id=self.owner_id)

    def suggestions(self) -> Suggestion:
        """Coach suggestions; without consent the collaborator is never called."""

        client = self.suggestion_client if self.ai_consent_given() else None
        return fetch_suggestions(client, self.registry.active_habits(), self.disruptions.is_disrupted())

    def close(self) -> None:
        self.intake.shutdown()
        if self.ai_client is not None:
            self.ai_client.close()
        self.engine.dispose()


def create_context(
    config: Optional[BaseConfig] = None,
    *,
    owner_id: Optional[str] = None,
    classifier: Optional[DisruptionClassifier] = None,
    suggestion_client: Optional[SuggestionClient] = None,
) -> HabitGroveContext:
    """Create the engine, repositories and services for one owner."""

    if config is None:
        config = BaseConfig()
    owner = owner_id or config.OWNER_ID

    engine, session_factory = bootstrap_database(config)

    habit_repo = SQLModelHabitRepository(session_factory)
    completion_repo = SQLModelCompletionRepository(session_factory)
    disruption_repo = SQLModelDisruptionRepository(session_factory)
    log_repo = SQLModelDailyLogRepository(session_factory)
    settings_repo = SQLModelSettingsRepository(session_factory)

    chat: Optional[ChatCompletionsClient] = None
    if config.ai_enabled and (classifier is None or suggestion_client is None):
        chat = ChatCompletionsClient(
            api_key=config.AI_API_KEY or "",
            base_url=config.AI_BASE_URL,
            model=config.AI_MODEL,
            timeout=config.CLASSIFIER_TIMEOUT,
        )
        classifier = classifier or HttpDisruptionClassifier(chat)
        suggestion_client = suggestion_client or HttpSuggestionClient(chat)

    disruptions = DisruptionStateMachine(
        disruption_repo=disruption_repo, habit_repo=habit_repo, owner_id=owner
    )

    return HabitGroveContext(
        config=config,
        owner_id=owner,
        engine=engine,
        session_factory=session_factory,
        habit_repo=habit_repo,
        completion_repo=completion_repo,
        disruption_repo=disruption_repo,
        log_repo=log_repo,
        settings_repo=settings_repo,
        registry=HabitRegistry(
            habit_repo=habit_repo,
            owner_id=owner,
            cap=config.MAX_ACTIVE_HABITS,
        ),
        ledger=CompletionLedger(
            completion_repo=completion_repo, habit_repo=habit_repo, owner_id=owner
        ),
        disruptions=disruptions,
        banner=BannerTracker(settings_repo=settings_repo, owner_id=owner),
        intake=DailyLogIntake(
            log_repo=log_repo, disruptions=disruptions, owner_id=owner, classifier=classifier
        ),
        suggestion_client=suggestion_client,
        ai_client=chat,
    )

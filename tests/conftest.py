"""Pytest configuration and shared fixtures for HabitGrove tests.

Each test gets its own temporary SQLite file, real SQLModel repositories and
the services wired on top of them. Remote collaborators are replaced by
in-process fakes so nothing ever leaves the machine.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

import pytest

from habitgrove.config import TestConfig
from habitgrove.context import create_context
from habitgrove.errors import CollaboratorUnavailable
from habitgrove.infra.database import bootstrap_database
from habitgrove.infra.repositories import (
    SQLModelCompletionRepository,
    SQLModelDailyLogRepository,
    SQLModelDisruptionRepository,
    SQLModelHabitRepository,
    SQLModelSettingsRepository,
)
from habitgrove.models import Habit, HabitCompletion
from habitgrove.services.classifier import Classification
from habitgrove.services.disruption import DisruptionStateMachine
from habitgrove.services.intake import DailyLogIntake
from habitgrove.services.ledger import CompletionLedger
from habitgrove.services.registry import HabitRegistry
from habitgrove.services.suggestions import Suggestion

OWNER = "tester"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def test_config(tmp_path):
    """Isolated configuration rooted in the test's temp directory."""
    return TestConfig(tmp_path)


@pytest.fixture
def db(test_config):
    """Yield (engine, session_factory) against a fresh database file."""
    engine, session_factory = bootstrap_database(test_config)
    yield engine, session_factory
    engine.dispose()


@pytest.fixture
def session_factory(db):
    return db[1]


@pytest.fixture
def owner_id() -> str:
    return OWNER


@pytest.fixture
def habit_repo(session_factory):
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def completion_repo(session_factory):
    return SQLModelCompletionRepository(session_factory)


@pytest.fixture
def disruption_repo(session_factory):
    return SQLModelDisruptionRepository(session_factory)


@pytest.fixture
def log_repo(session_factory):
    return SQLModelDailyLogRepository(session_factory)


@pytest.fixture
def settings_repo(session_factory):
    return SQLModelSettingsRepository(session_factory)


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def registry(habit_repo, owner_id):
    return HabitRegistry(habit_repo=habit_repo, owner_id=owner_id)


@pytest.fixture
def ledger(completion_repo, habit_repo, owner_id):
    return CompletionLedger(completion_repo=completion_repo, habit_repo=habit_repo, owner_id=owner_id)


@pytest.fixture
def disruptions(disruption_repo, habit_repo, owner_id):
    return DisruptionStateMachine(
        disruption_repo=disruption_repo, habit_repo=habit_repo, owner_id=owner_id
    )


@pytest.fixture
def make_intake(log_repo, disruptions, owner_id):
    """Factory building an intake around an optional fake classifier."""

    created: list[DailyLogIntake] = []

    def _make(classifier=None) -> DailyLogIntake:
        intake = DailyLogIntake(
            log_repo=log_repo, disruptions=disruptions, owner_id=owner_id, classifier=classifier
        )
        created.append(intake)
        return intake

    yield _make
    for intake in created:
        intake.shutdown()


@pytest.fixture
def app_context(test_config):
    """Fully wired context with no AI collaborators."""
    ctx = create_context(test_config)
    yield ctx
    ctx.close()


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(habit_repo, owner_id):
    """Persist habits directly, bypassing the registry's cap check."""

    def _create_habit(
        name: str = "Test Habit",
        category: str = "baseline",
        is_active: bool = True,
        display_order: int = 0,
    ) -> Habit:
        return habit_repo.create(
            Habit(
                owner_id=owner_id,
                name=name,
                category=category,
                is_active=is_active,
                display_order=display_order,
            ),
            owner_id=owner_id,
        )

    return _create_habit


@pytest.fixture
def complete_days(completion_repo, owner_id):
    """Record completed events for a habit on each given day."""

    def _complete(habit_id: str, days: Iterable[date]) -> None:
        for day in days:
            completion_repo.upsert(
                HabitCompletion(
                    habit_id=habit_id,
                    owner_id=owner_id,
                    completed_date=day.isoformat(),
                    completed=True,
                ),
                owner_id=owner_id,
            )

    return _complete


def days_back(end: date, count: int) -> list[date]:
    """``count`` consecutive days ending at ``end`` (inclusive)."""
    return [end - timedelta(days=offset) for offset in range(count)]


def completion(habit_id: str, day: date, completed: bool = True) -> HabitCompletion:
    """Unsaved completion event for pure-function tests."""
    return HabitCompletion(
        habit_id=habit_id, owner_id=OWNER, completed_date=day.isoformat(), completed=completed
    )


# =============================================================================
# Collaborator Fakes
# =============================================================================


class FakeClassifier:
    """Returns a canned classification, or raises when ``fail`` or ``error`` is set."""

    def __init__(
        self,
        result: Optional[Classification] = None,
        fail: bool = False,
        error: Optional[Exception] = None,
    ):
        self.result = result
        self.fail = fail
        self.error = error
        self.calls: list[str] = []

    def classify(self, text: str) -> Optional[Classification]:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        if self.fail:
            raise CollaboratorUnavailable("classifier offline")
        return self.result


class FakeSuggestionClient:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[str, bool, int]] = []

    def suggest(self, habit_summary: str, disruption_mode: bool, habit_count: int) -> Suggestion:
        self.calls.append((habit_summary, disruption_mode, habit_count))
        if self.fail:
            raise CollaboratorUnavailable("suggestions offline")
        return Suggestion(suggestion="Pair reading with tea.", tips=("Read right after dinner",))

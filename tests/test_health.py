"""Tests for the health score."""

from __future__ import annotations

from datetime import date, timedelta

from habitgrove.models import Habit
from habitgrove.services.health import NEUTRAL_HEALTH, compute_health
from tests.conftest import completion, days_back

TODAY = date(2024, 6, 15)


def _habit(habit_id: str) -> Habit:
    return Habit(id=habit_id, owner_id="tester", name=habit_id)


def test_worked_example_scores_28():
    """Streaks [5, 0, 2] with one habit done today."""
    habits = [_habit("a"), _habit("b"), _habit("c")]
    events = [completion("a", d) for d in days_back(TODAY, 5)]
    events += [completion("c", TODAY - timedelta(days=n)) for n in (1, 2)]

    assert compute_health(habits, events, TODAY) == 28


def test_no_active_habits_is_neutral():
    events = [completion("a", d) for d in days_back(TODAY, 10)]
    assert compute_health([], events, TODAY) == NEUTRAL_HEALTH == 50


def test_everything_done_with_long_streaks_caps_at_100():
    habits = [_habit("a"), _habit("b")]
    events = [completion(h.id, d) for h in habits for d in days_back(TODAY, 30)]
    assert compute_health(habits, events, TODAY) == 100


def test_nothing_done_scores_zero():
    assert compute_health([_habit("a")], [], TODAY) == 0


def test_half_rounds_up():
    """One of two done today, average streak 0.5: 25 + 2.5 = 27.5 -> 28."""
    habits = [_habit("a"), _habit("b")]
    events = [completion("a", TODAY)]
    assert compute_health(habits, events, TODAY) == 28


def test_ignores_habits_outside_the_set():
    events = [completion("other", d) for d in days_back(TODAY, 10)]
    assert compute_health([_habit("a")], events, TODAY) == 0

"""Tests for the disruption state machine and banner tracking."""

from __future__ import annotations

import pytest

from habitgrove.errors import AlreadyDisrupted, InvalidInput
from habitgrove.services.disruption import (
    BannerTracker,
    DisruptionState,
    filter_expected_habits,
)


class TestStateTransitions:
    def test_starts_calm(self, disruptions):
        assert disruptions.state() is DisruptionState.CALM
        assert disruptions.active_episode() is None

    def test_start_then_end(self, disruptions):
        episode = disruptions.start_disruption("travel", "Keep the keystone only")

        assert disruptions.is_disrupted()
        assert episode.disruption_type == "travel"
        assert episode.recovery_plan == "Keep the keystone only"

        closed = disruptions.end_disruption()
        assert closed.id == episode.id
        assert closed.ended_at is not None
        assert disruptions.state() is DisruptionState.CALM

    def test_second_start_rejected_and_first_kept(self, disruptions):
        first = disruptions.start_disruption("stress")

        with pytest.raises(AlreadyDisrupted) as excinfo:
            disruptions.start_disruption("illness")

        assert excinfo.value.kind == "already_disrupted"
        assert disruptions.active_episode().id == first.id
        assert disruptions.disruption_count() == 1

    def test_end_while_calm_is_noop(self, disruptions):
        assert disruptions.end_disruption() is None
        assert disruptions.history() == []

    def test_toggle_opens_manual_then_closes(self, disruptions):
        opened = disruptions.toggle_disruption()
        assert opened.disruption_type == "manual"
        assert opened.is_open

        closed = disruptions.toggle_disruption()
        assert closed.id == opened.id
        assert not closed.is_open

    def test_history_newest_first(self, disruptions):
        disruptions.start_disruption("travel")
        disruptions.end_disruption()
        disruptions.start_disruption("fatigue")

        types = [e.disruption_type for e in disruptions.history()]
        assert types == ["fatigue", "travel"]
        assert disruptions.disruption_count() == 2

    def test_unknown_type_rejected(self, disruptions):
        with pytest.raises(InvalidInput):
            disruptions.start_disruption("vacation")


class TestPausedHabits:
    def test_defaults_to_active_baseline_habits(self, disruptions, habit_factory):
        keystone = habit_factory(name="Anchor", category="keystone")
        baseline = habit_factory(name="Extra", category="baseline")
        habit_factory(name="Dormant", category="baseline", is_active=False)

        episode = disruptions.start_disruption("travel")

        assert episode.paused_habit_ids == [baseline.id]
        assert [h.id for h in disruptions.expected_habits()] == [keystone.id]

    def test_explicit_paused_set_deduplicated(self, disruptions):
        episode = disruptions.start_disruption("manual", paused_habit_ids=["a", "b", "a"])
        assert episode.paused_habit_ids == ["a", "b"]

    def test_all_expected_again_after_end(self, disruptions, habit_factory):
        habit_factory(name="Anchor", category="keystone")
        habit_factory(name="Extra", category="baseline")
        disruptions.start_disruption("stress")
        disruptions.end_disruption()

        assert len(disruptions.expected_habits()) == 2


def test_filter_expected_habits_skips_inactive(habit_factory):
    active = habit_factory(name="On", category="keystone")
    inactive = habit_factory(name="Off", category="keystone", is_active=False)
    baseline = habit_factory(name="Base", category="baseline")
    habits = [active, inactive, baseline]

    assert filter_expected_habits(habits, disrupted=False) == [active, baseline]
    assert filter_expected_habits(habits, disrupted=True) == [active]


class TestBanner:
    def test_dismissal_scoped_to_episode(self, disruptions, settings_repo, owner_id):
        banner = BannerTracker(settings_repo=settings_repo, owner_id=owner_id)
        first = disruptions.start_disruption("travel")

        assert banner.is_dismissed(first) is False
        banner.dismiss(first)
        assert banner.is_dismissed(first) is True
        assert disruptions.is_disrupted()

        disruptions.end_disruption()
        second = disruptions.start_disruption("stress")
        assert banner.is_dismissed(second) is False

    def test_no_episode_counts_as_dismissed(self, settings_repo, owner_id):
        banner = BannerTracker(settings_repo=settings_repo, owner_id=owner_id)
        banner.dismiss(None)
        assert banner.is_dismissed(None) is True

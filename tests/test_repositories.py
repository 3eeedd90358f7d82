"""Tests for the SQLModel repository implementations."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from habitgrove.models import DisruptionEpisode, Habit, HabitCompletion


class TestHabitRepository:
    def test_create_within_cap_stops_at_cap(self, habit_repo, owner_id):
        for n in range(2):
            assert habit_repo.create_within_cap(Habit(owner_id=owner_id, name=f"H{n}"), 2, owner_id=owner_id)
        assert habit_repo.create_within_cap(Habit(owner_id=owner_id, name="H2"), 2, owner_id=owner_id) is None
        assert len(habit_repo.list_all(owner_id=owner_id)) == 2

    def test_owner_scoping(self, habit_repo, habit_factory):
        habit = habit_factory(name="Mine")
        assert habit_repo.get_by_id(habit.id, owner_id="someone-else") is None
        assert habit_repo.list_all(owner_id="someone-else") == []

    def test_list_active_and_delete(self, habit_repo, habit_factory, owner_id):
        active = habit_factory(name="On")
        habit_factory(name="Off", is_active=False, display_order=1)

        assert [h.id for h in habit_repo.list_active(owner_id=owner_id)] == [active.id]
        assert habit_repo.delete_with_history(active.id, owner_id=owner_id) == (0, 0)
        assert habit_repo.delete_with_history(active.id, owner_id=owner_id) is None

    def test_delete_with_history_counts(
        self, habit_repo, completion_repo, habit_factory, complete_days, owner_id
    ):
        habit = habit_factory()
        complete_days(habit.id, [datetime(2024, 2, d).date() for d in range(1, 4)])
        assert habit_repo.delete_with_history(habit.id, owner_id=owner_id) == (3, 0)
        assert completion_repo.list_for_owner(owner_id=owner_id) == []

    def test_create_within_cap_appends_after_highest_order(
        self, habit_repo, habit_factory, owner_id
    ):
        habit_factory(name="Old", display_order=7)
        new = Habit(owner_id=owner_id, name="New")
        added = habit_repo.create_within_cap(new, 3, owner_id=owner_id)
        assert added.display_order == 8

    def test_created_at_is_timezone_aware(self):
        assert Habit(owner_id="x", name="y").created_at.tzinfo is timezone.utc

    def test_activate_within_cap_missing(self, habit_repo, owner_id):
        assert habit_repo.activate_within_cap("missing", 3, owner_id=owner_id) is None


class TestCompletionRepository:
    def test_upsert_keeps_one_event_per_day(self, completion_repo, habit_factory, owner_id):
        habit = habit_factory()
        for completed in (True, False, True):
            completion_repo.upsert(
                HabitCompletion(
                    habit_id=habit.id, owner_id=owner_id, completed_date="2024-02-01", completed=completed
                ),
                owner_id=owner_id,
            )
        events = completion_repo.list_for_habit(habit.id, owner_id=owner_id)
        assert len(events) == 1
        assert events[0].completed is True


class TestDisruptionRepository:
    def test_second_open_episode_refused(self, disruption_repo, owner_id):
        first = disruption_repo.open_episode(
            DisruptionEpisode(owner_id=owner_id, disruption_type="travel"), owner_id=owner_id
        )
        second = disruption_repo.open_episode(
            DisruptionEpisode(owner_id=owner_id, disruption_type="stress"), owner_id=owner_id
        )
        assert first is not None
        assert second is None
        assert disruption_repo.count(owner_id=owner_id) == 1

    def test_partial_index_rejects_direct_insert(self, session_factory, owner_id):
        with session_factory() as session:
            session.add(DisruptionEpisode(owner_id=owner_id, disruption_type="travel"))

        with pytest.raises(IntegrityError):
            with session_factory() as session:
                session.add(DisruptionEpisode(owner_id=owner_id, disruption_type="stress"))

    def test_closed_episodes_do_not_count_as_open(self, disruption_repo, owner_id):
        for kind in ("travel", "stress"):
            disruption_repo.open_episode(
                DisruptionEpisode(owner_id=owner_id, disruption_type=kind), owner_id=owner_id
            )
            ended = datetime(2024, 1, 1, tzinfo=timezone.utc)
            disruption_repo.close_open(ended, owner_id=owner_id)
        assert disruption_repo.get_open(owner_id=owner_id) is None
        assert disruption_repo.count(owner_id=owner_id) == 2


class TestDailyLogRepository:
    def test_apply_classification_missing_log(self, log_repo, owner_id):
        merged = log_repo.apply_classification(
            "2024-01-01",
            owner_id=owner_id,
            disruption_type="travel",
            recovery_plan=None,
            detected_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            based_on_notes="anything",
        )
        assert merged is None

    def test_apply_classification_checks_notes_not_timestamp(self, log_repo, owner_id):
        log_repo.upsert("2024-01-01", 3, "Flying out tomorrow", owner_id=owner_id)
        log_repo.upsert("2024-01-01", 5, "Flying out tomorrow", owner_id=owner_id)
        kwargs = dict(
            owner_id=owner_id,
            disruption_type="travel",
            recovery_plan=None,
            detected_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

        stale = log_repo.apply_classification("2024-01-01", based_on_notes="Old text", **kwargs)
        merged = log_repo.apply_classification(
            "2024-01-01", based_on_notes="Flying out tomorrow", **kwargs
        )

        assert stale is None
        assert merged.disruption_type == "travel"
        assert merged.mood == 5

    def test_list_recent_newest_first(self, log_repo, owner_id):
        for day in ("2024-01-01", "2024-01-03", "2024-01-02"):
            log_repo.upsert(day, 3, "", owner_id=owner_id)
        days = [log.log_date for log in log_repo.list_recent(owner_id=owner_id, limit=2)]
        assert days == ["2024-01-03", "2024-01-02"]


class TestSettingsRepository:
    def test_set_get_delete(self, settings_repo, owner_id):
        assert settings_repo.get("theme", owner_id=owner_id) is None
        settings_repo.set("theme", "dark", owner_id=owner_id)
        settings_repo.set("theme", "light", owner_id=owner_id)
        assert settings_repo.get("theme", owner_id=owner_id) == "light"
        assert settings_repo.get("theme", owner_id="other") is None
        settings_repo.delete("theme", owner_id=owner_id)
        assert settings_repo.get("theme", owner_id=owner_id) is None

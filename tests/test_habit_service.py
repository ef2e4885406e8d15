"""Tests for habit use-cases on top of the repositories."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

import pytest

from habitkeeper.errors import (
    AlreadyCompletedError,
    CompletionNotFoundError,
    FormValidationError,
    HabitNotFoundError,
    InactiveHabitError,
)
from habitkeeper.infra.repositories import InMemoryHabitRepository, InMemoryStore
from habitkeeper.models import Habit
from habitkeeper.services import habits
from habitkeeper.services.streaks import HABIT_COLORS, StreakData

NOW = datetime(2024, 3, 15, 12, 0, 0)
DAY = timedelta(days=1)


class TestCreateAndUpdate:
    def test_create_habit_defaults(self, habit_repo, user):
        habit = habits.create_habit(
            habit_repo, user_id=user.id, form={"title": "  Stretch  ", "frequency": "weekly"}
        )

        assert habit.id is not None
        assert habit.title == "Stretch"
        assert habit.description == ""
        assert habit.frequency == "WEEKLY"
        assert habit.color in HABIT_COLORS
        assert habit.is_active is True
        assert habit.user_id == user.id

    def test_create_habit_rejects_blank_title(self, habit_repo, user):
        with pytest.raises(FormValidationError) as exc_info:
            habits.create_habit(habit_repo, user_id=user.id, form={"title": "   "})

        assert "title" in exc_info.value.errors
        assert habit_repo.list_for_user(user_id=user.id) == []

    def test_create_habit_rejects_unknown_frequency(self, habit_repo, user):
        with pytest.raises(FormValidationError) as exc_info:
            habits.create_habit(habit_repo, user_id=user.id, form={"title": "x", "frequency": "HOURLY"})

        assert "frequency" in exc_info.value.errors

    def test_update_habit_partial(self, habit_repo, habit_factory, user):
        habit = habit_factory(title="Old", description="keep me")

        updated = habits.update_habit(
            habit_repo, habit_id=habit.id, user_id=user.id, form={"title": "New", "frequency": "monthly"}
        )

        assert updated.title == "New"
        assert updated.description == "keep me"
        assert updated.frequency == "MONTHLY"

    def test_update_foreign_habit_is_not_found(self, habit_repo, habit_factory, user_factory):
        habit = habit_factory(owner=user_factory("owner"))
        stranger = user_factory("stranger")

        with pytest.raises(HabitNotFoundError):
            habits.update_habit(habit_repo, habit_id=habit.id, user_id=stranger.id, form={"title": "x"})

    def test_delete_habit_is_soft(self, habit_repo, habit_factory, completion_factory, user):
        habit = habit_factory()
        completion_factory(habit, NOW)

        habits.delete_habit(habit_repo, habit_id=habit.id, user_id=user.id)

        assert habit_repo.list_for_user(user_id=user.id) == []
        stored = habit_repo.get_by_id(habit.id, user_id=user.id)
        assert stored.is_active is False
        assert len(habit_repo.list_completions(habit.id)) == 1


class TestCompleteHabit:
    def test_records_completion_and_last_completed(self, habit_repo, habit_factory, user):
        habit = habit_factory()

        completion = habits.complete_habit(
            habit_repo, habit_id=habit.id, user_id=user.id, notes="done", now=NOW
        )

        assert completion.id is not None
        assert completion.completed_at == NOW
        assert completion.notes == "done"
        assert habit_repo.get_by_id(habit.id, user_id=user.id).last_completed == NOW

    def test_second_completion_same_day_rejected(self, habit_repo, habit_factory, user):
        habit = habit_factory()
        habits.complete_habit(habit_repo, habit_id=habit.id, user_id=user.id, now=NOW)

        with pytest.raises(AlreadyCompletedError):
            habits.complete_habit(
                habit_repo, habit_id=habit.id, user_id=user.id, now=NOW + timedelta(hours=3)
            )
        assert len(habit_repo.list_completions(habit.id)) == 1

    def test_completion_next_day_allowed(self, habit_repo, habit_factory, user):
        habit = habit_factory()
        habits.complete_habit(habit_repo, habit_id=habit.id, user_id=user.id, now=NOW)
        habits.complete_habit(habit_repo, habit_id=habit.id, user_id=user.id, now=NOW + DAY)

        assert len(habit_repo.list_completions(habit.id)) == 2

    def test_inactive_habit_rejected(self, habit_repo, habit_factory, user):
        habit = habit_factory(is_active=False)

        with pytest.raises(InactiveHabitError):
            habits.complete_habit(habit_repo, habit_id=habit.id, user_id=user.id, now=NOW)

    def test_unknown_habit(self, habit_repo, user):
        with pytest.raises(HabitNotFoundError):
            habits.complete_habit(habit_repo, habit_id=999, user_id=user.id, now=NOW)

    def test_overlong_notes_rejected(self, habit_repo, habit_factory, user):
        habit = habit_factory()

        with pytest.raises(FormValidationError):
            habits.complete_habit(habit_repo, habit_id=habit.id, user_id=user.id, notes="x" * 501, now=NOW)


class TestCompletionQueries:
    def test_list_completions_requires_ownership(self, habit_repo, habit_factory, user_factory):
        habit = habit_factory(owner=user_factory("owner"))

        with pytest.raises(HabitNotFoundError):
            habits.list_completions(habit_repo, habit_id=habit.id, user_id=habit.user_id + 500)

    def test_list_user_completions_pairs_habits(self, habit_repo, habit_factory, completion_factory, user):
        run = habit_factory(title="Run")
        read = habit_factory(title="Read")
        retired = habit_factory(title="Retired", is_active=False)
        completion_factory(run, NOW - DAY)
        completion_factory(read, NOW)
        completion_factory(retired, NOW)

        rows = habits.list_user_completions(habit_repo, user_id=user.id)

        assert [(c.completed_at, h.title) for c, h in rows] == [(NOW, "Read"), (NOW - DAY, "Run")]

    def test_delete_completion(self, habit_repo, habit_factory, completion_factory, user):
        habit = habit_factory()
        completion = completion_factory(habit, NOW)

        habits.delete_completion(habit_repo, completion_id=completion.id, user_id=user.id)

        assert habit_repo.get_completion(completion.id) is None

    def test_delete_foreign_completion(self, habit_repo, habit_factory, completion_factory, user_factory):
        habit = habit_factory(owner=user_factory("owner"))
        completion = completion_factory(habit, NOW)
        stranger = user_factory("stranger")

        with pytest.raises(CompletionNotFoundError):
            habits.delete_completion(habit_repo, completion_id=completion.id, user_id=stranger.id)
        assert habit_repo.get_completion(completion.id) is not None

    def test_delete_missing_completion(self, habit_repo, user):
        with pytest.raises(CompletionNotFoundError):
            habits.delete_completion(habit_repo, completion_id=12345, user_id=user.id)


class TestStreakViews:
    def test_habits_with_streaks(self, habit_repo, habit_factory, completion_factory, user):
        daily = habit_factory(title="Daily", created_at=NOW - DAY)
        lapsed = habit_factory(title="Lapsed", created_at=NOW - 2 * DAY)
        habit_factory(title="Fresh", created_at=NOW)
        for offset in range(3):
            completion_factory(daily, NOW - offset * DAY)
        for offset in (5, 4, 3):
            completion_factory(lapsed, NOW - offset * DAY)

        views = habits.list_habits_with_streaks(habit_repo, user_id=user.id, now=NOW)
        by_title = {view.habit.title: view for view in views}

        assert [view.habit.title for view in views] == ["Fresh", "Daily", "Lapsed"]
        assert by_title["Daily"].streak_data == StreakData(streak=3, best_streak=3, total=3)
        assert by_title["Daily"].completed_today is True
        assert by_title["Lapsed"].streak_data == StreakData(streak=0, best_streak=3, total=3)
        assert by_title["Lapsed"].completed_today is False
        assert by_title["Fresh"].streak_data == StreakData()
        assert by_title["Fresh"].completions == []

    def test_leaderboard_orders_by_best_streak(self, habit_repo, habit_factory, completion_factory, user):
        short = habit_factory(title="Short", created_at=NOW)
        long = habit_factory(title="Long", created_at=NOW - DAY)
        completion_factory(short, NOW)
        for offset in range(10, 4, -1):
            completion_factory(long, NOW - offset * DAY)

        ranked = habits.streak_leaderboard(habit_repo, user_id=user.id, now=NOW)

        assert [view.habit.title for view in ranked] == ["Long", "Short"]
        assert ranked[0].streak_data.best_streak == 6
        assert ranked[0].streak_data.streak == 0

    def test_views_reflect_completions_after_recording(self, habit_repo, habit_factory, completion_factory, user):
        habit = habit_factory()
        completion_factory(habit, NOW - DAY)

        habits.complete_habit(habit_repo, habit_id=habit.id, user_id=user.id, now=NOW)
        (view,) = habits.list_habits_with_streaks(habit_repo, user_id=user.id, now=NOW)

        assert view.streak_data == StreakData(streak=2, best_streak=2, total=2)
        assert view.completed_today is True


def test_concurrent_completions_store_one_per_day():
    repo = InMemoryHabitRepository(InMemoryStore())
    habit = repo.create(Habit(title="Read", user_id=1), user_id=1)
    workers = 8
    barrier = threading.Barrier(workers)

    def complete():
        barrier.wait()
        try:
            habits.complete_habit(repo, habit_id=habit.id, user_id=1, now=NOW)
        except AlreadyCompletedError:
            return False
        return True

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(lambda _: complete(), range(workers)))

    assert outcomes.count(True) == 1
    assert len(repo.list_completions(habit.id)) == 1

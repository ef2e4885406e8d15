"""Habit use-cases: creation, updates, completions and streak views."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..domain.repositories.habit import HabitRepository
from ..errors import (
    AlreadyCompletedError,
    CompletionNotFoundError,
    HabitNotFoundError,
    InactiveHabitError,
)
from ..forms import CompletionForm, HabitForm, HabitUpdateForm, validate_form
from ..logging_config import get_logger
from ..models.habit import Habit, HabitCompletion
from .streaks import (
    ONE_DAY,
    StreakData,
    calculate_streak_data,
    is_completed_today,
    random_color,
    rank_by_best_streak,
    start_of_day,
    to_local_naive,
)

logger = get_logger(__name__)


@dataclass
class HabitWithStreak:
    """A habit together with its completions and derived statistics."""

    habit: Habit
    completions: list[HabitCompletion] = field(default_factory=list)
    streak_data: StreakData = field(default_factory=StreakData)
    completed_today: bool = False


def get_habit(repo: HabitRepository, *, habit_id: int, user_id: int) -> Habit:
    """Return the user's habit or raise ``HabitNotFoundError``."""

    habit = repo.get_by_id(habit_id, user_id=user_id)
    if habit is None:
        raise HabitNotFoundError(f"Habit {habit_id} not found")
    return habit


def create_habit(
    repo: HabitRepository, *, user_id: int, form: HabitForm | Mapping[str, Any]
) -> Habit:
    """Create an active habit with a randomly assigned colour."""

    data = validate_form(HabitForm, form)
    now = datetime.now()
    habit = repo.create(
        Habit(
            title=data.title,
            description=data.description,
            frequency=data.frequency.value,
            color=random_color(),
            is_active=True,
            created_at=now,
            updated_at=now,
            user_id=user_id,
        ),
        user_id=user_id,
    )
    logger.info("Habit created", extra={"habit_id": habit.id, "user_id": user_id})
    return habit


def update_habit(
    repo: HabitRepository,
    *,
    habit_id: int,
    user_id: int,
    form: HabitUpdateForm | Mapping[str, Any],
) -> Habit:
    """Apply a partial update to a habit the user owns."""

    changes = validate_form(HabitUpdateForm, form).changes()
    habit = get_habit(repo, habit_id=habit_id, user_id=user_id)
    for key, value in changes.items():
        setattr(habit, key, getattr(value, "value", value))
    habit.updated_at = datetime.now()
    return repo.update(habit, user_id=user_id)


def delete_habit(repo: HabitRepository, *, habit_id: int, user_id: int) -> Habit:
    """Soft-delete: the habit and its history are kept but hidden."""

    habit = update_habit(repo, habit_id=habit_id, user_id=user_id, form={"is_active": False})
    logger.info("Habit deactivated", extra={"habit_id": habit_id, "user_id": user_id})
    return habit


def complete_habit(
    repo: HabitRepository,
    *,
    habit_id: int,
    user_id: int,
    notes: str = "",
    now: Optional[datetime] = None,
) -> HabitCompletion:
    """Record that the habit was done now.

    Raises ``InactiveHabitError`` for a deactivated habit and
    ``AlreadyCompletedError`` when a completion already exists today.
    """

    data = validate_form(CompletionForm, {"notes": notes or ""})
    habit = get_habit(repo, habit_id=habit_id, user_id=user_id)
    if not habit.is_active:
        raise InactiveHabitError("Habit is no longer active")

    moment = to_local_naive(now) if now is not None else datetime.now()
    day_start = start_of_day(moment)
    todays = repo.list_completions_between(habit_id, day_start, day_start + ONE_DAY)
    if is_completed_today(todays, now=moment):
        raise AlreadyCompletedError("Habit already completed today")

    completion = repo.add_completion_once(
        HabitCompletion(habit_id=habit_id, completed_at=moment, notes=data.notes, created_at=moment),
        start=day_start,
        end=day_start + ONE_DAY,
    )
    if completion is None:
        raise AlreadyCompletedError("Habit already completed today")
    habit.last_completed = moment
    habit.updated_at = moment
    repo.update(habit, user_id=user_id)
    logger.info(
        "Habit completed",
        extra={"habit_id": habit_id, "user_id": user_id, "completion_id": completion.id},
    )
    return completion


def list_completions(repo: HabitRepository, *, habit_id: int, user_id: int) -> list[HabitCompletion]:
    """Completions of one of the user's habits, newest first."""

    get_habit(repo, habit_id=habit_id, user_id=user_id)
    return repo.list_completions(habit_id)


def list_user_completions(
    repo: HabitRepository, *, user_id: int
) -> list[tuple[HabitCompletion, Habit]]:
    """Completions across the user's active habits, newest first, paired with the habit."""

    habits = {h.id: h for h in repo.list_for_user(user_id=user_id)}
    completions = repo.list_completions_for_habits(list(habits))
    return [(c, habits[c.habit_id]) for c in completions]


def delete_completion(repo: HabitRepository, *, completion_id: int, user_id: int) -> None:
    """Delete a completion whose habit belongs to the user."""

    completion = repo.get_completion(completion_id)
    if completion is None or repo.get_by_id(completion.habit_id, user_id=user_id) is None:
        raise CompletionNotFoundError(f"Completion {completion_id} not found")
    repo.delete_completion(completion_id)
    logger.info("Completion deleted", extra={"completion_id": completion_id, "user_id": user_id})


def list_habits_with_streaks(
    repo: HabitRepository, *, user_id: int, now: Optional[datetime] = None
) -> list[HabitWithStreak]:
    """Active habits, newest first, each with completions and streak data."""

    moment = to_local_naive(now) if now is not None else datetime.now()
    habits = repo.list_for_user(user_id=user_id)
    by_habit: dict[int, list[HabitCompletion]] = {h.id: [] for h in habits}
    for completion in repo.list_completions_for_habits(list(by_habit)):
        by_habit[completion.habit_id].append(completion)

    return [
        HabitWithStreak(
            habit=habit,
            completions=by_habit[habit.id],
            streak_data=calculate_streak_data(by_habit[habit.id], now=moment),
            completed_today=is_completed_today(by_habit[habit.id], now=moment),
        )
        for habit in habits
    ]


def streak_leaderboard(
    repo: HabitRepository, *, user_id: int, now: Optional[datetime] = None
) -> list[HabitWithStreak]:
    """The user's habits ordered by best streak, highest first."""

    views = list_habits_with_streaks(repo, user_id=user_id, now=now)
    ranked = rank_by_best_streak((view, view.streak_data) for view in views)
    return [view for view, _ in ranked]


__all__ = [
    "HabitWithStreak",
    "complete_habit",
    "create_habit",
    "delete_completion",
    "delete_habit",
    "get_habit",
    "list_completions",
    "list_habits_with_streaks",
    "list_user_completions",
    "streak_leaderboard",
    "update_habit",
]

"""Demo data seeding through the repository interfaces."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional

from ..domain.repositories import HabitRepository, UserRepository
from ..logging_config import get_logger
from ..models.habit import Habit, HabitCompletion
from ..models.user import User
from . import auth
from .streaks import random_color

logger = get_logger(__name__)

DEMO_EMAIL = "demo@habitkeeper.local"
DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo1234"

# (title, description, frequency, probability of completing on a given day)
_HABIT_SPECS = [
    ("Morning Exercise", "30 minutes of cardio or strength training", "DAILY", 0.85),
    ("Read 30 Minutes", "Books, articles or educational content", "DAILY", 0.7),
    ("Meditate", "10-15 minutes of mindfulness meditation", "DAILY", 0.6),
    ("Drink Water", "Eight glasses throughout the day", "DAILY", 0.95),
    ("Meal Prep", "Prepare meals for the upcoming week", "WEEKLY", 0.15),
    ("Call Family", "Stay connected with family members", "WEEKLY", 0.2),
    ("Deep Clean", "Thorough cleaning of one room", "MONTHLY", 0.05),
]


@dataclass
class SeedSummary:
    user: User
    habits_created: int
    completions_created: int


def _ensure_demo_user(users: UserRepository) -> User:
    existing = users.get_by_username(DEMO_USERNAME)
    if existing is not None:
        return existing
    return auth.sign_up(
        users,
        form={"email": DEMO_EMAIL, "username": DEMO_USERNAME, "password": DEMO_PASSWORD, "name": "Demo User"},
    )


def run_demo_seed(
    users: UserRepository,
    habits: HabitRepository,
    *,
    days: int = 60,
    now: Optional[datetime] = None,
    seed: int = 2024,
) -> SeedSummary:
    """Create the demo user and habits with ``days`` of completion history.

    Habits that already exist for the demo user (matched by title) are left
    alone, so running the seed twice does not duplicate data.
    """

    rng = random.Random(seed)
    moment = now or datetime.now()
    user = _ensure_demo_user(users)
    existing_titles = {h.title for h in habits.list_for_user(user_id=user.id, include_inactive=True)}

    habits_created = 0
    completions_created = 0
    for title, description, frequency, probability in _HABIT_SPECS:
        if title in existing_titles:
            continue
        habit = habits.create(
            Habit(
                title=title,
                description=description,
                frequency=frequency,
                color=random_color(rng),
                created_at=moment - timedelta(days=days),
                updated_at=moment,
                user_id=user.id,
            ),
            user_id=user.id,
        )
        habits_created += 1

        last_completed: Optional[datetime] = None
        for offset in range(days, 0, -1):
            if rng.random() > probability:
                continue
            day = (moment - timedelta(days=offset)).date()
            completed = datetime.combine(day, time(hour=rng.randint(6, 21), minute=rng.randint(0, 59)))
            habits.add_completion(
                HabitCompletion(habit_id=habit.id, completed_at=completed, created_at=completed)
            )
            completions_created += 1
            last_completed = completed

        if last_completed is not None:
            habit.last_completed = last_completed
            habits.update(habit, user_id=user.id)

    logger.info(
        "Demo seed finished",
        extra={"habits_created": habits_created, "completions_created": completions_created},
    )
    return SeedSummary(user=user, habits_created=habits_created, completions_created=completions_created)

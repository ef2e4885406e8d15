"""SQLModel table exports."""

from .habit import Habit, HabitCompletion, HabitFrequency
from .user import User

__all__ = [
    "Habit",
    "HabitCompletion",
    "HabitFrequency",
    "User",
]

"""Concrete repository implementations: relational (SQLModel) and in-memory."""

from .habit import SQLModelHabitRepository
from .memory import InMemoryHabitRepository, InMemoryStore, InMemoryUserRepository
from .user import SQLModelUserRepository

__all__ = [
    "InMemoryHabitRepository",
    "InMemoryStore",
    "InMemoryUserRepository",
    "SQLModelHabitRepository",
    "SQLModelUserRepository",
]

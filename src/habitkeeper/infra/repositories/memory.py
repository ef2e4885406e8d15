"""In-memory document-style repositories.

Records live in per-collection dictionaries and are copied on the way in and
on the way out, so callers never share instances with the store. Used for
tests, demos and deployments that do not need the relational backend.
"""

from __future__ import annotations

import itertools
import threading
from datetime import datetime
from typing import Optional, Sequence, TypeVar

from sqlmodel import SQLModel

from ...models.habit import Habit, HabitCompletion
from ...models.user import User

M = TypeVar("M", bound=SQLModel)


def _copy(record: M) -> M:
    return type(record)(**record.model_dump())


class _Collection:
    """Id-keyed document collection with its own id sequence."""

    def __init__(self) -> None:
        self.documents: dict[int, SQLModel] = {}
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)


class InMemoryStore:
    """Shared state for the in-memory repositories of one application."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = _Collection()
        self.habits = _Collection()
        self.completions = _Collection()


class InMemoryHabitRepository:
    """Dictionary-backed habit and completion repository."""

    def __init__(self, store: Optional[InMemoryStore] = None):
        self.store = store or InMemoryStore()

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        with self.store.lock:
            habit = self.store.habits.documents.get(habit_id)
            if habit is None or habit.user_id != user_id:
                return None
            return _copy(habit)

    def list_for_user(self, *, user_id: int, include_inactive: bool = False) -> list[Habit]:
        with self.store.lock:
            habits = [
                _copy(habit)
                for habit in self.store.habits.documents.values()
                if habit.user_id == user_id and (include_inactive or habit.is_active)
            ]
        return sorted(habits, key=lambda h: (h.created_at, h.id), reverse=True)

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        with self.store.lock:
            stored = _copy(habit)
            stored.id = self.store.habits.next_id()
            stored.user_id = user_id
            self.store.habits.documents[stored.id] = stored
            return _copy(stored)

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        with self.store.lock:
            existing = self.store.habits.documents.get(habit.id)
            if existing is None or existing.user_id != user_id:
                raise LookupError(f"Habit {habit.id} does not exist")
            stored = _copy(habit)
            stored.user_id = user_id
            self.store.habits.documents[stored.id] = stored
            return _copy(stored)

    # Completion operations
    def add_completion(self, completion: HabitCompletion) -> HabitCompletion:
        with self.store.lock:
            if completion.habit_id not in self.store.habits.documents:
                raise LookupError(f"Habit {completion.habit_id} does not exist")
            stored = _copy(completion)
            stored.id = self.store.completions.next_id()
            self.store.completions.documents[stored.id] = stored
            return _copy(stored)

    def add_completion_once(
        self, completion: HabitCompletion, *, start: datetime, end: datetime
    ) -> Optional[HabitCompletion]:
        with self.store.lock:
            for existing in self.store.completions.documents.values():
                if existing.habit_id == completion.habit_id and start <= existing.completed_at < end:
                    return None
            return self.add_completion(completion)

    def get_completion(self, completion_id: int) -> Optional[HabitCompletion]:
        with self.store.lock:
            completion = self.store.completions.documents.get(completion_id)
            return _copy(completion) if completion is not None else None

    def list_completions(self, habit_id: int) -> list[HabitCompletion]:
        return self.list_completions_for_habits([habit_id])

    def list_completions_between(
        self, habit_id: int, start: datetime, end: datetime
    ) -> list[HabitCompletion]:
        with self.store.lock:
            rows = [
                _copy(c)
                for c in self.store.completions.documents.values()
                if c.habit_id == habit_id and start <= c.completed_at < end
            ]
        return sorted(rows, key=lambda c: c.completed_at)

    def list_completions_for_habits(self, habit_ids: Sequence[int]) -> list[HabitCompletion]:
        wanted = set(habit_ids)
        if not wanted:
            return []
        with self.store.lock:
            rows = [
                _copy(c)
                for c in self.store.completions.documents.values()
                if c.habit_id in wanted
            ]
        return sorted(rows, key=lambda c: (c.completed_at, c.id), reverse=True)

    def delete_completion(self, completion_id: int) -> None:
        with self.store.lock:
            self.store.completions.documents.pop(completion_id, None)


class InMemoryUserRepository:
    """Dictionary-backed user repository."""

    def __init__(self, store: Optional[InMemoryStore] = None):
        self.store = store or InMemoryStore()

    def _find(self, predicate) -> Optional[User]:
        with self.store.lock:
            for user in self.store.users.documents.values():
                if predicate(user):
                    return _copy(user)
        return None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._find(lambda u: u.id == user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        return self._find(lambda u: u.email.lower() == wanted)

    def get_by_username(self, username: str) -> Optional[User]:
        wanted = username.strip()
        return self._find(lambda u: u.username == wanted)

    def find_by_login(self, identifier: str) -> Optional[User]:
        return self.get_by_email(identifier) or self.get_by_username(identifier)

    def create(self, user: User) -> User:
        with self.store.lock:
            if self._find(lambda u: u.email.lower() == user.email.lower() or u.username == user.username):
                raise ValueError("User with this email or username already exists")
            stored = _copy(user)
            stored.id = self.store.users.next_id()
            self.store.users.documents[stored.id] = stored
            return _copy(stored)

    def update(self, user: User) -> User:
        with self.store.lock:
            if user.id not in self.store.users.documents:
                raise LookupError(f"User {user.id} does not exist")
            stored = _copy(user)
            self.store.users.documents[stored.id] = stored
            return _copy(stored)

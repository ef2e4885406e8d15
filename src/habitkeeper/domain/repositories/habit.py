"""Habit and completion repository protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ...models.habit import Habit, HabitCompletion


class HabitRepository(Protocol):
    """Habit Store and Completion Store for one backend.

    Habit lookups are scoped to ``user_id``; a habit owned by someone else is
    reported exactly like a missing one.
    """

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_for_user(self, *, user_id: int, include_inactive: bool = False) -> list[Habit]:
        """List a user's habits, newest first."""
        ...

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit."""
        ...

    # Completion operations
    def add_completion(self, completion: HabitCompletion) -> HabitCompletion:
        """Persist a completion record."""
        ...

    def add_completion_once(
        self, completion: HabitCompletion, *, start: datetime, end: datetime
    ) -> Optional[HabitCompletion]:
        """Persist ``completion`` unless the habit already has one in ``[start, end)``.

        The check and the insert are atomic; returns None when a completion
        already exists in the window.
        """
        ...

    def get_completion(self, completion_id: int) -> Optional[HabitCompletion]:
        """Get a completion by ID (ownership is checked by the caller)."""
        ...

    def list_completions(self, habit_id: int) -> list[HabitCompletion]:
        """All completions for a habit, newest first."""
        ...

    def list_completions_between(
        self, habit_id: int, start: datetime, end: datetime
    ) -> list[HabitCompletion]:
        """Completions with ``start <= completed_at < end``, oldest first."""
        ...

    def list_completions_for_habits(self, habit_ids: Sequence[int]) -> list[HabitCompletion]:
        """Completions for several habits, newest first."""
        ...

    def delete_completion(self, completion_id: int) -> None:
        """Delete a completion."""
        ...

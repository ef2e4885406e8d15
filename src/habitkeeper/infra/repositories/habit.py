"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import insert, literal
from sqlalchemy import select as sa_select
from sqlmodel import col, select

from ...models.habit import Habit, HabitCompletion
from ..database import SessionFactory


class SQLModelHabitRepository:
    """SQLModel-based habit and completion repository."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_for_user(self, *, user_id: int, include_inactive: bool = False) -> list[Habit]:
        """List a user's habits, newest first."""
        with self.session_factory() as session:
            statement = select(Habit).where(Habit.user_id == user_id)
            if not include_inactive:
                statement = statement.where(Habit.is_active == True)  # noqa: E712
            statement = statement.order_by(col(Habit.created_at).desc(), col(Habit.id).desc())

            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            habit.user_id = user_id
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit."""
        with self.session_factory() as session:
            existing = session.get(Habit, habit.id) if habit.id is not None else None
            if existing is None or existing.user_id != user_id:
                raise LookupError(f"Habit {habit.id} does not exist")
            habit.user_id = user_id
            merged = session.merge(habit)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    # Completion operations
    def add_completion(self, completion: HabitCompletion) -> HabitCompletion:
        """Persist a completion record."""
        with self.session_factory() as session:
            if session.get(Habit, completion.habit_id) is None:
                raise LookupError(f"Habit {completion.habit_id} does not exist")
            session.add(completion)
            session.commit()
            session.refresh(completion)
            session.expunge(completion)
            return completion

    def add_completion_once(
        self, completion: HabitCompletion, *, start: datetime, end: datetime
    ) -> Optional[HabitCompletion]:
        """Insert with a single ``INSERT ... SELECT ... WHERE NOT EXISTS`` statement."""
        table = HabitCompletion.__table__
        already = sa_select(table.c.id).where(
            table.c.habit_id == completion.habit_id,
            table.c.completed_at >= start,
            table.c.completed_at < end,
        )
        row = sa_select(
            literal(completion.habit_id, table.c.habit_id.type),
            literal(completion.completed_at, table.c.completed_at.type),
            literal(completion.notes, table.c.notes.type),
            literal(completion.created_at, table.c.created_at.type),
        ).where(~already.exists())
        statement = insert(table).from_select(
            ["habit_id", "completed_at", "notes", "created_at"], row
        )

        with self.session_factory() as session:
            if session.get(Habit, completion.habit_id) is None:
                raise LookupError(f"Habit {completion.habit_id} does not exist")
            result = session.connection().execute(statement)
            if result.rowcount == 0:
                return None
            stored = session.exec(
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == completion.habit_id)
                .where(HabitCompletion.completed_at == completion.completed_at)
                .order_by(col(HabitCompletion.id).desc())
            ).first()
            session.commit()
            session.expunge(stored)
            return stored

    def get_completion(self, completion_id: int) -> Optional[HabitCompletion]:
        """Get a completion by ID."""
        with self.session_factory() as session:
            obj = session.get(HabitCompletion, completion_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_completions(self, habit_id: int) -> list[HabitCompletion]:
        """All completions for a habit, newest first."""
        return self.list_completions_for_habits([habit_id])

    def list_completions_between(
        self, habit_id: int, start: datetime, end: datetime
    ) -> list[HabitCompletion]:
        """Completions with ``start <= completed_at < end``, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.completed_at >= start)
                .where(HabitCompletion.completed_at < end)
                .order_by(col(HabitCompletion.completed_at).asc())
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_completions_for_habits(self, habit_ids: Sequence[int]) -> list[HabitCompletion]:
        """Completions for several habits, newest first."""
        if not habit_ids:
            return []
        with self.session_factory() as session:
            statement = (
                select(HabitCompletion)
                .where(col(HabitCompletion.habit_id).in_(list(habit_ids)))
                .order_by(col(HabitCompletion.completed_at).desc(), col(HabitCompletion.id).desc())
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def delete_completion(self, completion_id: int) -> None:
        """Delete a completion."""
        with self.session_factory() as session:
            completion = session.get(HabitCompletion, completion_id)
            if completion:
                session.delete(completion)
                session.commit()

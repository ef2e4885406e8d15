"""Habit tracking data structures."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class HabitFrequency(str, Enum):
    """How often a habit is meant to be performed. Stored, not used for streaks."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class Habit(SQLModel, table=True):
    """A user-defined recurring task."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=100)
    description: str = Field(default="", max_length=500)
    frequency: str = Field(default=HabitFrequency.DAILY.value, max_length=16)
    color: str = Field(default="#4ECDC4", max_length=16)
    is_active: bool = Field(default=True, nullable=False, index=True)
    last_completed: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.now, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.now, nullable=False)


class HabitCompletion(SQLModel, table=True):
    """A timestamped record that one instance of a habit was fulfilled.

    ``completed_at`` is a naive local wall-clock datetime.
    """

    __tablename__: ClassVar[str] = "habit_completion"

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True)
    completed_at: datetime = Field(default_factory=datetime.now, nullable=False, index=True)
    notes: str = Field(default="", max_length=500)
    created_at: datetime = Field(default_factory=datetime.now, nullable=False)

"""Pytest configuration and shared fixtures for HabitKeeper tests.

This module provides database fixtures, repository adapters for both store
backends, and test data factories, so tests never touch the real app database.
"""

from __future__ import annotations

import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from habitkeeper import create_app
from habitkeeper.config import TestConfig
from habitkeeper.infra.repositories import (
    InMemoryHabitRepository,
    InMemoryStore,
    InMemoryUserRepository,
    SQLModelHabitRepository,
    SQLModelUserRepository,
)
from habitkeeper.models import Habit, HabitCompletion, User


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep data directories and store selection out of the developer's environment."""

    monkeypatch.setenv("HABITKEEPER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("HABITKEEPER_STORE", raising=False)
    monkeypatch.delenv("HABITKEEPER_DATABASE_URL", raising=False)
    monkeypatch.delenv("HABITKEEPER_SECRET_KEY", raising=False)
    monkeypatch.delenv("HABITKEEPER_DEV_MODE", raising=False)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching ``habitkeeper.infra.database.create_session_factory``."""

    @contextmanager
    def factory():
        session = Session(db_engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


# =============================================================================
# Repository Fixtures
# =============================================================================


@pytest.fixture(params=["sql", "memory"])
def backend(request, session_factory):
    """Yield ``(user_repo, habit_repo)`` for each store backend in turn."""

    if request.param == "sql":
        return SQLModelUserRepository(session_factory), SQLModelHabitRepository(session_factory)
    store = InMemoryStore()
    return InMemoryUserRepository(store), InMemoryHabitRepository(store)


@pytest.fixture
def user_repo(backend):
    return backend[0]


@pytest.fixture
def habit_repo(backend):
    return backend[1]


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user_factory(user_repo):
    """Factory for creating users directly through the repository."""

    counter = {"n": 0}

    def _create_user(username: str | None = None, email: str | None = None) -> User:
        counter["n"] += 1
        username = username or f"tester{counter['n']}"
        return user_repo.create(
            User(
                email=email or f"{username}@example.com",
                username=username,
                name=username,
                password_hash="dummy-hash",
            )
        )

    return _create_user


@pytest.fixture
def user(user_factory) -> User:
    """Create a default user for scoping data."""

    return user_factory("tester")


@pytest.fixture
def habit_factory(habit_repo, user):
    """Factory for creating test habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        title: str = "Test Habit",
        description: str = "Test habit description",
        frequency: str = "DAILY",
        is_active: bool = True,
        owner: User | None = None,
        created_at: datetime | None = None,
    ) -> Habit:
        owner = owner or user
        return habit_repo.create(
            Habit(
                title=title,
                description=description,
                frequency=frequency,
                is_active=is_active,
                created_at=created_at or datetime.now(),
                user_id=owner.id,
            ),
            user_id=owner.id,
        )

    return _create_habit


@pytest.fixture
def completion_factory(habit_repo):
    """Factory persisting completions at explicit timestamps."""

    def _create_completion(habit: Habit, completed_at: datetime, notes: str = "") -> HabitCompletion:
        return habit_repo.add_completion(
            HabitCompletion(habit_id=habit.id, completed_at=completed_at, notes=notes)
        )

    return _create_completion


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app():
    """Flask app on the in-memory store."""

    application = create_app(config=TestConfig())
    yield application


@pytest.fixture
def runner(app):
    return app.test_cli_runner()

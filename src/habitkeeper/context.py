"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from .config import STORE_MEMORY, STORE_SQL, BaseConfig
from .domain.auth import AuthProvider
from .domain.repositories import HabitRepository, UserRepository
from .infra.auth import SessionAuthProvider
from .infra.database import bootstrap_database
from .infra.repositories import (
    InMemoryHabitRepository,
    InMemoryStore,
    InMemoryUserRepository,
    SQLModelHabitRepository,
    SQLModelUserRepository,
)
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Centralized application context with the configured adapters."""

    config: BaseConfig
    habit_repo: HabitRepository
    user_repo: UserRepository
    auth_provider: AuthProvider
    engine: Optional[Engine] = None


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    auth_provider: Optional[AuthProvider] = None,
) -> AppContext:
    """Create the context, wiring the store selected by ``config.STORE``."""

    if config is None:
        config = BaseConfig()
    provider = auth_provider or SessionAuthProvider()

    if config.STORE == STORE_MEMORY:
        store = InMemoryStore()
        context = AppContext(
            config=config,
            habit_repo=InMemoryHabitRepository(store),
            user_repo=InMemoryUserRepository(store),
            auth_provider=provider,
        )
    elif config.STORE == STORE_SQL:
        engine, session_factory = bootstrap_database(config)
        context = AppContext(
            config=config,
            habit_repo=SQLModelHabitRepository(session_factory),
            user_repo=SQLModelUserRepository(session_factory),
            auth_provider=provider,
            engine=engine,
        )
    else:
        raise ValueError(f"Unknown store backend: {config.STORE!r}")

    logger.info("Application context ready", extra={"store": config.STORE})
    return context

"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from sqlalchemy.pool import StaticPool

load_dotenv()

STORE_SQL = "sql"
STORE_MEMORY = "memory"
_STORES = {STORE_SQL, STORE_MEMORY}


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitKeeper"
    DB_FILENAME = "habitkeeper.db"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}
    DEBUG = False
    TESTING = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("HABITKEEPER_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITKEEPER_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABITKEEPER_DATABASE_URL", self._build_sqlite_url())
        self.STORE = self._resolve_store()
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("HABITKEEPER_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITKEEPER_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _resolve_store(self) -> str:
        store = os.getenv("HABITKEEPER_STORE", STORE_SQL).strip().lower()
        if store not in _STORES:
            raise ValueError(
                f"HABITKEEPER_STORE must be one of {sorted(_STORES)}, got {store!r}."
            )
        return store

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True


class TestConfig(BaseConfig):
    """Configuration for the test-suite: in-memory store, no secrets required."""

    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DEV_MODE = True
        self.STORE = os.getenv("HABITKEEPER_STORE", STORE_MEMORY).strip().lower()
        self.DATABASE_URL = os.getenv("HABITKEEPER_DATABASE_URL", "sqlite://")

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        options = super().sqlalchemy_engine_options()
        if self.DATABASE_URL == "sqlite://":
            # a single shared connection keeps the in-memory database alive
            options["poolclass"] = StaticPool
        return options


_CONFIG_MAP: dict[str, type[BaseConfig]] = {
    "development": DevConfig,
    "testing": TestConfig,
    "default": BaseConfig,
}


def resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


__all__ = [
    "BaseConfig",
    "DevConfig",
    "STORE_MEMORY",
    "STORE_SQL",
    "TestConfig",
    "resolve_config",
]

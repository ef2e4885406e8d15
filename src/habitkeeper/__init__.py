"""HabitKeeper application factory."""

from __future__ import annotations

from flask import Flask

from . import cli as _cli
from .config import BaseConfig, DevConfig, TestConfig, resolve_config
from .context import AppContext, create_app_context
from .extensions import init_context
from .logging_config import setup_logging


def create_app(
    config_name: str | None = None,
    *,
    config: BaseConfig | None = None,
    context: AppContext | None = None,
) -> Flask:
    """Create and configure the Flask application instance.

    ``config`` overrides ``config_name``; ``context`` injects pre-built
    adapters instead of building them from the configuration.
    """

    app = Flask(__name__, instance_relative_config=True)
    config_obj = config or resolve_config(config_name)()
    app.config.from_object(config_obj)
    app.config["HABITKEEPER_CONFIG"] = config_obj

    setup_logging(config_obj)
    init_context(app, context)
    _cli.init_app(app)
    return app


__all__ = [
    "AppContext",
    "BaseConfig",
    "DevConfig",
    "TestConfig",
    "create_app",
    "create_app_context",
]

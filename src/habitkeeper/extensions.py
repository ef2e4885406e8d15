"""Flask wiring for the application context."""

from __future__ import annotations

from flask import Flask, current_app

from .context import AppContext, create_app_context

EXTENSION_KEY = "habitkeeper"


def init_context(app: Flask, context: AppContext | None = None) -> AppContext:
    """Attach an ``AppContext`` to the app, creating one from its config if needed."""

    if context is None:
        context = create_app_context(app.config["HABITKEEPER_CONFIG"])
    app.extensions[EXTENSION_KEY] = context
    return context


def get_context() -> AppContext:
    """Return the context of the active Flask application."""

    context = current_app.extensions.get(EXTENSION_KEY)
    if context is None:
        raise RuntimeError("Application context not initialized")
    return context

"""Auth provider adapters."""

from __future__ import annotations

from typing import Any, Optional

from flask import has_request_context, session

SESSION_USER_KEY = "user_id"


class SessionAuthProvider:
    """Read the signed-in user id from the Flask session.

    ``request`` may be a mapping standing in for the session (useful outside a
    request context); otherwise the active Flask session is consulted.
    """

    def __init__(self, key: str = SESSION_USER_KEY):
        self.key = key

    def authenticate(self, request: Any = None) -> Optional[int]:
        if request is not None and hasattr(request, "get"):
            source = request
        elif has_request_context():
            source = session
        else:
            return None
        raw = source.get(self.key)
        try:
            return int(raw) if raw is not None else None
        except (TypeError, ValueError):
            return None


class StaticAuthProvider:
    """Always authenticate as one fixed user (CLI and tests)."""

    def __init__(self, user_id: Optional[int]):
        self.user_id = user_id

    def authenticate(self, request: Any = None) -> Optional[int]:
        return self.user_id

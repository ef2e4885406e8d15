"""Authentication provider protocol."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from ..errors import AuthenticationRequiredError


class AuthProvider(Protocol):
    """Resolve the caller of a request to a stable user id."""

    def authenticate(self, request: Any = None) -> Optional[int]:
        """Return the authenticated user id, or None when the caller is anonymous."""
        ...


def require_user_id(provider: AuthProvider, request: Any = None) -> int:
    """Return the authenticated user id or raise ``AuthenticationRequiredError``."""

    user_id = provider.authenticate(request)
    if user_id is None:
        raise AuthenticationRequiredError("Not authenticated")
    return user_id

"""User repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.user import User


class UserRepository(Protocol):
    """Repository for managing user accounts."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        ...

    def get_by_email(self, email: str) -> Optional[User]:
        ...

    def get_by_username(self, username: str) -> Optional[User]:
        ...

    def find_by_login(self, identifier: str) -> Optional[User]:
        """Match ``identifier`` against email first, then username."""
        ...

    def create(self, user: User) -> User:
        ...

    def update(self, user: User) -> User:
        ...

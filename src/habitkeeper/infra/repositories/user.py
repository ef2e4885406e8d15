"""SQLModel implementation of the user repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from ...models.user import User
from ..database import SessionFactory


class SQLModelUserRepository:
    """SQLModel-based user repository."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def _first(self, statement) -> Optional[User]:
        with self.session_factory() as session:
            user = session.exec(statement).first()
            if user:
                session.expunge(user)
            return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._first(select(User).where(User.id == user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._first(select(User).where(func.lower(User.email) == email.strip().lower()))

    def get_by_username(self, username: str) -> Optional[User]:
        return self._first(select(User).where(User.username == username.strip()))

    def find_by_login(self, identifier: str) -> Optional[User]:
        """Match ``identifier`` against email first, then username."""
        return self.get_by_email(identifier) or self.get_by_username(identifier)

    def create(self, user: User) -> User:
        try:
            with self.session_factory() as session:
                session.add(user)
                session.commit()
                session.refresh(user)
                session.expunge(user)
                return user
        except IntegrityError as exc:
            raise ValueError("User with this email or username already exists") from exc

    def update(self, user: User) -> User:
        with self.session_factory() as session:
            if user.id is None or session.get(User, user.id) is None:
                raise LookupError(f"User {user.id} does not exist")
            merged = session.merge(user)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

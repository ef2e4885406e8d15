"""Authentication and user management services."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from ..domain.repositories.user import UserRepository
from ..errors import DuplicateUserError, UserNotFoundError
from ..forms import PasswordResetForm, SignInForm, SignUpForm, validate_form
from ..logging_config import get_logger
from ..models.user import User

logger = get_logger(__name__)

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    """Return True when ``password`` matches; malformed hashes never raise."""

    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHash, VerificationError):
        return False


def sign_up(users: UserRepository, *, form: SignUpForm | Mapping[str, Any]) -> User:
    """Create a new user with a hashed password."""

    data = validate_form(SignUpForm, form)
    if users.get_by_email(data.email) or users.get_by_username(data.username):
        raise DuplicateUserError("User with this email or username already exists")

    now = datetime.now()
    try:
        user = users.create(
            User(
                email=data.email,
                username=data.username,
                name=data.name or data.username,
                password_hash=hash_password(data.password),
                created_at=now,
                updated_at=now,
            )
        )
    except ValueError as exc:
        # another sign-up took the email or username after the lookup above
        raise DuplicateUserError("User with this email or username already exists") from exc
    logger.info("User signed up", extra={"user_id": user.id})
    return user


def sign_in(users: UserRepository, *, form: SignInForm | Mapping[str, Any]) -> Optional[User]:
    """Validate credentials and return the user when correct.

    An unknown identifier and a wrong password are indistinguishable to the
    caller; both return None.
    """

    data = validate_form(SignInForm, form)
    user = users.find_by_login(data.identifier)
    if user is None or not verify_password(user.password_hash, data.password):
        logger.info("Sign-in rejected")
        return None

    if _hasher.check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(data.password)
    user.last_login = datetime.now()
    user = users.update(user)
    logger.info("User signed in", extra={"user_id": user.id})
    return user


def get_user(users: UserRepository, user_id: int) -> User:
    user = users.get_by_id(user_id)
    if user is None:
        raise UserNotFoundError("User not found")
    return user


def reset_password(users: UserRepository, *, user_id: int, password: str) -> User:
    """Reset a user's password to the provided value."""

    data = validate_form(PasswordResetForm, {"password": password})
    user = get_user(users, user_id)
    user.password_hash = hash_password(data.password)
    user.updated_at = datetime.now()
    return users.update(user)


__all__ = [
    "get_user",
    "hash_password",
    "reset_password",
    "sign_in",
    "sign_up",
    "verify_password",
]

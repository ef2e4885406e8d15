"""Exception types raised by HabitKeeper services."""

from __future__ import annotations

from typing import Optional


class HabitKeeperError(Exception):
    """Base class for domain errors; ``code`` is a stable machine-readable tag."""

    code = "habitkeeper_error"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class FormValidationError(HabitKeeperError, ValueError):
    """Submitted data failed form validation."""

    code = "invalid_input"

    def __init__(self, errors: dict[str, list[str]], message: str = "Invalid input data"):
        super().__init__(message)
        self.errors = errors


class HabitNotFoundError(HabitKeeperError, LookupError):
    """Habit is missing or belongs to another user."""

    code = "habit_not_found"


class CompletionNotFoundError(HabitKeeperError, LookupError):
    code = "completion_not_found"


class UserNotFoundError(HabitKeeperError, LookupError):
    code = "user_not_found"


class InactiveHabitError(HabitKeeperError, ValueError):
    """Completions cannot be recorded against a soft-deleted habit."""

    code = "habit_inactive"


class AlreadyCompletedError(HabitKeeperError, ValueError):
    """The habit already has a completion for the current local day."""

    code = "already_completed"


class DuplicateUserError(HabitKeeperError, ValueError):
    code = "user_exists"


class AuthenticationRequiredError(HabitKeeperError, PermissionError):
    code = "not_authenticated"


__all__ = [
    "AlreadyCompletedError",
    "AuthenticationRequiredError",
    "CompletionNotFoundError",
    "DuplicateUserError",
    "FormValidationError",
    "HabitKeeperError",
    "HabitNotFoundError",
    "InactiveHabitError",
    "UserNotFoundError",
]

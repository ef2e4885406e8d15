"""Input models for sign-up, sign-in, habits and completions."""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import FormValidationError
from .models.habit import HabitFrequency

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

F = TypeVar("F", bound=BaseModel)


def _structured_errors(exc: ValidationError) -> dict[str, list[str]]:
    structured: dict[str, list[str]] = {}
    for error in exc.errors(include_url=False):
        loc = error.get("loc", ())
        key = str(loc[0]) if loc else "__root__"
        structured.setdefault(key, []).append(error.get("msg", "Invalid value"))
    return structured


def validate_form(form_cls: type[F], payload: Mapping[str, Any] | F) -> F:
    """Validate ``payload`` into ``form_cls`` or raise ``FormValidationError``.

    Already-validated form instances are passed through unchanged.
    """

    if isinstance(payload, form_cls):
        return payload
    try:
        return form_cls.model_validate(dict(payload))
    except ValidationError as exc:
        raise FormValidationError(_structured_errors(exc)) from exc


class _Form(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class SignUpForm(_Form):
    """Registration payload."""

    email: str = Field(max_length=255)
    username: str = Field(min_length=3, max_length=20)
    password: str = Field(min_length=6, max_length=256)
    name: Optional[str] = Field(default=None, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        if not _EMAIL_RE.match(value):
            raise ValueError("Please provide a valid email address.")
        return value.lower()


class SignInForm(_Form):
    """Credentials; ``identifier`` is an email address or a username."""

    identifier: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=256)


class HabitForm(_Form):
    """Form model for creating a habit."""

    title: str = Field(min_length=1, max_length=100, description="Short label for the habit")
    description: str = Field(default="", max_length=500)
    frequency: HabitFrequency = Field(default=HabitFrequency.DAILY)

    @field_validator("frequency", mode="before")
    @classmethod
    def normalize_frequency(cls, value: Any) -> Any:
        """Accept ``daily``/``Daily`` as well as ``DAILY``."""

        if isinstance(value, str):
            return value.strip().upper()
        return value


class HabitUpdateForm(_Form):
    """Partial update; unset fields are left untouched."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    frequency: Optional[HabitFrequency] = None
    is_active: Optional[bool] = None

    @field_validator("frequency", mode="before")
    @classmethod
    def normalize_frequency(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class PasswordResetForm(_Form):
    password: str = Field(min_length=6, max_length=256)


class CompletionForm(_Form):
    notes: str = Field(default="", max_length=500)


__all__ = [
    "CompletionForm",
    "HabitForm",
    "HabitUpdateForm",
    "PasswordResetForm",
    "SignInForm",
    "SignUpForm",
    "validate_form",
]

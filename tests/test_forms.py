"""Tests for input validation models."""

from __future__ import annotations

import pytest

from habitkeeper.errors import FormValidationError
from habitkeeper.forms import (
    CompletionForm,
    HabitForm,
    HabitUpdateForm,
    SignUpForm,
    validate_form,
)
from habitkeeper.models import HabitFrequency


def test_habit_form_normalises_frequency():
    form = validate_form(HabitForm, {"title": "Walk", "frequency": " daily "})

    assert form.frequency is HabitFrequency.DAILY
    assert form.description == ""


def test_habit_form_defaults_to_daily():
    assert validate_form(HabitForm, {"title": "Walk"}).frequency is HabitFrequency.DAILY


def test_habit_form_ignores_unknown_fields():
    form = validate_form(HabitForm, {"title": "Walk", "user_id": 99})

    assert not hasattr(form, "user_id")


def test_habit_form_title_too_long():
    with pytest.raises(FormValidationError) as exc_info:
        validate_form(HabitForm, {"title": "t" * 101})

    assert list(exc_info.value.errors) == ["title"]
    assert exc_info.value.code == "invalid_input"


def test_multiple_errors_reported_per_field():
    with pytest.raises(FormValidationError) as exc_info:
        validate_form(SignUpForm, {"email": "bad", "username": "a", "password": "1"})

    assert set(exc_info.value.errors) == {"email", "username", "password"}


def test_validated_instance_passes_through():
    form = HabitForm(title="Walk")

    assert validate_form(HabitForm, form) is form


def test_update_form_changes_only_include_set_fields():
    form = validate_form(HabitUpdateForm, {"description": "new", "frequency": "weekly", "title": None})

    assert form.changes() == {"description": "new", "frequency": HabitFrequency.WEEKLY}


def test_update_form_rejects_empty_title():
    with pytest.raises(FormValidationError):
        validate_form(HabitUpdateForm, {"title": ""})


def test_completion_notes_limit():
    assert validate_form(CompletionForm, {"notes": " ok "}).notes == "ok"

    with pytest.raises(FormValidationError):
        validate_form(CompletionForm, {"notes": "n" * 501})

"""Service layer: streak engine and use-case functions."""

from . import auth, habits, streaks

__all__ = ["auth", "habits", "streaks"]

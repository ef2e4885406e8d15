"""Streak statistics derived from a habit's completion history.

Every function here is pure: inputs are never mutated, nothing is cached and
the wall clock is read at most once per call. Gaps between completions are
measured between absolute instants; naive datetimes are read as server local
time. Day boundaries use the server's local calendar.
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Iterable, Optional, Sequence, TypeVar

# Largest gap between consecutive completions that still continues a run,
# and the longest time since the last completion for a run to stay active.
STREAK_GAP = timedelta(days=1.5)
ONE_DAY = timedelta(days=1)

HABIT_COLORS = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#96CEB4",
    "#FFEAA7",
    "#DDA0DD",
    "#98D8E8",
    "#F7DC6F",
    "#BB8FCE",
    "#85C1E9",
)

T = TypeVar("T")


@dataclass(frozen=True)
class StreakData:
    """Current run, best run and completion count for one habit."""

    streak: int = 0
    best_streak: int = 0
    total: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"streak": self.streak, "bestStreak": self.best_streak, "total": self.total}


def to_local_naive(value: datetime) -> datetime:
    """Return ``value`` as a naive datetime in server local time."""

    if value.tzinfo is not None and value.utcoffset() is not None:
        return value.astimezone().replace(tzinfo=None)
    return value.replace(tzinfo=None)


def to_instant(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are local time."""

    return value.astimezone(timezone.utc)


def _raw_timestamp(record: Any) -> Optional[datetime]:
    if isinstance(record, Mapping):
        raw = record.get("completed_at", record.get("completedAt"))
    else:
        raw = getattr(record, "completed_at", None)

    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def completed_at(record: Any) -> Optional[datetime]:
    """Extract the completion timestamp of a record as naive local time.

    Records may be model instances exposing ``completed_at`` or mappings keyed
    by ``completed_at``/``completedAt``. Strings are parsed as ISO-8601.
    Returns None when the timestamp is missing or unreadable.
    """

    raw = _raw_timestamp(record)
    return to_local_naive(raw) if raw is not None else None


def _now(now: Optional[datetime]) -> datetime:
    return to_local_naive(now) if now is not None else datetime.now()


def start_of_day(value: date | datetime) -> datetime:
    """Local midnight of the calendar day containing ``value``."""

    if isinstance(value, datetime):
        value = to_local_naive(value).date()
    return datetime.combine(value, time.min)


def calculate_streak_data(
    completions: Sequence[Any], *, now: Optional[datetime] = None
) -> StreakData:
    """Compute the active streak, best streak and total for a completion history.

    Completions are walked in ascending time order. A completion continues the
    run when it lands no more than 1.5 days after the previous one, otherwise
    the run restarts at 1. The active streak is the final run if the latest
    completion is no more than 1.5 days before ``now``, and 0 otherwise.
    Both intervals are elapsed time, so daylight-saving shifts do not count.

    ``total`` counts every supplied record, including duplicates and records
    whose timestamp could not be read (those are left out of the walk).
    """

    total = len(completions)
    if total == 0:
        return StreakData()

    instants = sorted(
        to_instant(ts) for ts in (_raw_timestamp(c) for c in completions) if ts is not None
    )
    if not instants:
        return StreakData(total=total)

    current_run = 0
    best_run = 0
    previous: Optional[datetime] = None
    for instant in instants:
        if previous is not None and instant - previous <= STREAK_GAP:
            current_run += 1
        else:
            current_run = 1
        best_run = max(best_run, current_run)
        previous = instant

    reference = to_instant(now if now is not None else datetime.now())
    active = current_run if reference - instants[-1] <= STREAK_GAP else 0

    return StreakData(streak=active, best_streak=best_run, total=total)


def get_completions_for_date(completions: Iterable[T], day: date | datetime) -> list[T]:
    """Return completions falling on the local calendar day of ``day``, in input order."""

    start = start_of_day(day)
    end = start + ONE_DAY
    matched: list[T] = []
    for completion in completions:
        timestamp = completed_at(completion)
        if timestamp is not None and start <= timestamp < end:
            matched.append(completion)
    return matched


def is_completed_today(completions: Iterable[Any], *, now: Optional[datetime] = None) -> bool:
    """True when at least one completion falls on today's local date."""

    return bool(get_completions_for_date(completions, _now(now)))


def rank_by_best_streak(items: Iterable[tuple[T, StreakData]]) -> list[tuple[T, StreakData]]:
    """Order ``(habit, streak_data)`` pairs by best streak, highest first."""

    return sorted(items, key=lambda item: item[1].best_streak, reverse=True)


def format_frequency(frequency: str) -> str:
    """``"DAILY"`` -> ``"Daily"``."""

    return frequency[:1].upper() + frequency[1:].lower()


def random_color(rng: Optional[random.Random] = None) -> str:
    """Pick a display colour for a new habit."""

    return (rng or random).choice(HABIT_COLORS)


__all__ = [
    "HABIT_COLORS",
    "ONE_DAY",
    "STREAK_GAP",
    "StreakData",
    "calculate_streak_data",
    "completed_at",
    "format_frequency",
    "get_completions_for_date",
    "is_completed_today",
    "random_color",
    "rank_by_best_streak",
    "start_of_day",
    "to_instant",
    "to_local_naive",
]

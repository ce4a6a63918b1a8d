"""
Shared pytest fixtures.

All tests pin the clock to the week of Monday 2024-12-09 through
Sunday 2024-12-15. NOW is Wednesday 2024-12-11 at noon (day 3 of the week).
"""

from datetime import date, datetime, timedelta

import pytest

from habit_diary.engine.dates import format_date
from habit_diary.engine.models import DailyEntry, Habit

MONDAY = date(2024, 12, 9)
NOW = datetime(2024, 12, 11, 12, 0)


def day(offset: int) -> str:
    """Date string ``offset`` days after MONDAY (negative for earlier weeks)."""
    return format_date(MONDAY + timedelta(days=offset))


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_habit():
    """Factory for habits; defaults to a binary 7-per-week habit created long ago."""

    def _make(
        habit_id="h1",
        type="binary",
        weekly_goal=7,
        created_at="2024-01-01T08:00:00.000Z",
        **kwargs,
    ) -> Habit:
        kwargs.setdefault("name", habit_id.upper())
        return Habit(
            id=habit_id,
            type=type,
            weekly_goal=weekly_goal,
            created_at=created_at,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_entry():
    """Factory for entries."""

    def _make(habit_id, entry_date, value=1, target_at_entry=None) -> DailyEntry:
        return DailyEntry(
            habit_id=habit_id,
            date=entry_date,
            value=value,
            target_at_entry=target_at_entry,
            created_at="2024-12-01T00:00:00",
            updated_at="2024-12-01T00:00:00",
        )

    return _make

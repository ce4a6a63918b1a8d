"""Goal resolution: which daily target applies to an entry and whether it was met."""

import math
from datetime import date
from typing import Optional

from .dates import DateLike, week_dates
from .models import DailyEntry, Habit

# An entry at 80% of its daily goal counts as a win for streaks and perfect days
COMPLETION_THRESHOLD = 0.8

# A week counts toward the overall streak once every habit reaches 80% of its goal
WEEKLY_STREAK_THRESHOLD = 0.8


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round halves away from zero for positive values.

    Python's round() rounds halves to even, which would report 2.5 as 2.

    Example:
        round_half_up(12.5) = 13.0
        round_half_up(1.005, 2) = 1.01
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5 + 1e-9) / factor


def _at_least(value: float, target: float) -> bool:
    return value >= target or math.isclose(value, target, rel_tol=1e-9, abs_tol=1e-12)


def daily_goal(habit: Habit) -> float:
    """Current daily goal of a habit: 1 day for binary, weekly_goal / 7 for numeric."""
    if habit.is_binary:
        return 1.0
    return habit.weekly_goal / 7


def effective_daily_goal(entry: Optional[DailyEntry], habit: Habit) -> float:
    """
    Daily goal that applies to an entry.

    The snapshot taken when the entry was written wins over the habit's
    current goal, so later goal edits do not rewrite history.
    """
    if entry is not None and entry.target_at_entry is not None:
        return entry.target_at_entry
    return daily_goal(habit)


def is_complete(entry: Optional[DailyEntry], habit: Habit) -> bool:
    """
    Whether an entry counts as a win for streak and perfect-day purposes.

    Binary habits need a value of at least 1. Numeric habits need at least
    80% of the effective daily goal. A missing entry is never complete.
    """
    if entry is None:
        return False
    if habit.is_binary:
        return entry.value >= 1
    return _at_least(entry.value, effective_daily_goal(entry, habit) * COMPLETION_THRESHOLD)


def meets_daily_target(entry: Optional[DailyEntry], habit: Habit) -> bool:
    """Whether an entry reached 100% of its effective daily goal."""
    if entry is None:
        return False
    return _at_least(entry.value, effective_daily_goal(entry, habit))


def active_days(habit: Habit, week: DateLike) -> list[date]:
    """Days of the week containing ``week`` on or after the habit's creation day."""
    created = habit.created_date
    return [d for d in week_dates(week) if d >= created]


def prorated_goal(habit: Habit, week: DateLike) -> float:
    """
    Weekly goal owed for the week containing ``week``.

    A habit created mid-week owes (weekly_goal / 7) per active day. When no
    day of the week is active the full weekly goal is returned; callers that
    need to know whether the habit existed use active_days(). A non-positive
    weekly goal always yields 0.
    """
    if habit.weekly_goal <= 0:
        return 0.0
    count = len(active_days(habit, week))
    if count > 0:
        return (habit.weekly_goal / 7) * count
    return habit.weekly_goal


def existed_during_week(habit: Habit, week: DateLike) -> bool:
    return habit.created_date <= week_dates(week)[-1]


def existed_on(habit: Habit, day: date) -> bool:
    return habit.created_date <= day


def reached(total: float, target: float, fraction: float = 1.0) -> bool:
    """Whether ``total`` reaches ``fraction`` of ``target``."""
    return _at_least(total, target * fraction)

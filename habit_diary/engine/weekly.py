"""Weekly progress calculation for a single habit."""

import logging
import math
from datetime import datetime
from typing import Iterable

from .dates import DateLike, format_date, week_end, week_start
from .goals import active_days, prorated_goal, reached, round_half_up
from .models import DailyEntry, Habit, WeeklyStats
from .streaks import current_weekly_streak

logger = logging.getLogger(__name__)


def week_total(habit_id: str, entries: Iterable[DailyEntry], week: DateLike) -> float:
    """Sum of a habit's entry values within the week containing ``week``."""
    start = format_date(week_start(week))
    end = format_date(week_end(week))
    return math.fsum(
        e.value for e in entries if e.habit_id == habit_id and start <= e.date <= end
    )


def completion_percentage(total: float, goal: float) -> int:
    """round(total / goal * 100) capped at 100, or 0 when there is no goal."""
    if goal <= 0:
        return 0
    return int(min(100, round_half_up(total / goal * 100)))


def calculate_weekly_stats(
    habit: Habit,
    entries: Iterable[DailyEntry],
    week: DateLike,
    now: datetime,
) -> WeeklyStats:
    """
    Calculate one habit's progress for one week.

    Steps:
    - active days: days of the week on/after the habit's creation day
    - goal: weekly goal pro-rated over the active days
    - total/remaining: sum of logged values, and what is left of the goal
    - avg_needed_per_day: remaining spread over active days from today on
    - is_on_track: total at or above linear expected pace, or goal reached
    - completion_percentage: total/goal, capped at 100

    Args:
        habit: Habit to evaluate
        entries: Entries; those of other habits or weeks are ignored, and
            earlier weeks feed the weekly streak
        week: Any date in the week
        now: Reference instant

    Returns:
        WeeklyStats for the habit and week
    """
    entries = list(entries)
    start = week_start(week)
    today = now.date()

    days = active_days(habit, start)
    active_count = len(days)
    remaining_days = len([d for d in days if d >= today])
    passed_days = len([d for d in days if d <= today])

    goal = prorated_goal(habit, start)
    total = week_total(habit.id, entries, start)
    remaining = max(0.0, goal - total)

    avg_needed = remaining / remaining_days if remaining_days > 0 else 0.0

    expected = (goal / active_count) * passed_days if active_count > 0 else 0.0
    is_on_track = reached(total, expected) or reached(total, goal)

    logger.debug(
        f"{habit.name}: {total}/{goal:.2f} for week of {format_date(start)} "
        f"(expected by now: {expected:.2f}, on track: {is_on_track})"
    )

    return WeeklyStats(
        week_start=format_date(start),
        habit_id=habit.id,
        total=total,
        goal=round_half_up(goal, 2),
        remaining=round_half_up(remaining, 2),
        avg_needed_per_day=round_half_up(avg_needed, 2),
        is_on_track=is_on_track,
        completion_percentage=completion_percentage(total, goal),
        streak=current_weekly_streak(habit, entries, now),
        active_days=active_count,
    )

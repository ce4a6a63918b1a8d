"""Cross-habit weekly summary."""

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from .dates import DateLike, format_date, week_dates, week_start
from .goals import existed_on, is_complete, round_half_up
from .models import DailyEntry, Habit, OverallStats, WeeklyStats, index_entries
from .streaks import consecutive_complete_weeks
from .weekly import calculate_weekly_stats

logger = logging.getLogger(__name__)


def is_perfect_day(
    habits: list[Habit], index: dict[tuple[str, str], DailyEntry], day: date
) -> bool:
    """
    Whether every habit that existed on ``day`` has a complete entry for it.

    A day on which no habit existed yet is never perfect.
    """
    existing = [h for h in habits if existed_on(h, day)]
    if not existing:
        return False
    key = format_date(day)
    return all(is_complete(index.get((h.id, key)), h) for h in existing)


def _best_habit(stats: list[WeeklyStats]) -> Optional[str]:
    if not stats:
        return None
    # max() keeps the first of equal percentages, so ties go to input order
    return max(stats, key=lambda s: s.completion_percentage).habit_id


def _needs_attention_habit(stats: list[WeeklyStats]) -> Optional[str]:
    behind = [s for s in stats if not s.is_on_track]
    if not behind:
        return None
    return max(behind, key=lambda s: s.completion_percentage).habit_id


def calculate_overall_stats(
    habits: list[Habit],
    entries: Iterable[DailyEntry],
    week: DateLike,
    now: datetime,
) -> OverallStats:
    """
    Summarize all non-archived habits for one week.

    Habits that did not exist during the week, or whose goal is 0, are left
    out of every aggregate ratio.

    Args:
        habits: All habits, in display order
        entries: Entries (any order)
        week: Any date in the week
        now: Reference instant

    Returns:
        OverallStats for the week
    """
    entries = list(entries)
    start = week_start(week)
    today = now.date()
    active = [h for h in habits if not h.archived]

    stats = []
    for habit in active:
        habit_stats = calculate_weekly_stats(habit, entries, start, now)
        if habit_stats.active_days > 0 and habit_stats.goal > 0:
            stats.append(habit_stats)

    habits_on_track = len([s for s in stats if s.is_on_track])
    overall_percentage = 0
    if stats:
        mean = sum(s.completion_percentage for s in stats) / len(stats)
        overall_percentage = int(round_half_up(mean))

    index = index_entries(entries)
    perfect_days = len(
        [d for d in week_dates(start) if d <= today and is_perfect_day(active, index, d)]
    )

    logger.debug(
        f"Week of {format_date(start)}: {habits_on_track}/{len(stats)} habits on track, "
        f"{perfect_days} perfect days"
    )

    return OverallStats(
        week_start=format_date(start),
        total_habits=len(stats),
        habits_on_track=habits_on_track,
        overall_completion_percentage=overall_percentage,
        best_performing_habit=_best_habit(stats),
        needs_attention_habit=_needs_attention_habit(stats),
        weekly_perfect_days=perfect_days,
        all_habits_weekly_streak=consecutive_complete_weeks(active, entries, now),
    )

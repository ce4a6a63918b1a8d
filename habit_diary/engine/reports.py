"""Date-range reports and their shareable text form."""

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Iterable

from ..errors import InvalidDateRangeError
from .dates import DateLike, date_range, format_date, to_date, week_start
from .goals import is_complete
from .models import DailyEntry, Habit, HabitReport, PeriodReport, index_entries
from .overall import is_perfect_day
from .streaks import calculate_habit_streak, calculate_overall_streak, streak_emoji

logger = logging.getLogger(__name__)

PRESET_RANGES = (
    "last-7-days",
    "this-week",
    "last-week",
    "last-30-days",
    "this-month",
    "last-month",
    "last-3-months",
    "last-6-months",
)


def preset_range(name: str, now: datetime) -> tuple[date, date]:
    """
    Resolve a named range relative to ``now``.

    Args:
        name: One of PRESET_RANGES
        now: Reference instant

    Returns:
        Tuple of (start, end) dates, inclusive
    """
    today = now.date()
    if name == "last-7-days":
        return today - timedelta(days=6), today
    if name == "this-week":
        start = week_start(today)
        return start, start + timedelta(days=6)
    if name == "last-week":
        start = week_start(today) - timedelta(days=7)
        return start, start + timedelta(days=6)
    if name == "last-30-days":
        return today - timedelta(days=29), today
    if name == "this-month":
        start = today.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return start, next_month - timedelta(days=1)
    if name == "last-month":
        end = today.replace(day=1) - timedelta(days=1)
        return end.replace(day=1), end
    if name == "last-3-months":
        return months_before(today, 3), today
    if name == "last-6-months":
        return months_before(today, 6), today
    raise ValueError(f"Unknown preset range: {name}")


def months_before(value: date, months: int) -> date:
    """
    Same calendar day ``months`` months earlier, clamped to the month's end.

    Example:
        months_before(date(2024, 5, 31), 3) = date(2024, 2, 29)
    """
    index = value.year * 12 + value.month - 1 - months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def _format_period(start: date, end: date) -> str:
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}, {end.year}"


def calculate_period_report(
    habits: list[Habit],
    entries: Iterable[DailyEntry],
    start: DateLike,
    end: DateLike,
    now: datetime,
) -> PeriodReport:
    """
    Build a report over an inclusive date range.

    Completion rates count days whose entry is complete against the days
    each habit existed in the range. Streaks use the full entry history.

    Args:
        habits: All habits (archived ones are ignored)
        entries: Full entry history
        start: First day of the range
        end: Last day of the range
        now: Reference instant

    Returns:
        PeriodReport

    Raises:
        InvalidDateRangeError: If end is before start
    """
    first = to_date(start)
    last = to_date(end)
    if last < first:
        raise InvalidDateRangeError(
            f"Report range ends ({format_date(last)}) before it starts ({format_date(first)})"
        )

    entries = list(entries)
    active = [h for h in habits if not h.archived]
    days = date_range(first, last)
    index = index_entries(entries)

    habit_stats = []
    for habit in active:
        existing_days = [d for d in days if d >= habit.created_date]
        completions = len(
            [d for d in existing_days if is_complete(index.get((habit.id, format_date(d))), habit)]
        )
        expected = len(existing_days)
        streak = calculate_habit_streak(habit, entries, now)
        habit_stats.append(
            HabitReport(
                habit_id=habit.id,
                habit_name=habit.name,
                habit_icon=habit.icon,
                completions=completions,
                expected=expected,
                completion_rate=completions / expected * 100 if expected > 0 else 0.0,
                current_streak=streak.current_streak,
                max_streak=streak.max_streak,
            )
        )

    perfect_days = len([d for d in days if is_perfect_day(active, index, d)])
    total_completions = sum(h.completions for h in habit_stats)
    expected_completions = sum(h.expected for h in habit_stats)
    overall_rate = (
        total_completions / expected_completions * 100 if expected_completions > 0 else 0.0
    )

    best_habit = None
    worst_habit = None
    if habit_stats:
        best_habit = max(habit_stats, key=lambda h: h.completion_rate).habit_name
        # A tie for worst goes to the last habit
        worst_habit = min(reversed(habit_stats), key=lambda h: h.completion_rate).habit_name

    overall = calculate_overall_streak(habits, entries, now)

    logger.debug(
        f"Report {format_date(first)}..{format_date(last)}: "
        f"{total_completions}/{expected_completions} completions, {perfect_days} perfect days"
    )

    return PeriodReport(
        start_date=format_date(first),
        end_date=format_date(last),
        period=_format_period(first, last),
        total_days=len(days),
        perfect_days=perfect_days,
        total_completions=total_completions,
        expected_completions=expected_completions,
        overall_completion_rate=overall_rate,
        habit_stats=habit_stats,
        best_habit=best_habit,
        worst_habit=worst_habit,
        overall_streak=overall.current_streak,
        max_streak=overall.max_streak,
    )


def render_report_text(report: PeriodReport) -> str:
    """Plain-text summary suitable for sharing."""
    lines = [
        "🎯 Habit Diary Report",
        f"🌱 {report.period}",
        "",
        "📊 Overview",
        f"• Completion Rate: {report.overall_completion_rate:.1f}%",
        f"• Perfect Days: {report.perfect_days}/{report.total_days}",
        f"• Current Streak: {streak_emoji(report.overall_streak)} {report.overall_streak} days",
        f"• Best Streak: 🏆 {report.max_streak} days",
        "",
        "📈 Habit Breakdown",
    ]
    for habit in report.habit_stats:
        icon = habit.habit_icon or "•"
        lines.append(f"{icon} {habit.habit_name}: {habit.completion_rate:.0f}%")

    if report.best_habit:
        lines.extend(["", f"⭐ Best: {report.best_habit}"])
    if report.worst_habit and report.worst_habit != report.best_habit:
        lines.append(f"💪 Needs work: {report.worst_habit}")

    lines.extend(["", "---", "Tracked with Habit Diary 🎯"])
    return "\n".join(lines)

"""
Streak calculation.

Two independent models live here:

- the per-habit daily chain (calculate_habit_streak), where a single missed
  or incomplete day resets the run, plus its weekly counterpart
  (calculate_streak_data);
- the overall weekly-goal streak (calculate_overall_streak), where each week
  in which every habit reached 80% of its goal contributes 7 days, and the
  week in progress adds its elapsed days while it is on track.
"""

import logging
import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from .dates import day_of_week, format_date, parse_date, week_start
from .goals import (
    WEEKLY_STREAK_THRESHOLD,
    active_days,
    existed_during_week,
    is_complete,
    prorated_goal,
    reached,
    round_half_up,
)
from .models import (
    BEHIND,
    ON_TRACK,
    WARNING,
    DailyEntry,
    Habit,
    HabitPacing,
    HabitStreak,
    OverallStreak,
    StreakData,
    entries_for_habit,
)

logger = logging.getLogger(__name__)

_STATUS_RANK = {ON_TRACK: 0, WARNING: 1, BEHIND: 2}

STREAK_LEVELS = [
    (365, "immortal", "🌟"),
    (100, "mythic", "💎"),
    (60, "legendary", "👑"),
    (30, "fire", "🔥"),
    (14, "gold", "⭐"),
    (7, "silver", "💫"),
    (3, "bronze", "✨"),
]


# ============ PER-HABIT STREAKS ============


def success_dates(habit: Habit, entries: Iterable[DailyEntry]) -> set[str]:
    """Dates on which the habit's entry counts as complete."""
    return {
        e.date for e in entries_for_habit(entries, habit.id) if is_complete(e, habit)
    }


def _count_back(successes: set[str], start: date, step: timedelta) -> int:
    count = 0
    check = start
    while format_date(check) in successes:
        count += 1
        check -= step
    return count


def _longest_run(keys: Iterable[str], step_days: int) -> int:
    """Longest run of sorted date keys spaced exactly ``step_days`` apart."""
    ordered = sorted(parse_date(k) for k in keys)
    if not ordered:
        return 0

    longest = 1
    run = 1
    for prev, curr in zip(ordered, ordered[1:]):
        if (curr - prev).days == step_days:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    return max(longest, run)


def calculate_habit_streak(
    habit: Habit, entries: Iterable[DailyEntry], now: datetime
) -> HabitStreak:
    """
    Daily-chain streak of a single habit.

    The current streak ends today, or yesterday when today has not been
    logged yet. Any day without a complete entry breaks the chain; there is
    no forgiveness window.

    Args:
        habit: Habit to evaluate
        entries: Entries (any habits, any order)
        now: Reference instant

    Returns:
        HabitStreak with current and max streak in days
    """
    successes = success_dates(habit, entries)
    if not successes:
        return HabitStreak(current_streak=0, max_streak=0)

    today = now.date()
    yesterday = today - timedelta(days=1)
    one_day = timedelta(days=1)

    if format_date(today) in successes:
        current = _count_back(successes, today, one_day)
    elif format_date(yesterday) in successes:
        current = _count_back(successes, yesterday, one_day)
    else:
        current = 0

    return HabitStreak(current_streak=current, max_streak=_longest_run(successes, 1))


def _habit_week_totals(habit: Habit, entries: Iterable[DailyEntry]) -> dict[str, float]:
    values = defaultdict(list)
    for e in entries_for_habit(entries, habit.id):
        values[format_date(week_start(e.date))].append(e.value)
    return {week: math.fsum(v) for week, v in values.items()}


def qualifying_weeks(habit: Habit, entries: Iterable[DailyEntry]) -> set[str]:
    """Week starts in which the habit reached its full (pro-rated) weekly goal."""
    weeks = set()
    for week, total in _habit_week_totals(habit, entries).items():
        goal = prorated_goal(habit, week)
        if goal > 0 and reached(total, goal):
            weeks.add(week)
    return weeks


def current_weekly_streak(
    habit: Habit, entries: Iterable[DailyEntry], now: datetime
) -> int:
    """Consecutive qualifying weeks ending this week, or last week if this one is not yet met."""
    weeks = qualifying_weeks(habit, entries)
    this_week = week_start(now)
    one_week = timedelta(days=7)

    if format_date(this_week) in weeks:
        return _count_back(weeks, this_week, one_week)
    return _count_back(weeks, this_week - one_week, one_week)


def calculate_streak_data(
    habit: Habit, entries: Iterable[DailyEntry], now: datetime
) -> StreakData:
    """Daily and weekly streak counters for one habit."""
    entries = list(entries)
    daily = calculate_habit_streak(habit, entries, now)
    weeks = qualifying_weeks(habit, entries)
    active = [e.date for e in entries_for_habit(entries, habit.id) if e.value > 0]

    return StreakData(
        habit_id=habit.id,
        current_daily_streak=daily.current_streak,
        longest_daily_streak=daily.max_streak,
        current_weekly_streak=current_weekly_streak(habit, entries, now),
        longest_weekly_streak=_longest_run(weeks, 7),
        last_active_date=max(active) if active else None,
    )


# ============ PACING ============


def pacing_status(
    habit: Habit, total: float, elapsed_days: int, week_goal: float
) -> tuple[float, float, str, bool]:
    """
    Classify a habit's progress against linear pace.

    Args:
        habit: Habit being classified
        total: Value logged so far this week
        elapsed_days: Active days of the week up to and including today
        week_goal: Goal owed this week (pro-rated for new habits)

    Returns:
        Tuple of (expected_by_today, difference, status, complete)

    Example:
        binary, weekly_goal = 7, elapsed_days = 3, total = 2
        expected = 3, difference = -1 -> "warning"
    """
    if week_goal <= 0 or reached(total, week_goal):
        return 0.0, 0.0, ON_TRACK, True

    daily = habit.weekly_goal / 7
    expected = daily * elapsed_days
    difference = total - expected
    # One day's worth of slack before a habit counts as behind
    tolerance = 1.0 if habit.is_binary else daily

    if difference >= 0 or math.isclose(difference, 0, abs_tol=1e-9):
        status = ON_TRACK
    elif difference >= -tolerance - 1e-9:
        status = WARNING
    else:
        status = BEHIND
    return expected, difference, status, False


def habit_pacing(habit: Habit, total: float, now: datetime) -> HabitPacing:
    """Pacing of one habit for the week containing ``now``."""
    today = now.date()
    week = week_start(today)
    elapsed = len([d for d in active_days(habit, week) if d <= today])
    expected, difference, status, complete = pacing_status(
        habit, total, elapsed, prorated_goal(habit, week)
    )
    return HabitPacing(
        habit_id=habit.id,
        total=total,
        expected_by_today=round_half_up(expected, 2),
        difference=round_half_up(difference, 2),
        status=status,
        complete=complete,
    )


def worst_status(statuses: Iterable[str]) -> str:
    """Any behind habit makes the week behind, else any warning makes it warning."""
    return max(statuses, key=_STATUS_RANK.__getitem__, default=ON_TRACK)


# ============ OVERALL STREAK ============


def _totals_by_week(
    habits: list[Habit], entries: Iterable[DailyEntry]
) -> dict[str, dict[str, float]]:
    """week start -> habit id -> total, for the given habits only."""
    habit_ids = {h.id for h in habits}
    values = defaultdict(lambda: defaultdict(list))
    for e in entries:
        if e.habit_id in habit_ids:
            values[format_date(week_start(e.date))][e.habit_id].append(e.value)
    return {
        week: {hid: math.fsum(v) for hid, v in per_habit.items()}
        for week, per_habit in values.items()
    }


def _is_week_complete(
    habits: list[Habit], totals: dict[str, float], week: date
) -> bool:
    applicable = [
        h for h in habits if existed_during_week(h, week) and h.weekly_goal > 0
    ]
    if not applicable:
        return False
    return all(
        reached(totals.get(h.id, 0.0), prorated_goal(h, week), WEEKLY_STREAK_THRESHOLD)
        for h in applicable
    )


def complete_weeks(
    habits: list[Habit], entries: Iterable[DailyEntry], before: date
) -> set[str]:
    """
    Fully elapsed weeks in which every existing habit reached 80% of its goal.

    Args:
        habits: Non-archived habits
        entries: Entries (any order)
        before: Only weeks starting before this date are considered

    Returns:
        Set of week start strings
    """
    entries = list(entries)
    if not habits:
        return set()

    totals = _totals_by_week(habits, entries)
    starts = [h.created_date for h in habits]
    starts.extend(parse_date(w) for w in totals)
    week = week_start(min(starts))
    limit = week_start(before)

    weeks = set()
    while week < limit:
        key = format_date(week)
        if _is_week_complete(habits, totals.get(key, {}), week):
            weeks.add(key)
        week += timedelta(days=7)
    return weeks


def consecutive_complete_weeks(
    habits: list[Habit], entries: Iterable[DailyEntry], now: datetime
) -> int:
    """Run of complete weeks ending with the most recent fully elapsed week."""
    active = [h for h in habits if not h.archived]
    this_week = week_start(now)
    weeks = complete_weeks(active, entries, this_week)
    one_week = timedelta(days=7)
    return _count_back(weeks, this_week - one_week, one_week)


def calculate_overall_streak(
    habits: list[Habit], entries: Iterable[DailyEntry], now: datetime
) -> OverallStreak:
    """
    Overall streak driven by weekly-goal completion, with live pacing.

    Each complete week adds 7 days. The week in progress never breaks the
    streak: it adds its elapsed day count (Monday=1) only while every habit
    is on track, and otherwise adds nothing. A week with no habit that
    exists yet and has a positive goal adds nothing either.

    Args:
        habits: All habits (archived ones are ignored)
        entries: Entries (any order)
        now: Reference instant

    Returns:
        OverallStreak with current/max streak in days and weekly status
    """
    active = [h for h in habits if not h.archived]
    if not active:
        return OverallStreak(
            current_streak=0,
            max_streak=0,
            is_current_week_on_track=True,
            weekly_status=ON_TRACK,
        )

    entries = list(entries)
    today = now.date()
    this_week = week_start(today)
    dow = day_of_week(today)

    current_totals = _totals_by_week(active, entries).get(format_date(this_week), {})
    pacing = [
        habit_pacing(h, current_totals.get(h.id, 0.0), now)
        for h in active
        if h.created_date <= today
    ]
    weekly_status = worst_status(p.status for p in pacing)

    # The week in progress earns days only if some habit has a target to pace against
    applicable = [h for h in active if h.created_date <= today and h.weekly_goal > 0]
    on_track = bool(applicable) and weekly_status == ON_TRACK

    weeks = complete_weeks(active, entries, this_week)
    one_week = timedelta(days=7)
    current = 7 * _count_back(weeks, this_week - one_week, one_week)
    if on_track:
        current += dow

    longest = 7 * _longest_run(weeks, 7)

    logger.debug(
        f"Overall streak: {len(weeks)} complete weeks, current={current}, "
        f"status={weekly_status}"
    )

    return OverallStreak(
        current_streak=current,
        max_streak=max(longest, current),
        is_current_week_on_track=on_track,
        weekly_status=weekly_status,
        pacing=pacing,
    )


# ============ STREAK BADGES ============


def _streak_tier(streak: int) -> Optional[tuple[int, str, str]]:
    for tier in STREAK_LEVELS:
        if streak >= tier[0]:
            return tier
    return None


def streak_level(streak: int) -> str:
    """Badge level for a streak length, "none" below 3 days."""
    tier = _streak_tier(streak)
    return tier[1] if tier else "none"


def streak_emoji(streak: int) -> str:
    tier = _streak_tier(streak)
    if tier:
        return tier[2]
    return "📅" if streak > 0 else "💤"

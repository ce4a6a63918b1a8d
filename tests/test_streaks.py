"""Tests for daily and weekly streaks, pacing and streak badges."""

import random

import pytest

from habit_diary.engine.models import BEHIND, ON_TRACK, WARNING
from habit_diary.engine.streaks import (
    calculate_habit_streak,
    calculate_overall_streak,
    calculate_streak_data,
    consecutive_complete_weeks,
    pacing_status,
    streak_emoji,
    streak_level,
)

from conftest import day

# NOW is Wednesday day(2); yesterday is day(1)
TODAY = 2


# ============ DAILY CHAIN ============


def test_daily_streak_resets_on_missing_day(make_habit, make_entry, now):
    habit = make_habit()
    entries = [make_entry("h1", day(TODAY - k)) for k in (0, 1, 2, 4)]

    streak = calculate_habit_streak(habit, entries, now)

    assert streak.current_streak == 3
    assert streak.max_streak == 3


def test_daily_streak_can_end_yesterday(make_habit, make_entry, now):
    habit = make_habit()
    entries = [make_entry("h1", day(TODAY - k)) for k in (1, 2)]

    assert calculate_habit_streak(habit, entries, now).current_streak == 2


def test_daily_streak_gone_after_two_idle_days(make_habit, make_entry, now):
    habit = make_habit()
    entries = [make_entry("h1", day(TODAY - k)) for k in (2, 3, 4, 5)]

    streak = calculate_habit_streak(habit, entries, now)

    assert streak.current_streak == 0
    assert streak.max_streak == 4


def test_incomplete_entry_breaks_the_chain(make_habit, make_entry, now):
    habit = make_habit(type="numeric", weekly_goal=70)
    entries = [
        make_entry("h1", day(TODAY), 10),
        make_entry("h1", day(TODAY - 1), 5),
        make_entry("h1", day(TODAY - 2), 10),
    ]

    streak = calculate_habit_streak(habit, entries, now)

    assert streak.current_streak == 1
    assert streak.max_streak == 1


def test_no_entries_means_no_streak(make_habit, now):
    streak = calculate_habit_streak(make_habit(), [], now)
    assert (streak.current_streak, streak.max_streak) == (0, 0)


def test_daily_streak_ignores_entry_order(make_habit, make_entry, now):
    habit = make_habit()
    entries = [make_entry("h1", day(TODAY - k)) for k in range(10) if k != 6]
    shuffled = list(entries)
    random.Random(3).shuffle(shuffled)

    assert calculate_habit_streak(habit, entries, now) == calculate_habit_streak(
        habit, shuffled, now
    )


def test_streak_data(make_habit, make_entry, now):
    habit = make_habit(weekly_goal=3, created_at="2024-11-18T08:00:00")
    entries = [make_entry("h1", day(offset)) for offset in (-14, -13, -12, -7, -5, -3, 0, 1)]
    entries.append(make_entry("h1", day(2), 0))

    data = calculate_streak_data(habit, entries, now)

    assert data.current_daily_streak == 2
    assert data.longest_daily_streak == 3
    assert data.current_weekly_streak == 2
    assert data.longest_weekly_streak == 2
    assert data.last_active_date == "2024-12-10"


def test_streak_data_without_activity(make_habit, make_entry, now):
    data = calculate_streak_data(make_habit(), [make_entry("h1", day(0), 0)], now)
    assert data.last_active_date is None
    assert data.current_weekly_streak == 0


# ============ OVERALL WEEKLY-GOAL STREAK ============


def _log_week(make_entry, week_offset, a_days, b_per_day, b_days=7):
    """Entries for habits a (binary) and b (numeric) in the week ``week_offset`` weeks from now."""
    base = week_offset * 7
    entries = [make_entry("a", day(base + i)) for i in range(a_days)]
    entries += [make_entry("b", day(base + i), b_per_day) for i in range(b_days)]
    return entries


@pytest.fixture
def pair(make_habit):
    def _pair(created_at="2024-11-25T09:00:00"):
        return [
            make_habit("a", created_at=created_at),
            make_habit("b", type="numeric", weekly_goal=70, created_at=created_at),
        ]

    return _pair


def test_overall_streak_adds_days_of_on_track_week(pair, make_entry, now):
    entries = _log_week(make_entry, -2, 6, 8) + _log_week(make_entry, -1, 6, 8)
    entries += _log_week(make_entry, 0, 3, 10, b_days=3)

    streak = calculate_overall_streak(pair(), entries, now)

    assert streak.current_streak == 17
    assert streak.max_streak == 17
    assert streak.is_current_week_on_track
    assert streak.weekly_status == ON_TRACK
    assert [p.habit_id for p in streak.pacing] == ["a", "b"]


def test_behind_current_week_does_not_break_streak(pair, make_entry, now):
    entries = _log_week(make_entry, -2, 6, 8) + _log_week(make_entry, -1, 6, 8)
    entries += _log_week(make_entry, 0, 1, 10, b_days=3)

    streak = calculate_overall_streak(pair(), entries, now)

    assert streak.current_streak == 14
    assert streak.weekly_status == BEHIND
    assert not streak.is_current_week_on_track


def test_warning_current_week_adds_nothing(pair, make_entry, now):
    entries = _log_week(make_entry, -2, 6, 8) + _log_week(make_entry, -1, 6, 8)
    entries += _log_week(make_entry, 0, 2, 10, b_days=3)

    streak = calculate_overall_streak(pair(), entries, now)

    assert streak.current_streak == 14
    assert streak.weekly_status == WARNING


@pytest.mark.parametrize("b_total, status", [(20, WARNING), (19, BEHIND)])
def test_numeric_warning_tolerance_is_one_day(pair, make_entry, now, b_total, status):
    entries = _log_week(make_entry, 0, 3, 0, b_days=0)
    entries.append(make_entry("b", day(0), b_total))

    streak = calculate_overall_streak(pair(), entries, now)

    assert streak.weekly_status == status


def test_incomplete_week_breaks_history(pair, make_entry, now):
    habits = pair(created_at="2024-11-11T09:00:00")
    entries = _log_week(make_entry, -4, 6, 8) + _log_week(make_entry, -3, 6, 8)
    entries += _log_week(make_entry, -2, 5, 8)
    entries += _log_week(make_entry, -1, 7, 10)
    entries += _log_week(make_entry, 0, 3, 10, b_days=3)

    streak = calculate_overall_streak(habits, entries, now)

    assert streak.current_streak == 10
    assert streak.max_streak == 14
    assert consecutive_complete_weeks(habits, entries, now) == 1


def test_max_streak_from_history(pair, make_entry, now):
    habits = pair(created_at="2024-11-04T09:00:00")
    entries = []
    for week in (-5, -4, -3, -1):
        entries += _log_week(make_entry, week, 7, 10)

    streak = calculate_overall_streak(habits, entries, now)

    assert streak.current_streak == 7
    assert streak.max_streak == 21
    assert streak.weekly_status == BEHIND


def test_no_habits(now):
    streak = calculate_overall_streak([], [], now)

    assert streak.current_streak == 0
    assert streak.max_streak == 0
    assert streak.is_current_week_on_track
    assert streak.weekly_status == ON_TRACK


def test_habits_created_after_today_earn_nothing(make_habit, now):
    habits = [make_habit(created_at="2024-12-12T08:00:00")]

    streak = calculate_overall_streak(habits, [], now)

    assert streak.current_streak == 0
    assert streak.max_streak == 0
    assert not streak.is_current_week_on_track
    assert streak.pacing == []


def test_zero_goal_habits_earn_nothing(make_habit, make_entry, now):
    habits = [make_habit(weekly_goal=0)]
    entries = [make_entry("h1", day(i)) for i in range(3)]

    streak = calculate_overall_streak(habits, entries, now)

    assert streak.current_streak == 0
    assert streak.max_streak == 0
    assert not streak.is_current_week_on_track


def test_zero_goal_habit_does_not_block_other_habits(pair, make_habit, make_entry, now):
    habits = pair() + [make_habit("idle", weekly_goal=0)]
    entries = _log_week(make_entry, 0, 3, 10, b_days=3)

    streak = calculate_overall_streak(habits, entries, now)

    assert streak.current_streak == 3
    assert streak.is_current_week_on_track


def test_overall_streak_ignores_entry_order(pair, make_entry, now):
    entries = _log_week(make_entry, -2, 6, 8) + _log_week(make_entry, -1, 5, 9)
    entries += _log_week(make_entry, 0, 2, 10, b_days=3)
    shuffled = list(entries)
    random.Random(5).shuffle(shuffled)

    assert calculate_overall_streak(pair(), shuffled, now) == calculate_overall_streak(
        pair(), entries, now
    )


def test_archived_habits_are_ignored(pair, make_habit, make_entry, now):
    entries = _log_week(make_entry, -1, 7, 10) + _log_week(make_entry, 0, 3, 10, b_days=3)
    habits = pair() + [make_habit("old", archived=True)]

    # 2024-11-25 was never logged, so only last week plus Monday to Wednesday count
    assert calculate_overall_streak(habits, entries, now).current_streak == 10


def test_new_habit_owes_prorated_goal(make_habit, make_entry, now):
    # Created Tuesday: two elapsed days, so one completion is a warning
    habit = make_habit(created_at="2024-12-10T08:00:00")

    streak = calculate_overall_streak([habit], [make_entry("h1", day(1))], now)

    assert streak.weekly_status == WARNING
    assert streak.pacing[0].expected_by_today == 2


# ============ PACING & BADGES ============


def test_pacing_status(make_habit):
    binary = make_habit()
    assert pacing_status(binary, 2, 3, 7) == (3, -1, WARNING, False)
    assert pacing_status(binary, 3, 3, 7)[2] == ON_TRACK
    assert pacing_status(binary, 1, 3, 7)[2] == BEHIND
    assert pacing_status(binary, 7, 1, 7) == (0.0, 0.0, ON_TRACK, True)
    assert pacing_status(make_habit(weekly_goal=0), 0, 3, 0)[3]


@pytest.mark.parametrize(
    "streak, level",
    [(0, "none"), (2, "none"), (3, "bronze"), (13, "silver"), (14, "gold"), (59, "fire"), (365, "immortal")],
)
def test_streak_level(streak, level):
    assert streak_level(streak) == level


def test_streak_emoji():
    assert streak_emoji(0) == "💤"
    assert streak_emoji(2) == "📅"
    assert streak_emoji(30) == "🔥"
    assert streak_emoji(120) == "💎"

"""Tests for the entry edit window."""

from datetime import datetime

import pytest

from habit_diary.engine.editing import is_date_editable


@pytest.mark.parametrize(
    "now, editable",
    [
        (datetime(2024, 12, 11, 0, 0), True),
        (datetime(2024, 12, 11, 5, 59), True),
        (datetime(2024, 12, 11, 6, 0), False),
        (datetime(2024, 12, 11, 23, 0), False),
    ],
)
def test_yesterday_has_grace_period(now, editable):
    assert is_date_editable("2024-12-10", now) is editable


def test_today_is_always_editable():
    assert is_date_editable("2024-12-11", datetime(2024, 12, 11, 23, 59))


def test_future_is_never_editable():
    assert not is_date_editable("2024-12-12", datetime(2024, 12, 11, 3, 0))


def test_older_days_are_locked():
    assert not is_date_editable("2024-12-09", datetime(2024, 12, 11, 1, 0))


def test_custom_grace_period():
    now = datetime(2024, 12, 11, 9, 30)
    assert is_date_editable("2024-12-10", now, grace_period_hours=10)
    assert not is_date_editable("2024-12-10", now, grace_period_hours=0)

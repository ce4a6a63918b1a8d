"""Edit-window gate for daily entries."""

from datetime import datetime, timedelta

from .dates import DateLike, to_date

# Yesterday stays editable until this local hour
GRACE_PERIOD_HOURS = 6


def is_date_editable(
    value: DateLike, now: datetime, grace_period_hours: int = GRACE_PERIOD_HOURS
) -> bool:
    """
    Whether entries for a calendar date may still be written.

    Future dates are never editable and today always is. Yesterday stays
    editable while the local hour of ``now`` is before the grace period
    ends. Anything older is locked.

    Args:
        value: Date to check
        now: Reference instant (local wall-clock time)
        grace_period_hours: Hours after midnight during which yesterday is open

    Returns:
        True if the date can be edited
    """
    day = to_date(value)
    today = now.date()

    if day > today:
        return False
    if day == today:
        return True
    if day == today - timedelta(days=1):
        return now.hour < grace_period_hours
    return False

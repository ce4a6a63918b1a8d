"""Calendar utilities shared by every calculator.

Weeks are ISO weeks anchored on Monday. Dates are local calendar dates with
no timezone component, and week keys are compared as ``YYYY-MM-DD`` strings.
"""

import re
from datetime import date, datetime, timedelta
from typing import Union

from ..errors import InvalidDateError

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = Union[date, datetime, str]


def parse_date(text: str) -> date:
    """
    Parse a strict ``YYYY-MM-DD`` calendar date.

    Args:
        text: Date string

    Returns:
        Parsed date

    Raises:
        InvalidDateError: If the string is not a valid calendar date
    """
    if not isinstance(text, str) or not _DATE_RE.match(text):
        raise InvalidDateError(f"Invalid date {text!r}, expected YYYY-MM-DD")
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidDateError(f"Invalid date {text!r}: {e}") from e


def parse_instant(text: str) -> datetime:
    """
    Parse an ISO-8601 instant such as ``2024-12-08T09:30:00.000Z``.

    Raises:
        InvalidDateError: If the string is not an ISO-8601 instant
    """
    if not isinstance(text, str) or not text:
        raise InvalidDateError(f"Invalid instant {text!r}")
    value = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise InvalidDateError(f"Invalid instant {text!r}: {e}") from e


def instant_to_date(value: Union[datetime, str]) -> date:
    """Calendar date of an instant, time of day stripped (no tz conversion)."""
    if isinstance(value, str):
        value = parse_instant(value)
    return value.date()


def to_date(value: DateLike) -> date:
    """Coerce a date, datetime or ``YYYY-MM-DD`` string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value)


def format_date(value: DateLike) -> str:
    """Format as ``YYYY-MM-DD``."""
    return to_date(value).strftime(DATE_FORMAT)


def add_days(value: DateLike, days: int) -> date:
    return to_date(value) + timedelta(days=days)


def days_between(start: DateLike, end: DateLike) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (to_date(end) - to_date(start)).days


def week_start(value: DateLike) -> date:
    """Monday of the week containing ``value``."""
    d = to_date(value)
    return d - timedelta(days=d.weekday())


def week_end(value: DateLike) -> date:
    """Sunday of the week containing ``value``."""
    return week_start(value) + timedelta(days=6)


def week_dates(value: DateLike) -> list[date]:
    """The seven dates, Monday to Sunday, of the week containing ``value``."""
    start = week_start(value)
    return [start + timedelta(days=i) for i in range(7)]


def date_range(start: DateLike, end: DateLike) -> list[date]:
    """Every date from ``start`` to ``end`` inclusive (empty if end < start)."""
    first = to_date(start)
    count = days_between(first, end) + 1
    return [first + timedelta(days=i) for i in range(max(0, count))]


def day_of_week(value: DateLike) -> int:
    """Day index within the week, Monday=1 through Sunday=7."""
    return to_date(value).weekday() + 1


def navigate_week(current_week_start: DateLike, direction: str) -> date:
    """
    Move one week forward or back.

    Args:
        current_week_start: Any date in the current week
        direction: "prev" or "next"

    Returns:
        Monday of the target week
    """
    if direction not in ("prev", "next"):
        raise ValueError(f"Unknown direction: {direction}")
    offset = 7 if direction == "next" else -7
    return week_start(current_week_start) + timedelta(days=offset)


def is_current_week(value: DateLike, now: datetime) -> bool:
    return format_date(week_start(value)) == format_date(week_start(now))


def remaining_days_in_week(value: DateLike, now: datetime) -> int:
    """
    Days left in the week including today.

    Returns 0 for a week that has ended and 7 for a week not yet started.
    """
    today = now.date()
    start = week_start(value)
    end = week_end(value)
    if end < today:
        return 0
    if today < start:
        return 7
    return (end - today).days + 1


def days_of_week(value: DateLike) -> list[dict]:
    """
    Display info for each day of the week.

    Returns:
        List of dicts with keys: date, dayName, dayNum
    """
    return [
        {
            "date": format_date(d),
            "dayName": d.strftime("%a"),
            "dayNum": str(d.day),
        }
        for d in week_dates(value)
    ]


def format_week_range(value: DateLike) -> str:
    """Human readable range, e.g. ``Dec 9 - Dec 15, 2024``."""
    start = week_start(value)
    end = week_end(value)
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}, {end.year}"

"""Exception classes for habit-diary."""


class HabitDiaryError(Exception):
    """Base exception for all habit-diary errors."""


class InvalidDateError(HabitDiaryError, ValueError):
    """Raised when a date or instant string cannot be parsed."""


class InvalidDateRangeError(HabitDiaryError, ValueError):
    """Raised when a date range ends before it starts."""


class HabitNotFoundError(HabitDiaryError):
    """Raised when a habit id does not exist in the store."""


class EntryLockedError(HabitDiaryError):
    """Raised when an entry is written outside its edit window."""


class ImportFormatError(HabitDiaryError):
    """Raised when an import document is not a valid export."""

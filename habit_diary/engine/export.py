"""JSON and CSV export of habits and entries, and parsing of JSON exports."""

import csv
import io
import json
import logging
from datetime import datetime
from typing import Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ImportFormatError
from .models import DailyEntry, Habit

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1
CSV_HEADER = ["Date", "Habit", "Type", "Value", "Goal", "Unit"]


class HabitRecord(BaseModel):
    """Habit as it appears in an export document."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    type: Literal["binary", "numeric"]
    weekly_goal: float = Field(alias="weeklyGoal")
    unit: str = ""
    color: str = ""
    icon: str = ""
    created_at: str = Field(alias="createdAt")
    archived: bool = False
    order: int = 0


class EntryRecord(BaseModel):
    """Daily entry as it appears in an export document."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    habit_id: str = Field(alias="habitId")
    date: str
    value: float = Field(ge=0)
    target_at_entry: Optional[float] = Field(default=None, alias="targetAtEntry")
    created_at: str = Field(default="", alias="createdAt")
    updated_at: str = Field(default="", alias="updatedAt")


class ExportData(BaseModel):
    """Full export document."""

    model_config = ConfigDict(populate_by_name=True)

    version: int = EXPORT_VERSION
    exported_at: Optional[str] = Field(default=None, alias="exportedAt")
    habits: list[HabitRecord]
    entries: list[EntryRecord]


def _format_number(value: float) -> str:
    """Render 3.0 as "3" and 2.5 as "2.5"."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def export_to_json(
    habits: Iterable[Habit], entries: Iterable[DailyEntry], now: datetime
) -> str:
    """Serialize everything into a versioned JSON document."""
    data = {
        "version": EXPORT_VERSION,
        "exportedAt": now.isoformat(),
        "habits": [h.to_dict() for h in habits],
        "entries": [e.to_dict() for e in entries],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def export_to_csv(habits: Iterable[Habit], entries: Iterable[DailyEntry]) -> str:
    """
    One row per entry, oldest first.

    Entries whose habit is unknown are skipped.

    Returns:
        CSV text with header Date,Habit,Type,Value,Goal,Unit
    """
    habit_map = {h.id: h for h in habits}
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for entry in sorted(entries, key=lambda e: (e.date, e.habit_id)):
        habit = habit_map.get(entry.habit_id)
        if habit is None:
            continue
        writer.writerow(
            [
                entry.date,
                habit.name,
                habit.type,
                _format_number(entry.value),
                _format_number(habit.weekly_goal),
                habit.unit,
            ]
        )

    return buffer.getvalue().rstrip("\n")


def parse_export(text: str) -> tuple[list[Habit], list[DailyEntry]]:
    """
    Parse a JSON export document.

    Args:
        text: Document produced by export_to_json

    Returns:
        Tuple of (habits, entries)

    Raises:
        ImportFormatError: If the document is not valid JSON or not an export
    """
    try:
        document = ExportData.model_validate(json.loads(text))
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"Import is not valid JSON: {e}") from e
    except ValidationError as e:
        raise ImportFormatError(f"Invalid import format: {e}") from e

    try:
        habits = [Habit.from_dict(h.model_dump(by_alias=True)) for h in document.habits]
        entries = [DailyEntry.from_dict(e.model_dump(by_alias=True)) for e in document.entries]
    except ValueError as e:
        raise ImportFormatError(f"Invalid import format: {e}") from e

    logger.debug(f"Parsed export v{document.version}: {len(habits)} habits, {len(entries)} entries")
    return habits, entries

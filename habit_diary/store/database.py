"""Simple SQLite database for habits and daily entries."""

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Iterator, Optional

from ..engine.dates import format_date, week_end, week_start
from ..engine.models import DailyEntry, Habit
from ..errors import HabitNotFoundError

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {"name", "type", "weekly_goal", "unit", "color", "icon", "archived", "order"}


class HabitDatabase:
    """SQLite store for habits and their daily entries."""

    def __init__(self, db_path: str = "data/habits.db"):
        """Initialize database."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_db(self):
        """Create database tables if they don't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS habits (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    weekly_goal REAL NOT NULL,
                    unit TEXT NOT NULL DEFAULT '',
                    color TEXT NOT NULL DEFAULT '',
                    icon TEXT NOT NULL DEFAULT '',
                    created_at TEXT NOT NULL,
                    archived INTEGER NOT NULL DEFAULT 0,
                    sort_order INTEGER NOT NULL DEFAULT 0
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    habit_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    value REAL NOT NULL,
                    target_at_entry REAL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (habit_id, date)
                )
            """)
            conn.commit()
        logger.info(f"Database initialized at {self.db_path}")

    # ============ HABITS ============

    @staticmethod
    def _row_to_habit(row: sqlite3.Row) -> Habit:
        return Habit(
            id=row["id"],
            name=row["name"],
            type=row["type"],
            weekly_goal=row["weekly_goal"],
            unit=row["unit"],
            color=row["color"],
            icon=row["icon"],
            created_at=row["created_at"],
            archived=bool(row["archived"]),
            order=row["sort_order"],
        )

    def get_habits(self, include_archived: bool = False) -> list[Habit]:
        """Get habits in display order."""
        query = "SELECT * FROM habits"
        if not include_archived:
            query += " WHERE archived = 0"
        query += " ORDER BY sort_order, created_at"

        with self._connect() as conn:
            return [self._row_to_habit(row) for row in conn.execute(query)]

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        """Get habit by id."""
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM habits WHERE id = ?", (habit_id,)).fetchone()
            if not row:
                return None
            return self._row_to_habit(row)

    def _write_habit(self, conn: sqlite3.Connection, habit: Habit):
        conn.execute(
            """
            INSERT OR REPLACE INTO habits
                (id, name, type, weekly_goal, unit, color, icon, created_at, archived, sort_order)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                habit.id,
                habit.name,
                habit.type,
                habit.weekly_goal,
                habit.unit,
                habit.color,
                habit.icon,
                habit.created_at,
                int(habit.archived),
                habit.order,
            ),
        )

    def create_habit(self, habit: Habit):
        """Create new habit."""
        with self._connect() as conn:
            self._write_habit(conn, habit)
            conn.commit()
        logger.info(f"Created habit: {habit.name} ({habit.id})")

    def update_habit(self, habit_id: str, **fields) -> Habit:
        """
        Update selected habit fields.

        Args:
            habit_id: Habit to update
            **fields: Habit attribute names (name, type, weekly_goal, unit,
                color, icon, archived, order) and their new values

        Returns:
            The updated habit

        Raises:
            HabitNotFoundError: If the habit does not exist
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update habit fields: {', '.join(sorted(unknown))}")

        habit = self.get_habit(habit_id)
        if habit is None:
            raise HabitNotFoundError(f"Habit not found: {habit_id}")

        updated = replace(habit, **fields)
        with self._connect() as conn:
            self._write_habit(conn, updated)
            conn.commit()
        logger.info(f"Updated habit {habit_id}: {', '.join(sorted(fields))}")
        return updated

    def delete_habit(self, habit_id: str):
        """Delete a habit and all of its entries."""
        with self._connect() as conn:
            conn.execute("DELETE FROM entries WHERE habit_id = ?", (habit_id,))
            deleted = conn.execute("DELETE FROM habits WHERE id = ?", (habit_id,)).rowcount
            conn.commit()
        if deleted == 0:
            raise HabitNotFoundError(f"Habit not found: {habit_id}")
        logger.info(f"Deleted habit {habit_id}")

    def delete_all_habits(self):
        """Delete every habit and entry."""
        with self._connect() as conn:
            conn.execute("DELETE FROM entries")
            conn.execute("DELETE FROM habits")
            conn.commit()
        logger.info("Deleted all habits and entries")

    # ============ ENTRIES ============

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> DailyEntry:
        return DailyEntry(
            habit_id=row["habit_id"],
            date=row["date"],
            value=row["value"],
            target_at_entry=row["target_at_entry"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get_entry(self, habit_id: str, date: str) -> Optional[DailyEntry]:
        """Get the entry of a habit for one date."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM entries WHERE habit_id = ? AND date = ?", (habit_id, date)
            ).fetchone()
            if not row:
                return None
            return self._row_to_entry(row)

    def get_entries(
        self, start: Optional[str] = None, end: Optional[str] = None
    ) -> list[DailyEntry]:
        """
        Get entries, optionally within an inclusive date range.

        Full history comes back newest first; a range comes back oldest first.
        """
        conditions = []
        params = []

        if start:
            conditions.append("date >= ?")
            params.append(start)

        if end:
            conditions.append("date <= ?")
            params.append(end)

        query = "SELECT * FROM entries"
        if conditions:
            query += f" WHERE {' AND '.join(conditions)} ORDER BY date, habit_id"
        else:
            query += " ORDER BY date DESC, habit_id"

        with self._connect() as conn:
            return [self._row_to_entry(row) for row in conn.execute(query, params)]

    def upsert_entry(self, entry: DailyEntry) -> DailyEntry:
        """
        Create or update the entry for (habit, date).

        An update only changes value and updated_at. The stored
        target_at_entry is kept unless the new entry carries its own, and
        created_at is never overwritten.

        Returns:
            The entry as stored
        """
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO entries
                    (habit_id, date, value, target_at_entry, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT (habit_id, date) DO UPDATE SET
                    value = excluded.value,
                    target_at_entry = COALESCE(excluded.target_at_entry, entries.target_at_entry),
                    updated_at = excluded.updated_at
                """,
                (
                    entry.habit_id,
                    entry.date,
                    entry.value,
                    entry.target_at_entry,
                    entry.created_at,
                    entry.updated_at,
                ),
            )
            conn.commit()
        logger.info(f"Saved entry {entry.id}: {entry.value}")
        return self.get_entry(entry.habit_id, entry.date)

    def reset_week(self, week: str):
        """Delete every entry in the week containing ``week``."""
        start = format_date(week_start(week))
        end = format_date(week_end(week))
        with self._connect() as conn:
            removed = conn.execute(
                "DELETE FROM entries WHERE date >= ? AND date <= ?", (start, end)
            ).rowcount
            conn.commit()
        logger.info(f"Reset week {start}: removed {removed} entries")

    def delete_all_entries(self):
        with self._connect() as conn:
            conn.execute("DELETE FROM entries")
            conn.commit()
        logger.info("Deleted all entries")

    # ============ BULK ============

    def import_data(self, habits: Iterable[Habit], entries: Iterable[DailyEntry]):
        """Merge habits and entries, replacing rows with the same key."""
        habits = list(habits)
        entries = list(entries)
        with self._connect() as conn:
            for habit in habits:
                self._write_habit(conn, habit)
            conn.executemany(
                """
                INSERT OR REPLACE INTO entries
                    (habit_id, date, value, target_at_entry, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (e.habit_id, e.date, e.value, e.target_at_entry, e.created_at, e.updated_at)
                    for e in entries
                ],
            )
            conn.commit()
        logger.info(f"Imported {len(habits)} habits and {len(entries)} entries")

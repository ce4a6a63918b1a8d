"""Data models for habits, daily entries and derived statistics."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .dates import instant_to_date, parse_date

BINARY = "binary"
NUMERIC = "numeric"
HABIT_TYPES = (BINARY, NUMERIC)

ON_TRACK = "on-track"
WARNING = "warning"
BEHIND = "behind"


@dataclass(frozen=True)
class Habit:
    """A habit with a weekly target."""
    id: str
    name: str
    type: str
    weekly_goal: float
    created_at: str
    unit: str = ""
    archived: bool = False
    order: int = 0
    color: str = ""
    icon: str = ""

    def __post_init__(self):
        if self.type not in HABIT_TYPES:
            raise ValueError(f"Unknown habit type: {self.type}")
        # Fails loudly on a malformed createdAt
        instant_to_date(self.created_at)

    @property
    def is_binary(self) -> bool:
        return self.type == BINARY

    @property
    def created_date(self) -> date:
        """Creation day, time of day stripped."""
        return instant_to_date(self.created_at)

    @classmethod
    def from_dict(cls, data: dict) -> "Habit":
        return cls(
            id=data["id"],
            name=data["name"],
            type=data["type"],
            weekly_goal=float(data["weeklyGoal"]),
            created_at=data["createdAt"],
            unit=data.get("unit", ""),
            archived=bool(data.get("archived", False)),
            order=int(data.get("order", 0)),
            color=data.get("color", ""),
            icon=data.get("icon", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "weeklyGoal": self.weekly_goal,
            "unit": self.unit,
            "color": self.color,
            "icon": self.icon,
            "createdAt": self.created_at,
            "archived": self.archived,
            "order": self.order,
        }


def entry_id(habit_id: str, entry_date: str) -> str:
    """Entries are keyed by (habit, date)."""
    return f"{habit_id}_{entry_date}"


@dataclass(frozen=True)
class DailyEntry:
    """
    A logged value for one habit on one calendar date.

    target_at_entry is the daily goal in force when the entry was written.
    When set it wins over the habit's current goal.
    """
    habit_id: str
    date: str
    value: float
    created_at: str
    updated_at: str
    target_at_entry: Optional[float] = None
    id: str = ""

    def __post_init__(self):
        parse_date(self.date)
        if self.value < 0:
            raise ValueError(f"Entry value must be non-negative, got {self.value}")
        if not self.id:
            object.__setattr__(self, "id", entry_id(self.habit_id, self.date))

    @classmethod
    def from_dict(cls, data: dict) -> "DailyEntry":
        target = data.get("targetAtEntry")
        return cls(
            id=data.get("id", ""),
            habit_id=data["habitId"],
            date=data["date"],
            value=float(data.get("value") or 0),
            target_at_entry=float(target) if target is not None else None,
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "habitId": self.habit_id,
            "date": self.date,
            "value": self.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.target_at_entry is not None:
            data["targetAtEntry"] = self.target_at_entry
        return data


@dataclass(frozen=True)
class WeeklyStats:
    """Progress of one habit over one week."""
    week_start: str
    habit_id: str
    total: float
    goal: float
    remaining: float
    avg_needed_per_day: float
    is_on_track: bool
    completion_percentage: int
    streak: int = 0
    # Days of the week on/after the habit's creation date
    active_days: int = 7

    def to_dict(self) -> dict:
        return {
            "weekStart": self.week_start,
            "habitId": self.habit_id,
            "total": self.total,
            "goal": self.goal,
            "remaining": self.remaining,
            "avgNeededPerDay": self.avg_needed_per_day,
            "isOnTrack": self.is_on_track,
            "completionPercentage": self.completion_percentage,
            "streak": self.streak,
        }


@dataclass(frozen=True)
class OverallStats:
    """Cross-habit summary of one week."""
    week_start: str
    total_habits: int
    habits_on_track: int
    overall_completion_percentage: int
    best_performing_habit: Optional[str]
    needs_attention_habit: Optional[str]
    weekly_perfect_days: int
    all_habits_weekly_streak: int

    def to_dict(self) -> dict:
        return {
            "weekStart": self.week_start,
            "totalHabits": self.total_habits,
            "habitsOnTrack": self.habits_on_track,
            "overallCompletionPercentage": self.overall_completion_percentage,
            "bestPerformingHabit": self.best_performing_habit,
            "needsAttentionHabit": self.needs_attention_habit,
            "weeklyPerfectDays": self.weekly_perfect_days,
            "allHabitsWeeklyStreak": self.all_habits_weekly_streak,
        }


@dataclass(frozen=True)
class HabitStreak:
    """Daily-chain streak of a single habit."""
    current_streak: int
    max_streak: int

    def to_dict(self) -> dict:
        return {"currentStreak": self.current_streak, "maxStreak": self.max_streak}


@dataclass(frozen=True)
class StreakData:
    """Daily and weekly streak counters of a single habit."""
    habit_id: str
    current_daily_streak: int
    longest_daily_streak: int
    current_weekly_streak: int
    longest_weekly_streak: int
    last_active_date: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "habitId": self.habit_id,
            "currentDailyStreak": self.current_daily_streak,
            "longestDailyStreak": self.longest_daily_streak,
            "currentWeeklyStreak": self.current_weekly_streak,
            "longestWeeklyStreak": self.longest_weekly_streak,
            "lastActiveDate": self.last_active_date,
        }


@dataclass(frozen=True)
class HabitPacing:
    """Where a habit stands against linear pace in the current week."""
    habit_id: str
    total: float
    expected_by_today: float
    difference: float
    status: str  # on-track, warning, behind
    complete: bool = False

    def to_dict(self) -> dict:
        return {
            "habitId": self.habit_id,
            "total": self.total,
            "expectedByToday": self.expected_by_today,
            "difference": self.difference,
            "status": self.status,
            "complete": self.complete,
        }


@dataclass(frozen=True)
class OverallStreak:
    """Weekly-goal streak across all habits plus live pacing."""
    current_streak: int
    max_streak: int
    is_current_week_on_track: bool
    weekly_status: str
    pacing: list[HabitPacing] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "currentStreak": self.current_streak,
            "maxStreak": self.max_streak,
            "isCurrentWeekOnTrack": self.is_current_week_on_track,
            "weeklyStatus": self.weekly_status,
            "pacing": [p.to_dict() for p in self.pacing],
        }


@dataclass(frozen=True)
class HabitReport:
    """Per-habit figures of a period report."""
    habit_id: str
    habit_name: str
    habit_icon: str
    completions: int
    expected: int
    completion_rate: float
    current_streak: int
    max_streak: int

    def to_dict(self) -> dict:
        return {
            "habitId": self.habit_id,
            "habitName": self.habit_name,
            "habitIcon": self.habit_icon,
            "completions": self.completions,
            "expected": self.expected,
            "completionRate": self.completion_rate,
            "currentStreak": self.current_streak,
            "maxStreak": self.max_streak,
        }


@dataclass(frozen=True)
class PeriodReport:
    """Summary of an arbitrary inclusive date range."""
    start_date: str
    end_date: str
    period: str
    total_days: int
    perfect_days: int
    total_completions: int
    expected_completions: int
    overall_completion_rate: float
    habit_stats: list[HabitReport]
    best_habit: Optional[str]
    worst_habit: Optional[str]
    overall_streak: int
    max_streak: int

    def to_dict(self) -> dict:
        return {
            "startDate": self.start_date,
            "endDate": self.end_date,
            "period": self.period,
            "totalDays": self.total_days,
            "perfectDays": self.perfect_days,
            "totalCompletions": self.total_completions,
            "expectedCompletions": self.expected_completions,
            "overallCompletionRate": self.overall_completion_rate,
            "habitStats": [h.to_dict() for h in self.habit_stats],
            "bestHabit": self.best_habit,
            "worstHabit": self.worst_habit,
            "overallStreak": self.overall_streak,
            "maxStreak": self.max_streak,
        }


def entries_for_habit(entries, habit_id: str) -> list[DailyEntry]:
    return [e for e in entries if e.habit_id == habit_id]


def index_entries(entries) -> dict[tuple[str, str], DailyEntry]:
    """Map (habit_id, date) to its entry."""
    return {(e.habit_id, e.date): e for e in entries}

"""Main FastAPI application."""

import logging
import uuid
from datetime import datetime
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import settings
from .engine.dates import (
    days_of_week,
    format_date,
    format_week_range,
    is_current_week,
    parse_date,
    week_start,
)
from .engine.editing import is_date_editable
from .engine.export import export_to_csv, export_to_json, parse_export
from .engine.goals import daily_goal
from .engine.models import DailyEntry, Habit
from .engine.overall import calculate_overall_stats
from .engine.reports import (
    PRESET_RANGES,
    calculate_period_report,
    preset_range,
    render_report_text,
)
from .engine.streaks import calculate_overall_streak, calculate_streak_data
from .engine.weekly import calculate_weekly_stats
from .errors import (
    EntryLockedError,
    HabitDiaryError,
    HabitNotFoundError,
)
from .store.database import HabitDatabase
from .store.models import EntryUpdate, HabitCreate, HabitUpdate

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# Initialize FastAPI app
app = FastAPI(
    title="Habit Diary",
    description="Habit tracker with weekly goals, streaks and reports",
    version=VERSION,
)

_ERROR_STATUS = (
    (HabitNotFoundError, 404),
    (EntryLockedError, 403),
)


@lru_cache
def get_db() -> HabitDatabase:
    """Shared database, opened on first use."""
    return HabitDatabase(settings.database_path)


def get_now() -> datetime:
    """Reference instant for every calculation in a request."""
    return datetime.now()


@app.exception_handler(HabitDiaryError)
async def habit_diary_error_handler(request: Request, exc: HabitDiaryError):
    """Map engine and store errors to HTTP responses."""
    status_code = 400
    for error_class, code in _ERROR_STATUS:
        if isinstance(exc, error_class):
            status_code = code
            break

    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def _require_habit(db: HabitDatabase, habit_id: str) -> Habit:
    habit = db.get_habit(habit_id)
    if habit is None:
        raise HabitNotFoundError(f"Habit not found: {habit_id}")
    return habit


def _resolve_week(week: Optional[str], now: datetime):
    """Monday of the requested week, defaulting to the current one."""
    return week_start(parse_date(week) if week else now)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Habit Diary",
        "version": VERSION,
        "endpoints": {
            "habits": "/api/habits",
            "entries": "/api/entries",
            "week": "/api/week",
            "weekly_stats": "/api/stats/weekly",
            "overall_stats": "/api/stats/overall",
            "streaks": "/api/streaks",
            "overall_streak": "/api/streaks/overall",
            "pacing": "/api/pacing",
            "reports": "/api/reports",
            "export": "/api/export.json",
            "status": "/status",
        },
    }


@app.get("/status")
async def status(now: datetime = Depends(get_now)):
    """Server status endpoint."""
    return {
        "status": "running",
        "version": VERSION,
        "timestamp": now.isoformat(),
        "database": settings.database_path,
    }


# ============ HABITS ============


@app.get("/api/habits")
async def list_habits(
    include_archived: bool = False, db: HabitDatabase = Depends(get_db)
):
    """List habits in display order."""
    return [h.to_dict() for h in db.get_habits(include_archived=include_archived)]


@app.post("/api/habits", status_code=201)
async def create_habit(
    body: HabitCreate,
    db: HabitDatabase = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Create a habit at the end of the display order."""
    habit = Habit(
        id=str(uuid.uuid4()),
        name=body.name,
        type=body.type,
        weekly_goal=body.weekly_goal,
        unit=body.unit,
        color=body.color,
        icon=body.icon,
        created_at=now.isoformat(),
        order=len(db.get_habits(include_archived=True)),
    )
    db.create_habit(habit)
    return habit.to_dict()


@app.patch("/api/habits/{habit_id}")
async def update_habit(
    habit_id: str, body: HabitUpdate, db: HabitDatabase = Depends(get_db)
):
    """Update selected fields of a habit."""
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        return _require_habit(db, habit_id).to_dict()
    return db.update_habit(habit_id, **fields).to_dict()


@app.delete("/api/habits/{habit_id}")
async def delete_habit(habit_id: str, db: HabitDatabase = Depends(get_db)):
    """Delete a habit and its entries."""
    db.delete_habit(habit_id)
    return {"status": "success", "message": f"Deleted habit {habit_id}"}


# ============ ENTRIES ============


@app.get("/api/entries")
async def list_entries(
    start: Optional[str] = None,
    end: Optional[str] = None,
    db: HabitDatabase = Depends(get_db),
):
    """List entries, optionally within an inclusive date range."""
    start = format_date(parse_date(start)) if start else None
    end = format_date(parse_date(end)) if end else None
    return [e.to_dict() for e in db.get_entries(start=start, end=end)]


@app.put("/api/entries/{habit_id}/{date}")
async def put_entry(
    habit_id: str,
    date: str,
    body: EntryUpdate,
    db: HabitDatabase = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Log a value for a habit on a date.

    The date must still be inside its edit window. A new entry snapshots the
    habit's current daily goal unless the body supplies targetAtEntry; an
    update keeps the stored snapshot unless the body overwrites it.
    """
    entry_date = format_date(parse_date(date))
    habit = _require_habit(db, habit_id)

    if not is_date_editable(entry_date, now, settings.grace_period_hours):
        raise EntryLockedError(f"Entries for {entry_date} can no longer be edited")

    target = body.target_at_entry
    if target is None and db.get_entry(habit_id, entry_date) is None:
        target = daily_goal(habit)

    timestamp = now.isoformat()
    entry = DailyEntry(
        habit_id=habit_id,
        date=entry_date,
        value=body.value,
        target_at_entry=target,
        created_at=timestamp,
        updated_at=timestamp,
    )
    logger.info(f"Entry update: {habit.name} {entry_date} = {body.value}")
    return db.upsert_entry(entry).to_dict()


@app.delete("/api/weeks/{week}/entries")
async def reset_week(week: str, db: HabitDatabase = Depends(get_db)):
    """Remove every entry of a week."""
    start = format_date(week_start(parse_date(week)))
    db.reset_week(start)
    return {"status": "success", "message": f"Reset week of {start}"}


@app.get("/api/week")
async def week_view(
    week: Optional[str] = None, now: datetime = Depends(get_now)
):
    """Days of a week with their edit state."""
    start = _resolve_week(week, now)
    today = format_date(now)
    days = [
        {
            **day,
            "isToday": day["date"] == today,
            "editable": is_date_editable(day["date"], now, settings.grace_period_hours),
        }
        for day in days_of_week(start)
    ]
    return {
        "weekStart": format_date(start),
        "weekRange": format_week_range(start),
        "isCurrentWeek": is_current_week(start, now),
        "days": days,
    }


# ============ STATS & STREAKS ============


@app.get("/api/stats/weekly")
async def weekly_stats(
    week: Optional[str] = None,
    db: HabitDatabase = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Weekly stats for every active habit."""
    start = _resolve_week(week, now)
    entries = db.get_entries()
    return [
        calculate_weekly_stats(habit, entries, start, now).to_dict()
        for habit in db.get_habits()
    ]


@app.get("/api/stats/overall")
async def overall_stats(
    week: Optional[str] = None,
    db: HabitDatabase = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Cross-habit summary of a week."""
    start = _resolve_week(week, now)
    return calculate_overall_stats(db.get_habits(), db.get_entries(), start, now).to_dict()


@app.get("/api/streaks")
async def habit_streaks(
    db: HabitDatabase = Depends(get_db), now: datetime = Depends(get_now)
):
    """Daily and weekly streaks for every active habit."""
    entries = db.get_entries()
    return [
        calculate_streak_data(habit, entries, now).to_dict() for habit in db.get_habits()
    ]


@app.get("/api/streaks/overall")
async def overall_streak(
    db: HabitDatabase = Depends(get_db), now: datetime = Depends(get_now)
):
    """Weekly-goal streak across all habits."""
    return calculate_overall_streak(db.get_habits(), db.get_entries(), now).to_dict()


@app.get("/api/pacing")
async def pacing(
    db: HabitDatabase = Depends(get_db), now: datetime = Depends(get_now)
):
    """Current-week pacing of every habit."""
    result = calculate_overall_streak(db.get_habits(), db.get_entries(), now)
    return {
        "weekStart": format_date(week_start(now)),
        "weeklyStatus": result.weekly_status,
        "habits": [p.to_dict() for p in result.pacing],
    }


# ============ REPORTS ============


def _build_report(
    db: HabitDatabase,
    now: datetime,
    start: Optional[str],
    end: Optional[str],
    preset: Optional[str],
):
    if preset:
        if preset not in PRESET_RANGES:
            raise HTTPException(status_code=400, detail=f"Unknown preset: {preset}")
        first, last = preset_range(preset, now)
    elif start and end:
        first, last = parse_date(start), parse_date(end)
    else:
        first, last = preset_range("last-7-days", now)

    return calculate_period_report(db.get_habits(), db.get_entries(), first, last, now)


@app.get("/api/reports")
async def report(
    start: Optional[str] = None,
    end: Optional[str] = None,
    preset: Optional[str] = None,
    db: HabitDatabase = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Report for a date range (defaults to the last 7 days)."""
    return _build_report(db, now, start, end, preset).to_dict()


@app.get("/api/reports/text", response_class=PlainTextResponse)
async def report_text(
    start: Optional[str] = None,
    end: Optional[str] = None,
    preset: Optional[str] = None,
    db: HabitDatabase = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Shareable plain-text report."""
    return render_report_text(_build_report(db, now, start, end, preset))


# ============ EXPORT / IMPORT ============


@app.get("/api/export.json")
async def export_json(
    db: HabitDatabase = Depends(get_db), now: datetime = Depends(get_now)
):
    """Full JSON export."""
    content = export_to_json(db.get_habits(include_archived=True), db.get_entries(), now)
    return PlainTextResponse(
        content,
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="habits-{format_date(now)}.json"'
        },
    )


@app.get("/api/export.csv")
async def export_csv(
    db: HabitDatabase = Depends(get_db), now: datetime = Depends(get_now)
):
    """Entry-per-row CSV export."""
    content = export_to_csv(db.get_habits(include_archived=True), db.get_entries())
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="habits-{format_date(now)}.csv"'
        },
    )


@app.post("/api/import")
async def import_json(request: Request, db: HabitDatabase = Depends(get_db)):
    """Merge a JSON export into the store."""
    body = await request.body()
    habits, entries = parse_export(body.decode("utf-8", errors="replace"))
    db.import_data(habits, entries)
    return {
        "status": "success",
        "message": "Import complete",
        "habits": len(habits),
        "entries": len(entries),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )

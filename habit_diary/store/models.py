"""Request models for the HTTP API."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class HabitCreate(BaseModel):
    """Body of POST /api/habits."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    type: Literal["binary", "numeric"] = "binary"
    weekly_goal: float = Field(alias="weeklyGoal", gt=0)
    unit: str = "days"
    color: str = ""
    icon: str = ""


class HabitUpdate(BaseModel):
    """Body of PATCH /api/habits/{habit_id}. Unset fields are left alone."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[Literal["binary", "numeric"]] = None
    weekly_goal: Optional[float] = Field(default=None, alias="weeklyGoal", gt=0)
    unit: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    archived: Optional[bool] = None
    order: Optional[int] = None


class EntryUpdate(BaseModel):
    """Body of PUT /api/entries/{habit_id}/{date}."""

    model_config = ConfigDict(populate_by_name=True)

    value: float = Field(ge=0)
    target_at_entry: Optional[float] = Field(default=None, alias="targetAtEntry", ge=0)

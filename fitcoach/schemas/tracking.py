# fitcoach/schemas/tracking.py
from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

GoalType = Literal["weight_loss", "muscle_gain", "strength", "endurance"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]
Experience = Literal["beginner", "intermediate", "advanced"]
Mood = Literal["great", "good", "okay", "tired", "unmotivated"]


# ----- Goals -----


class GoalCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    goal_type: GoalType
    current_weight: int | None = Field(default=None, gt=0)
    target_weight: int | None = Field(default=None, gt=0)
    current_body_fat: int | None = Field(default=None, ge=0, le=100)
    target_body_fat: int | None = Field(default=None, ge=0, le=100)
    timeline: str | None = Field(default=None, max_length=50)
    activity_level: ActivityLevel | None = None
    fitness_experience: Experience | None = None
    preferences: dict[str, Any] | None = None


class GoalRead(GoalCreate):
    model_config = ConfigDict(extra="ignore")

    id: int
    user_id: int
    is_active: bool
    created_at: datetime


# ----- Macro plans -----


class MacroPlanCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    goal_id: int
    daily_calories: int = Field(gt=0)
    protein_grams: int = Field(ge=0)
    carb_grams: int = Field(ge=0)
    fat_grams: int = Field(ge=0)
    meals_per_day: int = Field(default=3, gt=0, le=12)


class MacroPlanRead(MacroPlanCreate):
    model_config = ConfigDict(extra="ignore")

    id: int
    user_id: int
    protein_percent: int
    carb_percent: int
    fat_percent: int
    is_active: bool
    created_at: datetime


# ----- Progress -----


class ProgressCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    goal_id: int
    record_date: datetime | None = None
    weight: int | None = Field(default=None, gt=0)
    body_fat: int | None = Field(default=None, ge=0, le=100)
    measurements: dict[str, Any] | None = None
    workout_completed: bool = False
    calories_consumed: int | None = Field(default=None, ge=0)
    protein_consumed: int | None = Field(default=None, ge=0)
    notes: str | None = None
    mood: Mood | None = None
    energy_level: int | None = Field(default=None, ge=1, le=10)


class ProgressRead(ProgressCreate):
    model_config = ConfigDict(extra="ignore")

    id: int
    user_id: int
    record_date: datetime

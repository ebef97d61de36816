# fitcoach/models/tracking.py
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class UserGoal(SQLModel, table=True):
    """
    A fitness goal the user is working towards.

    goal_type:          weight_loss | muscle_gain | strength | endurance
    activity_level:     sedentary | light | moderate | active | very_active
    fitness_experience: beginner | intermediate | advanced
    """

    __tablename__ = "user_goals"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)

    goal_type: str
    current_weight: int | None = Field(default=None, description="lbs")
    target_weight: int | None = Field(default=None, description="lbs")
    current_body_fat: int | None = Field(default=None, description="percent")
    target_body_fat: int | None = Field(default=None, description="percent")
    timeline: str | None = None
    activity_level: str | None = None
    fitness_experience: str | None = None
    preferences: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))

    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MacroPlan(SQLModel, table=True):
    """Daily calorie / macro targets attached to a goal."""

    __tablename__ = "macro_plans"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    goal_id: int = Field(foreign_key="user_goals.id", index=True)

    daily_calories: int = Field(gt=0)
    protein_grams: int = Field(ge=0)
    carb_grams: int = Field(ge=0)
    fat_grams: int = Field(ge=0)
    protein_percent: int = Field(ge=0)
    carb_percent: int = Field(ge=0)
    fat_percent: int = Field(ge=0)
    meals_per_day: int = Field(default=3, gt=0)

    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ProgressEntry(SQLModel, table=True):
    """A dated progress check-in (weight, intake, mood)."""

    __tablename__ = "progress_tracking"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    goal_id: int = Field(foreign_key="user_goals.id", index=True)

    record_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
    weight: int | None = None
    body_fat: int | None = None
    measurements: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
    workout_completed: bool = Field(default=False)
    calories_consumed: int | None = None
    protein_consumed: int | None = None
    notes: str | None = None
    # great | good | okay | tired | unmotivated
    mood: str | None = None
    energy_level: int | None = Field(default=None, ge=1, le=10)

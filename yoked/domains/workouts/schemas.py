"""Custom workout schemas for request/response validation."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from yoked.domains.workouts.models import WorkoutType


# Workout schemas

class WorkoutCreate(BaseModel):
    """Create workout request."""

    name: str = Field(min_length=1, max_length=255)
    type: WorkoutType
    duration_weeks: int = Field(ge=1, le=52)


class WorkoutUpdate(BaseModel):
    """Update workout request."""

    name: str | None = Field(None, min_length=1, max_length=255)
    type: WorkoutType | None = None
    duration_weeks: int | None = Field(None, ge=1, le=52)
    completed: bool | None = None


class WorkoutGenerate(BaseModel):
    """Generate workout request."""

    type: WorkoutType
    duration_weeks: int = Field(ge=1, le=52)


class DayExerciseResponse(BaseModel):
    """Logged exercise response."""

    id: UUID
    day_id: UUID
    position: int
    name: str
    sets: int
    reps: int
    weight: float
    completed: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkoutDayResponse(BaseModel):
    """Workout day response."""

    id: UUID
    workout_id: UUID
    day: int
    sequence: int
    completed: bool
    started_at: datetime | None = None
    exercises: list[DayExerciseResponse] = []

    model_config = ConfigDict(from_attributes=True)


class WorkoutResponse(BaseModel):
    """Workout response with its days."""

    id: UUID
    user_id: UUID
    name: str
    type: WorkoutType
    duration_weeks: int
    completed: bool
    created_at: datetime
    updated_at: datetime
    days: list[WorkoutDayResponse] = []

    model_config = ConfigDict(from_attributes=True)


class WorkoutListItem(BaseModel):
    """Workout summary for listings."""

    id: UUID
    name: str
    type: WorkoutType
    duration_weeks: int
    completed: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkoutListResponse(BaseModel):
    """Paginated workout list."""

    items: list[WorkoutListItem]
    total: int
    page: int
    limit: int


# Day schemas

class WorkoutDayCreate(BaseModel):
    """Add a day to a workout."""

    day: int = Field(ge=1, le=7)


class WorkoutDayUpdate(BaseModel):
    """Update a workout day."""

    day: int | None = Field(None, ge=1, le=7)
    completed: bool | None = None


# Exercise schemas

class DayExerciseCreate(BaseModel):
    """Log an exercise on a day."""

    name: str = Field(min_length=1, max_length=255)
    sets: int = Field(ge=1, le=20)
    reps: int = Field(ge=1, le=100)
    weight: float = Field(default=0.0, ge=0, le=1000)
    completed: bool = False


class DayExerciseUpdate(BaseModel):
    """Update a logged exercise."""

    name: str | None = Field(None, min_length=1, max_length=255)
    sets: int | None = Field(None, ge=1, le=20)
    reps: int | None = Field(None, ge=1, le=100)
    weight: float | None = Field(None, ge=0, le=1000)
    completed: bool | None = None

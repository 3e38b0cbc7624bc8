"""Program, exercise and session schemas for request/response validation."""
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Exercise schemas

class ExerciseCreate(BaseModel):
    """Create catalogue exercise request."""

    name: str = Field(min_length=2, max_length=255)
    slug: str = Field(min_length=2, max_length=100, pattern=r"^[a-z0-9_]+$")
    description: str | None = None
    primary_muscle_group: str | None = Field(None, max_length=100)
    equipment: str | None = Field(None, max_length=100)
    load_modifier: float | None = Field(None, gt=0, le=5)


class ExerciseResponse(BaseModel):
    """Exercise response."""

    id: UUID
    name: str
    slug: str
    description: str | None = None
    primary_muscle_group: str | None = None
    equipment: str | None = None
    load_modifier: float | None = None

    model_config = ConfigDict(from_attributes=True)


# Program schemas

class ProgramExerciseInput(BaseModel):
    """Exercise prescription inside a program workout."""

    exercise_id: UUID
    sets: int = Field(ge=1, le=20)
    reps: int = Field(ge=1, le=100)
    target_rir: int = Field(default=2, ge=0, le=10)
    prescribed_weight: float | None = Field(None, ge=0, le=1000)
    exercise_order: int = Field(ge=1)
    notes: str | None = None


class ProgramWorkoutInput(BaseModel):
    """One training day of a program."""

    name: str = Field(min_length=1, max_length=255)
    day_of_week: int = Field(ge=1, le=7)
    description: str | None = None
    exercises: list[ProgramExerciseInput] = []


class ProgramCreate(BaseModel):
    """Create program template request."""

    name: str = Field(min_length=2, max_length=255)
    description: str | None = None
    goal: str | None = Field(None, max_length=100)
    estimated_weeks: int | None = Field(None, ge=1, le=52)
    workouts: list[ProgramWorkoutInput] = Field(min_length=1)


class ProgramExerciseResponse(BaseModel):
    """Exercise prescription response."""

    id: UUID
    exercise_id: UUID
    exercise: ExerciseResponse
    sets: int
    reps: int
    target_rir: int
    prescribed_weight: float | None = None
    exercise_order: int
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ProgramWorkoutResponse(BaseModel):
    """Program workout response."""

    id: UUID
    program_id: UUID
    name: str
    day_of_week: int
    description: str | None = None
    exercises: list[ProgramExerciseResponse] = []

    model_config = ConfigDict(from_attributes=True)


class ProgramResponse(BaseModel):
    """Program summary response."""

    id: UUID
    name: str
    description: str | None = None
    goal: str | None = None
    estimated_weeks: int | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProgramDetailResponse(ProgramResponse):
    """Program with workouts and exercises."""

    workouts: list[ProgramWorkoutResponse] = []


# Enrolment schemas

class AssignProgramRequest(BaseModel):
    """Assign a program to the current user."""

    program_id: UUID


class UserProgramResponse(BaseModel):
    """Program enrolment response."""

    id: UUID
    user_id: UUID
    program_id: UUID
    start_date: date
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExerciseWithWeight(BaseModel):
    """Prescribed exercise with the weight to use next."""

    program_exercise: ProgramExerciseResponse
    suggested_weight: float | None = None


class WorkoutWithWeights(BaseModel):
    """Program workout with suggested weights."""

    program_workout: ProgramWorkoutResponse
    exercises: list[ExerciseWithWeight]


class UserProgramDetailResponse(BaseModel):
    """Active program with suggested weights per exercise."""

    user_program: UserProgramResponse
    program: ProgramResponse
    workouts: list[WorkoutWithWeights]


class WeightsResponse(BaseModel):
    """Weights keyed by program workout exercise id."""

    weights: dict[UUID, float]


# Session schemas

class SessionStart(BaseModel):
    """Start session request."""

    program_workout_id: UUID


class ExerciseLogInput(BaseModel):
    """Performed sets of one exercise."""

    program_workout_exercise_id: UUID
    actual_reps: list[int] = Field(min_length=1, max_length=20)
    actual_rir: list[int] = Field(min_length=1, max_length=20)
    weight_used: float | None = Field(None, ge=0, le=1000)

    @field_validator("actual_reps")
    @classmethod
    def validate_reps(cls, v: list[int]) -> list[int]:
        if any(r < 0 or r > 100 for r in v):
            raise ValueError("reps must be between 0 and 100")
        return v

    @field_validator("actual_rir")
    @classmethod
    def validate_rir(cls, v: list[int]) -> list[int]:
        if any(r < 0 for r in v):
            raise ValueError("RIR cannot be negative")
        return v

    @model_validator(mode="after")
    def validate_lengths(self) -> "ExerciseLogInput":
        if len(self.actual_reps) != len(self.actual_rir):
            raise ValueError("actual_reps and actual_rir must have the same length")
        return self


class SessionComplete(BaseModel):
    """Complete session request."""

    exercises: list[ExerciseLogInput] = Field(min_length=1)
    notes: str | None = Field(None, max_length=2000)


class ExerciseLogResponse(BaseModel):
    """Logged exercise response."""

    id: UUID
    program_workout_exercise_id: UUID
    actual_reps: list[int]
    actual_rir: list[int]
    weight_used: float | None = None

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(BaseModel):
    """Workout session response."""

    id: UUID
    user_program_id: UUID
    program_workout_id: UUID
    started_at: datetime
    completed_at: datetime | None = None
    notes: str | None = None
    logs: list[ExerciseLogResponse] = []

    model_config = ConfigDict(from_attributes=True)

"""User schemas for request/response validation."""
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from yoked.core.security import check_password_length
from yoked.domains.users.models import ActivityLevel, FitnessGoal, Sex


class UserProfileResponse(BaseModel):
    """Full user profile response."""

    id: UUID
    email: str
    name: str
    age: int
    sex: Sex
    height: float
    weight: float
    activity_level: ActivityLevel
    goal: FitnessGoal
    weekly_budget: float
    is_active: bool
    is_admin: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserPreferencesResponse(BaseModel):
    """User preferences response."""

    preferences: list[str]
    allergies: list[str]
    dislikes: list[str]

    model_config = ConfigDict(from_attributes=True)


class UserPreferencesUpdate(BaseModel):
    """Preferences update request. Omitted lists are left unchanged."""

    preferences: list[str] | None = None
    allergies: list[str] | None = None
    dislikes: list[str] | None = None


class PasswordChangeRequest(BaseModel):
    """Password change request."""

    current_password: str
    new_password: str = Field(max_length=72)

    @field_validator("new_password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        return check_password_length(v)


class UserStatsResponse(BaseModel):
    """Training statistics computed from completed sessions."""

    completed_sessions: int = 0
    workouts_completed: int = 0
    total_weight_lifted: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    last_workout_date: date | None = None

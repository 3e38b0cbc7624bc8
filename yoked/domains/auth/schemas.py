from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from yoked.core.security import check_password_length
from yoked.domains.users.models import ActivityLevel, FitnessGoal, Sex


class RegisterRequest(BaseModel):
    """User registration request."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    name: str = Field(min_length=1, max_length=100)
    age: int = Field(ge=13, le=120)
    sex: Sex
    height: float = Field(ge=30, le=250)
    weight: float = Field(ge=20, le=500)
    activity_level: ActivityLevel
    goal: FitnessGoal
    weekly_budget: float = Field(default=0.0, ge=0)
    program_id: UUID | None = Field(
        default=None,
        description="Program to enrol in as part of registration",
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        return check_password_length(v)


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Authentication token response."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class UserResponse(BaseModel):
    """User information response."""

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

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Complete authentication response."""

    user: UserResponse
    tokens: TokenResponse

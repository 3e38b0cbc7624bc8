"""User models for the Yoked platform."""
import enum
import uuid

from sqlalchemy import JSON, Boolean, CheckConstraint, Enum, Float, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yoked.config.database import Base
from yoked.core.models import SoftDeleteMixin, TimestampMixin, UUIDMixin

# Closed ranges for body metrics (inclusive)
AGE_RANGE = (13, 120)
HEIGHT_RANGE = (30.0, 250.0)
WEIGHT_RANGE = (20.0, 500.0)


class Sex(str, enum.Enum):
    """Biological sex used by the strength estimate."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(str, enum.Enum):
    """Self-reported daily activity."""

    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"
    EXTRA_ACTIVE = "extra_active"


class FitnessGoal(str, enum.Enum):
    """Training goal of the user."""

    WEIGHT_LOSS = "weight_loss"
    MUSCLE_GAIN = "muscle_gain"
    MAINTENANCE = "maintenance"
    ENDURANCE = "endurance"


class User(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """User model representing a platform user and their body metrics."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("age >= 13 AND age <= 120", name="ck_users_age"),
        CheckConstraint("height >= 30 AND height <= 250", name="ck_users_height"),
        CheckConstraint("weight >= 20 AND weight <= 500", name="ck_users_weight"),
        CheckConstraint("weekly_budget >= 0", name="ck_users_weekly_budget"),
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    age: Mapped[int] = mapped_column(Integer, nullable=False)
    sex: Mapped[Sex] = mapped_column(
        Enum(Sex, name="sex_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    height: Mapped[float] = mapped_column(Float, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    activity_level: Mapped[ActivityLevel] = mapped_column(
        Enum(ActivityLevel, name="activity_level_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    goal: Mapped[FitnessGoal] = mapped_column(
        Enum(FitnessGoal, name="fitness_goal_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    weekly_budget: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    preferences: Mapped["UserPreferences | None"] = relationship(
        "UserPreferences",
        back_populates="user",
        uselist=False,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class UserPreferences(Base, UUIDMixin, TimestampMixin):
    """Free-form preference lists (likes, allergies, dislikes)."""

    __tablename__ = "user_preferences"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    preferences: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    allergies: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    dislikes: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="preferences")

    def __repr__(self) -> str:
        return f"<UserPreferences user_id={self.user_id}>"

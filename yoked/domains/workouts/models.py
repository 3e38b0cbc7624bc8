"""User-owned custom workout models."""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yoked.config.database import Base
from yoked.core.models import SoftDeleteMixin, TimestampMixin, UUIDMixin


class WorkoutType(str, enum.Enum):
    """Training style of a custom workout."""

    HYPERTROPHY = "hypertrophy"
    STRENGTH = "strength"
    ENDURANCE = "endurance"
    POWERLIFTING = "powerlifting"
    CARDIO = "cardio"
    FLEXIBILITY = "flexibility"


class Workout(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """A multi-week workout plan built or generated for one user."""

    __tablename__ = "custom_workouts"
    __table_args__ = (
        CheckConstraint("duration_weeks >= 1 AND duration_weeks <= 52", name="ck_custom_workouts_duration"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[WorkoutType] = mapped_column(
        Enum(WorkoutType, name="workout_type_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    duration_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    days: Mapped[list["WorkoutDay"]] = relationship(
        "WorkoutDay",
        back_populates="workout",
        order_by="WorkoutDay.sequence",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Workout {self.name}>"


class WorkoutDay(Base, UUIDMixin, TimestampMixin):
    """One scheduled training day of a custom workout."""

    __tablename__ = "custom_workout_days"
    __table_args__ = (
        CheckConstraint("day >= 1 AND day <= 7", name="ck_custom_workout_days_day"),
    )

    workout_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("custom_workouts.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    day: Mapped[int] = mapped_column(Integer, nullable=False)
    # 1-based position in the plan; days repeat across weeks
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    workout: Mapped["Workout"] = relationship("Workout", back_populates="days")
    exercises: Mapped[list["DayExercise"]] = relationship(
        "DayExercise",
        back_populates="day",
        order_by="DayExercise.position",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<WorkoutDay workout={self.workout_id} day={self.day}>"


class DayExercise(Base, UUIDMixin):
    """An exercise logged on a custom workout day."""

    __tablename__ = "custom_day_exercises"
    __table_args__ = (
        CheckConstraint("sets >= 1 AND sets <= 20", name="ck_custom_day_exercises_sets"),
        CheckConstraint("reps >= 1 AND reps <= 100", name="ck_custom_day_exercises_reps"),
        CheckConstraint("weight >= 0 AND weight <= 1000", name="ck_custom_day_exercises_weight"),

        UniqueConstraint("day_id", "position", name="uq_custom_day_exercises_position"),
    )

    day_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("custom_workout_days.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    # 1-based order in which the exercise was logged on the day
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sets: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    day: Mapped["WorkoutDay"] = relationship("WorkoutDay", back_populates="exercises")

    def __repr__(self) -> str:
        return f"<DayExercise {self.name} {self.sets}x{self.reps}>"

"""Program template, enrolment and session log models."""
import uuid
from datetime import date, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yoked.config.database import Base
from yoked.core.models import TimestampMixin, UUIDMixin


class Exercise(Base, UUIDMixin, TimestampMixin):
    """Catalogue exercise."""

    __tablename__ = "exercises"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    primary_muscle_group: Mapped[str | None] = mapped_column(String(100), index=True, nullable=True)
    equipment: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # Relative load versus the base-strength estimate; None uses the built-in table
    load_modifier: Mapped[float | None] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<Exercise {self.slug}>"


class Program(Base, UUIDMixin, TimestampMixin):
    """High-level program definition (e.g. a 12-week hypertrophy block)."""

    __tablename__ = "programs"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    goal: Mapped[str | None] = mapped_column(String(100), index=True, nullable=True)
    estimated_weeks: Mapped[int | None] = mapped_column(Integer, nullable=True)

    workouts: Mapped[list["ProgramWorkout"]] = relationship(
        "ProgramWorkout",
        back_populates="program",
        order_by="ProgramWorkout.day_of_week",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Program {self.name}>"


class ProgramWorkout(Base, UUIDMixin):
    """One training day of a program (e.g. "Day 1: Push")."""

    __tablename__ = "program_workouts"
    __table_args__ = (
        UniqueConstraint("program_id", "day_of_week", name="uq_program_workouts_program_day"),
        CheckConstraint("day_of_week >= 1 AND day_of_week <= 7", name="ck_program_workouts_day"),
    )

    program_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("programs.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    program: Mapped["Program"] = relationship("Program", back_populates="workouts")
    exercises: Mapped[list["ProgramWorkoutExercise"]] = relationship(
        "ProgramWorkoutExercise",
        back_populates="program_workout",
        order_by="ProgramWorkoutExercise.exercise_order",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<ProgramWorkout program={self.program_id} day={self.day_of_week}>"


class ProgramWorkoutExercise(Base, UUIDMixin):
    """Prescription for one exercise inside a program workout."""

    __tablename__ = "program_workout_exercises"
    __table_args__ = (
        UniqueConstraint("program_workout_id", "exercise_id", name="uq_pwe_exercise_in_workout"),
        UniqueConstraint("program_workout_id", "exercise_order", name="uq_pwe_order_in_workout"),
        CheckConstraint("sets > 0", name="ck_pwe_sets"),
        CheckConstraint("reps > 0", name="ck_pwe_reps"),
        CheckConstraint("target_rir >= 0", name="ck_pwe_target_rir"),
        CheckConstraint("prescribed_weight IS NULL OR prescribed_weight >= 0", name="ck_pwe_prescribed_weight"),
        CheckConstraint("exercise_order > 0", name="ck_pwe_order"),
    )

    program_workout_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("program_workouts.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    exercise_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("exercises.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    sets: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, nullable=False)
    target_rir: Mapped[int] = mapped_column(Integer, default=2, nullable=False)
    prescribed_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    exercise_order: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    program_workout: Mapped["ProgramWorkout"] = relationship(
        "ProgramWorkout",
        back_populates="exercises",
    )
    exercise: Mapped["Exercise"] = relationship("Exercise", lazy="joined")

    def __repr__(self) -> str:
        return f"<ProgramWorkoutExercise workout={self.program_workout_id} order={self.exercise_order}>"


class UserProgram(Base, UUIDMixin):
    """A user's enrolment in a program. At most one active row per user."""

    __tablename__ = "user_programs"
    __table_args__ = (
        Index(
            "uq_user_programs_one_active",
            "user_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    program_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("programs.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    program: Mapped["Program"] = relationship("Program", lazy="joined")

    def __repr__(self) -> str:
        return f"<UserProgram user={self.user_id} program={self.program_id} active={self.is_active}>"


class WorkoutSession(Base, UUIDMixin):
    """A performed instance of a program workout."""

    __tablename__ = "workouts"

    user_program_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("user_programs.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    program_workout_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("program_workouts.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        index=True,
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    user_program: Mapped["UserProgram"] = relationship("UserProgram")
    program_workout: Mapped["ProgramWorkout"] = relationship("ProgramWorkout")
    logs: Mapped[list["WorkoutExerciseLog"]] = relationship(
        "WorkoutExerciseLog",
        back_populates="session",
        lazy="selectin",
    )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __repr__(self) -> str:
        return f"<WorkoutSession id={self.id} program_workout={self.program_workout_id}>"


class WorkoutExerciseLog(Base, UUIDMixin):
    """Actual performance of one prescribed exercise within a session."""

    __tablename__ = "workout_exercises"

    workout_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("workouts.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    program_workout_exercise_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("program_workout_exercises.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    # Parallel per-set arrays, equal length
    actual_reps: Mapped[list[int]] = mapped_column(JSON, nullable=False)
    actual_rir: Mapped[list[int]] = mapped_column(JSON, nullable=False)
    weight_used: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    session: Mapped["WorkoutSession"] = relationship("WorkoutSession", back_populates="logs")
    program_workout_exercise: Mapped["ProgramWorkoutExercise"] = relationship(
        "ProgramWorkoutExercise",
        lazy="joined",
    )

    def __repr__(self) -> str:
        return f"<WorkoutExerciseLog session={self.workout_id} exercise={self.program_workout_exercise_id}>"

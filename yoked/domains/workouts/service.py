"""Custom workout service: user-built and generated multi-week plans."""
import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.core.exceptions import NotFoundError, StateConflictError, ValidationError
from yoked.domains.users.models import User
from yoked.domains.workouts.models import DayExercise, Workout, WorkoutDay, WorkoutType

logger = structlog.get_logger(__name__)

SESSIONS_PER_WEEK: dict[WorkoutType, int] = {
    WorkoutType.HYPERTROPHY: 4,
    WorkoutType.STRENGTH: 3,
    WorkoutType.ENDURANCE: 5,
    WorkoutType.POWERLIFTING: 3,
    WorkoutType.CARDIO: 5,
    WorkoutType.FLEXIBILITY: 6,
}

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _validate_type(workout_type: str) -> WorkoutType:
    try:
        return WorkoutType(workout_type)
    except ValueError:
        raise ValidationError(f"invalid workout type: {workout_type}", field="type")


def _validate_duration(duration_weeks: int) -> None:
    if duration_weeks < 1 or duration_weeks > 52:
        raise ValidationError("duration must be between 1 and 52 weeks", field="duration_weeks")


def _validate_day(day: int) -> None:
    if day < 1 or day > 7:
        raise ValidationError("day must be between 1 and 7", field="day")


def _validate_exercise(sets: int, reps: int, weight: float) -> None:
    if sets < 1 or sets > 20:
        raise ValidationError("sets must be between 1 and 20", field="sets")
    if reps < 1 or reps > 100:
        raise ValidationError("reps must be between 1 and 100", field="reps")
    if weight < 0 or weight > 1000:
        raise ValidationError("weight must be between 0 and 1000", field="weight")


class WorkoutService:
    """Service for handling custom workout operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Workouts

    async def create_workout(
        self,
        user_id: uuid.UUID,
        name: str,
        workout_type: str,
        duration_weeks: int,
    ) -> Workout:
        """Create an empty custom workout.

        Args:
            user_id: Owner's UUID
            name: Workout name
            workout_type: One of the WorkoutType values
            duration_weeks: Length of the plan (1-52)

        Returns:
            The created Workout

        Raises:
            ValidationError: If a field is missing or out of range
        """
        if not name or not name.strip():
            raise ValidationError("workout name is required", field="name")
        wtype = _validate_type(workout_type)
        _validate_duration(duration_weeks)

        workout = Workout(
            user_id=user_id,
            name=name.strip(),
            type=wtype,
            duration_weeks=duration_weeks,
            completed=False,
            days=[],
        )
        self.db.add(workout)
        await self.db.commit()
        await self.db.refresh(workout)
        return workout

    async def get_workout(self, user_id: uuid.UUID, workout_id: uuid.UUID) -> Workout:
        """Get one of the user's workouts.

        Raises:
            NotFoundError: If the workout does not exist, is deleted or is not the user's
        """
        result = await self.db.execute(
            select(Workout).where(
                Workout.id == workout_id,
                Workout.user_id == user_id,
                Workout.deleted_at.is_(None),
            )
        )
        workout = result.scalar_one_or_none()
        if workout is None:
            raise NotFoundError("Workout not found")
        return workout

    async def list_workouts(
        self,
        user_id: uuid.UUID,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[list[Workout], int]:
        """List the user's workouts, newest first.

        ``page`` below 1 becomes 1; ``limit`` outside 1-100 becomes 20.

        Returns:
            Tuple of (workouts on the page, total count)
        """
        if page < 1:
            page = 1
        if limit < 1 or limit > MAX_PAGE_SIZE:
            limit = DEFAULT_PAGE_SIZE

        conditions = [Workout.user_id == user_id, Workout.deleted_at.is_(None)]

        total = await self.db.scalar(select(func.count(Workout.id)).where(*conditions))

        result = await self.db.execute(
            select(Workout)
            .where(*conditions)
            .order_by(Workout.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def get_current_workout(self, user_id: uuid.UUID) -> Workout | None:
        """The newest workout the user has not completed."""
        result = await self.db.execute(
            select(Workout)
            .where(
                Workout.user_id == user_id,
                Workout.completed.is_(False),
                Workout.deleted_at.is_(None),
            )
            .order_by(Workout.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def update_workout(
        self,
        user_id: uuid.UUID,
        workout_id: uuid.UUID,
        name: str | None = None,
        workout_type: str | None = None,
        duration_weeks: int | None = None,
        completed: bool | None = None,
    ) -> Workout:
        """Update a workout; omitted fields are unchanged.

        Raises:
            NotFoundError: If the workout is not the user's
            ValidationError: If a field is out of range
        """
        workout = await self.get_workout(user_id, workout_id)

        if name is not None:
            if not name.strip():
                raise ValidationError("workout name is required", field="name")
            workout.name = name.strip()
        if workout_type is not None:
            workout.type = _validate_type(workout_type)
        if duration_weeks is not None:
            _validate_duration(duration_weeks)
            workout.duration_weeks = duration_weeks
        if completed is not None:
            workout.completed = completed

        await self.db.commit()
        await self.db.refresh(workout)
        return workout

    async def delete_workout(self, user_id: uuid.UUID, workout_id: uuid.UUID) -> None:
        """Soft-delete a workout."""
        workout = await self.get_workout(user_id, workout_id)
        workout.deleted_at = datetime.now(timezone.utc)
        await self.db.commit()

    async def generate_workout(self, user: User, workout_type: str, duration_weeks: int) -> Workout:
        """Generate a plan with a scheduled day for every session.

        The plan gets ``duration_weeks`` times the type's sessions per week
        days, cycling through days 1-7.

        Args:
            user: Owner of the plan (their name goes into the plan name)
            workout_type: One of the WorkoutType values
            duration_weeks: Length of the plan (1-52)

        Returns:
            The generated Workout with its days

        Raises:
            ValidationError: If the type or duration is invalid
        """
        wtype = _validate_type(workout_type)
        _validate_duration(duration_weeks)

        total = duration_weeks * SESSIONS_PER_WEEK[wtype]
        workout = Workout(
            user_id=user.id,
            name=f"{duration_weeks}-Week {wtype.value} Program for {user.name}",
            type=wtype,
            duration_weeks=duration_weeks,
            completed=False,
            days=[
                WorkoutDay(day=(i - 1) % 7 + 1, sequence=i, completed=False, exercises=[])
                for i in range(1, total + 1)
            ],
        )
        self.db.add(workout)
        await self.db.commit()
        await self.db.refresh(workout)

        logger.info(
            "workout_generated",
            user_id=str(user.id),
            workout_id=str(workout.id),
            type=wtype.value,
            days=total,
        )
        return workout

    # Days

    async def get_day(self, user_id: uuid.UUID, day_id: uuid.UUID) -> WorkoutDay:
        """Get a workout day owned by the user.

        Raises:
            NotFoundError: If the day does not exist or is not the user's
        """
        result = await self.db.execute(
            select(WorkoutDay)
            .join(Workout, WorkoutDay.workout_id == Workout.id)
            .where(
                WorkoutDay.id == day_id,
                Workout.user_id == user_id,
                Workout.deleted_at.is_(None),
            )
        )
        day = result.scalar_one_or_none()
        if day is None:
            raise NotFoundError("Workout day not found")
        return day

    async def create_day(self, user_id: uuid.UUID, workout_id: uuid.UUID, day: int) -> WorkoutDay:
        """Append a training day to a workout.

        Raises:
            NotFoundError: If the workout is not the user's
            ValidationError: If day is outside 1-7
        """
        workout = await self.get_workout(user_id, workout_id)
        _validate_day(day)

        workout_day = WorkoutDay(
            day=day,
            sequence=len(workout.days) + 1,
            completed=False,
            exercises=[],
        )
        workout.days.append(workout_day)
        await self.db.commit()
        await self.db.refresh(workout_day)
        return workout_day

    async def update_day(
        self,
        user_id: uuid.UUID,
        day_id: uuid.UUID,
        day: int | None = None,
        completed: bool | None = None,
    ) -> WorkoutDay:
        """Update a workout day; omitted fields are unchanged."""
        workout_day = await self.get_day(user_id, day_id)

        if day is not None:
            _validate_day(day)
            workout_day.day = day
        if completed is not None:
            workout_day.completed = completed

        await self.db.commit()
        await self.db.refresh(workout_day)
        return workout_day

    async def start_day(self, user_id: uuid.UUID, day_id: uuid.UUID) -> WorkoutDay:
        """Mark a day as started.

        Raises:
            StateConflictError: If the day is already completed
        """
        workout_day = await self.get_day(user_id, day_id)
        if workout_day.completed:
            raise StateConflictError("Workout day is already completed")

        if workout_day.started_at is None:
            workout_day.started_at = datetime.now(timezone.utc)
            await self.db.commit()
            await self.db.refresh(workout_day)
        return workout_day

    async def complete_day(self, user_id: uuid.UUID, day_id: uuid.UUID) -> WorkoutDay:
        """Mark a day as completed."""
        workout_day = await self.get_day(user_id, day_id)
        workout_day.completed = True
        await self.db.commit()
        await self.db.refresh(workout_day)
        return workout_day

    async def list_days(self, user_id: uuid.UUID, workout_id: uuid.UUID) -> list[WorkoutDay]:
        """Days of a workout in plan order."""
        workout = await self.get_workout(user_id, workout_id)
        return list(workout.days)

    # Day exercises

    async def log_exercise(
        self,
        user_id: uuid.UUID,
        day_id: uuid.UUID,
        name: str,
        sets: int,
        reps: int,
        weight: float = 0.0,
        completed: bool = False,
    ) -> DayExercise:
        """Record an exercise on a workout day.

        Raises:
            NotFoundError: If the day is not the user's
            ValidationError: If sets, reps or weight are out of range
        """
        workout_day = await self.get_day(user_id, day_id)
        if not name or not name.strip():
            raise ValidationError("exercise name is required", field="name")
        _validate_exercise(sets, reps, weight)

        exercise = DayExercise(
            name=name.strip(),
            position=len(workout_day.exercises) + 1,
            sets=sets,
            reps=reps,
            weight=weight,
            completed=completed,
        )
        workout_day.exercises.append(exercise)
        await self.db.commit()
        await self.db.refresh(exercise)
        return exercise

    async def get_exercise(self, user_id: uuid.UUID, exercise_id: uuid.UUID) -> DayExercise:
        """Get a logged exercise owned by the user.

        Raises:
            NotFoundError: If the exercise does not exist or is not the user's
        """
        result = await self.db.execute(
            select(DayExercise)
            .join(WorkoutDay, DayExercise.day_id == WorkoutDay.id)
            .join(Workout, WorkoutDay.workout_id == Workout.id)
            .where(
                DayExercise.id == exercise_id,
                Workout.user_id == user_id,
                Workout.deleted_at.is_(None),
            )
        )
        exercise = result.scalar_one_or_none()
        if exercise is None:
            raise NotFoundError("Exercise not found")
        return exercise

    async def update_exercise(
        self,
        user_id: uuid.UUID,
        exercise_id: uuid.UUID,
        name: str | None = None,
        sets: int | None = None,
        reps: int | None = None,
        weight: float | None = None,
        completed: bool | None = None,
    ) -> DayExercise:
        """Update a logged exercise; omitted fields are unchanged."""
        exercise = await self.get_exercise(user_id, exercise_id)

        new_sets = exercise.sets if sets is None else sets
        new_reps = exercise.reps if reps is None else reps
        new_weight = exercise.weight if weight is None else weight
        _validate_exercise(new_sets, new_reps, new_weight)

        if name is not None:
            if not name.strip():
                raise ValidationError("exercise name is required", field="name")
            exercise.name = name.strip()
        exercise.sets = new_sets
        exercise.reps = new_reps
        exercise.weight = new_weight
        if completed is not None:
            exercise.completed = completed

        await self.db.commit()
        await self.db.refresh(exercise)
        return exercise

    async def list_day_exercises(self, user_id: uuid.UUID, day_id: uuid.UUID) -> list[DayExercise]:
        """Exercises logged on a day, in logging order."""
        workout_day = await self.get_day(user_id, day_id)
        return list(workout_day.exercises)

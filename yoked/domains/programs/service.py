"""Program catalogue, enrolment, session and progression service."""
import uuid
from datetime import date, datetime, timezone
from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.core.exceptions import (
    NoPriorDataError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from yoked.domains.programs.models import (
    Exercise,
    Program,
    ProgramWorkout,
    ProgramWorkoutExercise,
    UserProgram,
    WorkoutExerciseLog,
    WorkoutSession,
)
from yoked.domains.programs.progression import (
    adjustment_multiplier,
    average_rir,
    exercise_modifier,
    initial_weight,
    next_weight,
)
from yoked.domains.users.models import User

logger = structlog.get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 100


class ProgramService:
    """Service for programs, enrolment, sessions and weight progression."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Catalogue

    async def get_program(self, program_id: uuid.UUID) -> Program | None:
        """Get a program with its workouts and exercises.

        Args:
            program_id: The program's UUID

        Returns:
            The Program object if found, None otherwise
        """
        result = await self.db.execute(select(Program).where(Program.id == program_id))
        return result.scalar_one_or_none()

    async def list_programs(self, goal: str | None = None) -> list[Program]:
        """List programs, optionally filtered by goal."""
        query = select(Program).order_by(Program.name)
        if goal:
            query = query.where(Program.goal == goal)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_exercises(self, muscle_group: str | None = None) -> list[Exercise]:
        """List catalogue exercises, optionally filtered by primary muscle group."""
        query = select(Exercise).order_by(Exercise.name)
        if muscle_group:
            query = query.where(Exercise.primary_muscle_group == muscle_group)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_exercise(self, exercise_id: uuid.UUID) -> Exercise | None:
        """Get a catalogue exercise by ID."""
        result = await self.db.execute(select(Exercise).where(Exercise.id == exercise_id))
        return result.scalar_one_or_none()

    async def create_exercise(
        self,
        name: str,
        slug: str,
        description: str | None = None,
        primary_muscle_group: str | None = None,
        equipment: str | None = None,
        load_modifier: float | None = None,
    ) -> Exercise:
        """Add an exercise to the catalogue.

        Raises:
            StateConflictError: If the name or slug is already taken
        """
        exercise = Exercise(
            name=name,
            slug=slug,
            description=description,
            primary_muscle_group=primary_muscle_group,
            equipment=equipment,
            load_modifier=load_modifier,
        )
        self.db.add(exercise)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise StateConflictError(f"Exercise '{name}' or slug '{slug}' already exists")

        await self.db.refresh(exercise)
        return exercise

    async def create_program(
        self,
        name: str,
        workouts: list[dict[str, Any]],
        description: str | None = None,
        goal: str | None = None,
        estimated_weeks: int | None = None,
    ) -> Program:
        """Create a complete program template.

        Args:
            name: Program name
            workouts: One dict per training day with ``name``, ``day_of_week``,
                optional ``description`` and ``exercises`` (dicts with
                ``exercise_id``, ``sets``, ``reps``, ``target_rir``,
                ``prescribed_weight``, ``exercise_order``, ``notes``)
            description: Program description (optional)
            goal: Goal the program targets (optional)
            estimated_weeks: Planned length in weeks (optional)

        Returns:
            The created Program with workouts loaded

        Raises:
            ValidationError: On duplicate days, orders or exercises
            NotFoundError: If an exercise does not exist
        """
        days = [w["day_of_week"] for w in workouts]
        if len(days) != len(set(days)):
            raise ValidationError("Each day of the week can hold only one workout", field="day_of_week")

        exercise_ids = {e["exercise_id"] for w in workouts for e in w.get("exercises", [])}
        if exercise_ids:
            result = await self.db.execute(select(Exercise.id).where(Exercise.id.in_(exercise_ids)))
            missing = exercise_ids - set(result.scalars().all())
            if missing:
                raise NotFoundError(f"Exercise not found: {sorted(str(m) for m in missing)[0]}")

        program = Program(
            name=name,
            description=description,
            goal=goal,
            estimated_weeks=estimated_weeks,
        )
        for w in workouts:
            exercises = w.get("exercises", [])
            if len({e["exercise_order"] for e in exercises}) != len(exercises):
                raise ValidationError(f"Duplicate exercise order in '{w['name']}'", field="exercise_order")
            if len({e["exercise_id"] for e in exercises}) != len(exercises):
                raise ValidationError(f"Duplicate exercise in '{w['name']}'", field="exercise_id")

            program.workouts.append(
                ProgramWorkout(
                    name=w["name"],
                    day_of_week=w["day_of_week"],
                    description=w.get("description"),
                    exercises=[
                        ProgramWorkoutExercise(
                            exercise_id=e["exercise_id"],
                            sets=e["sets"],
                            reps=e["reps"],
                            target_rir=e.get("target_rir", 2),
                            prescribed_weight=e.get("prescribed_weight"),
                            exercise_order=e["exercise_order"],
                            notes=e.get("notes"),
                        )
                        for e in exercises
                    ],
                )
            )

        self.db.add(program)
        await self.db.commit()

        logger.info("program_created", program_id=str(program.id), workouts=len(workouts))
        # Reload so the workout/exercise relationships are populated
        self.db.expunge(program)
        return await self.get_program(program.id)

    # Enrolment

    async def get_active_program(self, user_id: uuid.UUID) -> UserProgram | None:
        """Get the user's active enrolment, if any."""
        result = await self.db.execute(
            select(UserProgram).where(
                UserProgram.user_id == user_id,
                UserProgram.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def assign_program(
        self,
        user_id: uuid.UUID,
        program_id: uuid.UUID,
        commit: bool = True,
    ) -> UserProgram:
        """Make a program the user's only active program.

        The previous enrolment is deactivated and the new one inserted in
        the same transaction.

        Args:
            user_id: The user's UUID
            program_id: The program to enrol in
            commit: Commit the transaction; False lets the caller add the
                enrolment to a larger unit of work

        Returns:
            The new active UserProgram

        Raises:
            NotFoundError: If the program does not exist
            StateConflictError: If a concurrent assignment won the race
        """
        program = await self.get_program(program_id)
        if program is None:
            raise NotFoundError("Program not found")

        user_program = UserProgram(
            user_id=user_id,
            program_id=program_id,
            start_date=date.today(),
            is_active=True,
        )

        try:
            await self.db.execute(
                update(UserProgram)
                .where(UserProgram.user_id == user_id, UserProgram.is_active.is_(True))
                .values(is_active=False)
                .execution_options(synchronize_session="fetch")
            )
            self.db.add(user_program)
            await self.db.flush()
            if commit:
                await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning("program_assignment_conflict", user_id=str(user_id), program_id=str(program_id))
            raise StateConflictError("Another program assignment is in progress; retry the request")
        except Exception:
            await self.db.rollback()
            raise

        if commit:
            await self.db.refresh(user_program)
        logger.info("program_assigned", user_id=str(user_id), program_id=str(program_id))
        return user_program

    async def _require_active_program(self, user_id: uuid.UUID) -> UserProgram:
        user_program = await self.get_active_program(user_id)
        if user_program is None:
            raise StateConflictError("No active program; assign a program first")
        return user_program

    async def get_user_program_detail(self, user: User) -> dict[str, Any]:
        """Get the active program with a suggested weight per exercise.

        Returns:
            Dict with ``user_program``, ``program`` and ``workouts``; each
            workout holds its exercises paired with ``suggested_weight``

        Raises:
            StateConflictError: If the user has no active program
        """
        user_program = await self._require_active_program(user.id)
        program = user_program.program

        workouts = []
        for workout in program.workouts:
            weights = await self.suggest_weights(user, workout.id)
            workouts.append({
                "program_workout": workout,
                "exercises": [
                    {"program_exercise": pwe, "suggested_weight": weights.get(pwe.id)}
                    for pwe in workout.exercises
                ],
            })

        return {
            "user_program": user_program,
            "program": program,
            "workouts": workouts,
        }

    # Progression

    def _initial_weight_for(self, user: User, pwe: ProgramWorkoutExercise) -> float:
        modifier = exercise_modifier(pwe.exercise.slug, pwe.exercise.load_modifier)
        return initial_weight(
            body_weight=user.weight,
            sex=user.sex,
            age=user.age,
            modifier=modifier,
            prescribed_weight=pwe.prescribed_weight,
        )

    async def calculate_initial_weights(
        self,
        user: User,
        program_id: uuid.UUID,
    ) -> dict[uuid.UUID, float]:
        """Estimate starting weights for every exercise of a program.

        Args:
            user: The user whose body metrics drive the estimate
            program_id: The program's UUID

        Returns:
            Program workout exercise id to weight

        Raises:
            NotFoundError: If the program does not exist
        """
        program = await self.get_program(program_id)
        if program is None:
            raise NotFoundError("Program not found")

        return {
            pwe.id: self._initial_weight_for(user, pwe)
            for workout in program.workouts
            for pwe in workout.exercises
        }

    async def _get_program_workout(self, program_workout_id: uuid.UUID) -> ProgramWorkout:
        result = await self.db.execute(
            select(ProgramWorkout).where(ProgramWorkout.id == program_workout_id)
        )
        workout = result.scalar_one_or_none()
        if workout is None:
            raise NotFoundError("Program workout not found")
        return workout

    async def _last_completed_session(
        self,
        user_id: uuid.UUID,
        program_workout_id: uuid.UUID,
    ) -> WorkoutSession | None:
        result = await self.db.execute(
            select(WorkoutSession)
            .join(UserProgram, WorkoutSession.user_program_id == UserProgram.id)
            .where(
                UserProgram.user_id == user_id,
                WorkoutSession.program_workout_id == program_workout_id,
                WorkoutSession.completed_at.is_not(None),
            )
            .order_by(WorkoutSession.completed_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _latest_logged_weight(
        self,
        user_id: uuid.UUID,
        program_workout_exercise_id: uuid.UUID,
    ) -> float | None:
        result = await self.db.execute(
            select(WorkoutExerciseLog.weight_used)
            .join(WorkoutSession, WorkoutExerciseLog.workout_id == WorkoutSession.id)
            .join(UserProgram, WorkoutSession.user_program_id == UserProgram.id)
            .where(
                UserProgram.user_id == user_id,
                WorkoutExerciseLog.program_workout_exercise_id == program_workout_exercise_id,
                WorkoutExerciseLog.weight_used.is_not(None),
            )
            .order_by(WorkoutSession.completed_at.desc(), WorkoutExerciseLog.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def calculate_next_weights(
        self,
        user: User,
        program_workout_id: uuid.UUID,
    ) -> dict[uuid.UUID, float]:
        """Adjust last session's weights by the reported reps in reserve.

        The previous weight is the log's ``weight_used``, else the latest
        weight the user logged for that exercise, else the initial estimate.

        Args:
            user: The user
            program_workout_id: The program workout to progress

        Returns:
            Program workout exercise id to next weight

        Raises:
            NoPriorDataError: If the user has never completed this workout
        """
        session = await self._last_completed_session(user.id, program_workout_id)
        if session is None:
            raise NoPriorDataError("No completed session for this workout yet")

        weights: dict[uuid.UUID, float] = {}
        for log in session.logs:
            pwe = log.program_workout_exercise

            previous = log.weight_used
            if previous is None:
                previous = await self._latest_logged_weight(user.id, pwe.id)
            if previous is None:
                previous = self._initial_weight_for(user, pwe)
                logger.info("progression_from_estimate", user_id=str(user.id), program_exercise_id=str(pwe.id))

            multiplier = adjustment_multiplier(pwe.target_rir, average_rir(log.actual_rir))
            weights[pwe.id] = next_weight(previous, multiplier)

        return weights

    async def suggest_weights(
        self,
        user: User,
        program_workout_id: uuid.UUID,
    ) -> dict[uuid.UUID, float]:
        """Next weights when the workout was done before, initial estimates otherwise."""
        workout = await self._get_program_workout(program_workout_id)
        initial = {pwe.id: self._initial_weight_for(user, pwe) for pwe in workout.exercises}

        try:
            progressed = await self.calculate_next_weights(user, program_workout_id)
        except NoPriorDataError:
            return initial

        # Exercises skipped last time keep their estimate
        return {**initial, **progressed}

    # Sessions

    async def start_session(self, user_id: uuid.UUID, program_workout_id: uuid.UUID) -> WorkoutSession:
        """Open a session for a workout of the user's active program.

        Raises:
            StateConflictError: If the user has no active program
            NotFoundError: If the workout is not part of the active program
        """
        user_program = await self._require_active_program(user_id)

        workout = await self._get_program_workout(program_workout_id)
        if workout.program_id != user_program.program_id:
            raise NotFoundError("Workout is not part of the active program")

        session = WorkoutSession(
            user_program_id=user_program.id,
            program_workout_id=workout.id,
            started_at=datetime.now(timezone.utc),
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session, attribute_names=["logs"])

        logger.info("session_started", user_id=str(user_id), session_id=str(session.id))
        return session

    async def get_session(self, user_id: uuid.UUID, session_id: uuid.UUID) -> WorkoutSession:
        """Get a session owned by the user.

        Raises:
            NotFoundError: If the session does not exist or belongs to someone else
        """
        result = await self.db.execute(
            select(WorkoutSession)
            .join(UserProgram, WorkoutSession.user_program_id == UserProgram.id)
            .where(WorkoutSession.id == session_id, UserProgram.user_id == user_id)
        )
        session = result.scalar_one_or_none()
        if session is None:
            raise NotFoundError("Workout session not found")
        return session

    async def complete_session(
        self,
        user: User,
        session_id: uuid.UUID,
        logs: list[dict[str, Any]],
        notes: str | None = None,
    ) -> WorkoutSession:
        """Record the performed sets and close the session.

        Args:
            user: The session owner
            session_id: The session's UUID
            logs: One dict per exercise with ``program_workout_exercise_id``,
                ``actual_reps``, ``actual_rir`` and optional ``weight_used``
            notes: Free-form notes (optional)

        Returns:
            The completed session with its logs

        Raises:
            NotFoundError: If the session is not the user's
            StateConflictError: If the session is already completed
            ValidationError: If a log is malformed or targets a foreign exercise
        """
        session = await self.get_session(user.id, session_id)
        if session.is_completed:
            raise StateConflictError("Workout session is already completed")

        workout = await self._get_program_workout(session.program_workout_id)
        exercise_ids = {pwe.id for pwe in workout.exercises}

        seen: set[uuid.UUID] = set()
        for entry in logs:
            pwe_id = entry["program_workout_exercise_id"]
            if pwe_id not in exercise_ids:
                raise ValidationError(
                    f"Exercise {pwe_id} is not part of this workout",
                    field="program_workout_exercise_id",
                )
            if pwe_id in seen:
                raise ValidationError(f"Exercise {pwe_id} logged twice", field="program_workout_exercise_id")
            seen.add(pwe_id)

            reps, rir = entry["actual_reps"], entry["actual_rir"]
            if not reps or len(reps) != len(rir):
                raise ValidationError(
                    "actual_reps and actual_rir must be non-empty and of equal length",
                    field="actual_rir",
                )

        suggested: dict[uuid.UUID, float] = {}
        if any(entry.get("weight_used") is None for entry in logs):
            suggested = await self.suggest_weights(user, workout.id)

        try:
            for entry in logs:
                pwe_id = entry["program_workout_exercise_id"]
                weight_used = entry.get("weight_used")
                if weight_used is None:
                    weight_used = suggested.get(pwe_id)
                self.db.add(
                    WorkoutExerciseLog(
                        workout_id=session.id,
                        program_workout_exercise_id=pwe_id,
                        actual_reps=list(entry["actual_reps"]),
                        actual_rir=list(entry["actual_rir"]),
                        weight_used=weight_used,
                    )
                )

            session.completed_at = datetime.now(timezone.utc)
            if notes is not None:
                session.notes = notes
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(session, attribute_names=["logs"])
        logger.info(
            "session_completed",
            user_id=str(user.id),
            session_id=str(session.id),
            exercises=len(logs),
        )
        return session

    async def get_history(self, user_id: uuid.UUID, limit: int = DEFAULT_HISTORY_LIMIT) -> list[WorkoutSession]:
        """Sessions of the active program, newest first.

        A limit outside 1-100 falls back to 10.

        Raises:
            StateConflictError: If the user has no active program
        """
        if limit < 1 or limit > MAX_HISTORY_LIMIT:
            limit = DEFAULT_HISTORY_LIMIT

        user_program = await self._require_active_program(user_id)
        result = await self.db.execute(
            select(WorkoutSession)
            .where(WorkoutSession.user_program_id == user_program.id)
            .order_by(WorkoutSession.started_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

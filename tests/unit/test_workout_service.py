"""Tests for custom workout business logic."""
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.core.exceptions import NotFoundError, StateConflictError, ValidationError
from yoked.domains.workouts.models import WorkoutType
from yoked.domains.workouts.service import SESSIONS_PER_WEEK, WorkoutService


class TestCreateWorkout:
    """Tests for create_workout."""

    async def test_create_workout(self, db_session: AsyncSession, sample_user):
        service = WorkoutService(db_session)

        workout = await service.create_workout(sample_user.id, "  Push Pull Legs ", "hypertrophy", 8)

        assert workout.name == "Push Pull Legs"
        assert workout.type == WorkoutType.HYPERTROPHY
        assert workout.duration_weeks == 8
        assert workout.completed is False
        assert workout.days == []

    @pytest.mark.parametrize(
        "name,workout_type,weeks",
        [
            ("", "hypertrophy", 8),
            ("Plan", "yoga_battle", 8),
            ("Plan", "strength", 0),
            ("Plan", "strength", 53),
        ],
    )
    async def test_invalid_input_rejected(self, db_session: AsyncSession, sample_user, name, workout_type, weeks):
        with pytest.raises(ValidationError):
            await WorkoutService(db_session).create_workout(sample_user.id, name, workout_type, weeks)


class TestGenerateWorkout:
    """Tests for generate_workout."""

    @pytest.mark.parametrize("workout_type", [t.value for t in WorkoutType])
    async def test_day_count_matches_schedule(self, db_session: AsyncSession, sample_user, workout_type):
        """A plan has weeks times sessions-per-week days."""
        workout = await WorkoutService(db_session).generate_workout(sample_user, workout_type, 2)

        assert len(workout.days) == 2 * SESSIONS_PER_WEEK[WorkoutType(workout_type)]

    async def test_days_cycle_through_week(self, db_session: AsyncSession, sample_user):
        """Endurance for 2 weeks: 10 days cycling 1..7 then 1..3."""
        workout = await WorkoutService(db_session).generate_workout(sample_user, "endurance", 2)

        assert [d.day for d in workout.days] == [1, 2, 3, 4, 5, 6, 7, 1, 2, 3]
        assert [d.sequence for d in workout.days] == list(range(1, 11))
        assert all(not d.completed for d in workout.days)

    async def test_name_includes_user(self, db_session: AsyncSession, sample_user):
        workout = await WorkoutService(db_session).generate_workout(sample_user, "strength", 4)

        assert workout.name == f"4-Week strength Program for {sample_user.name}"

    async def test_invalid_duration(self, db_session: AsyncSession, sample_user):
        with pytest.raises(ValidationError):
            await WorkoutService(db_session).generate_workout(sample_user, "strength", 60)


class TestListWorkouts:
    """Tests for list_workouts and get_current_workout."""

    async def test_pagination(self, db_session: AsyncSession, sample_user):
        service = WorkoutService(db_session)
        for i in range(5):
            await service.create_workout(sample_user.id, f"Plan {i}", "strength", 4)

        items, total = await service.list_workouts(sample_user.id, page=2, limit=2)

        assert total == 5
        assert len(items) == 2

    async def test_invalid_paging_falls_back(self, db_session: AsyncSession, sample_user):
        """page < 1 becomes 1 and an out-of-range limit becomes 20."""
        service = WorkoutService(db_session)
        for i in range(3):
            await service.create_workout(sample_user.id, f"Plan {i}", "strength", 4)

        items, total = await service.list_workouts(sample_user.id, page=0, limit=500)

        assert total == 3
        assert len(items) == 3

    async def test_only_own_workouts(self, db_session: AsyncSession, sample_user, other_user):
        service = WorkoutService(db_session)
        await service.create_workout(other_user.id, "Not mine", "strength", 4)

        items, total = await service.list_workouts(sample_user.id)

        assert items == []
        assert total == 0

    async def test_deleted_workouts_hidden(self, db_session: AsyncSession, sample_user):
        service = WorkoutService(db_session)
        workout = await service.create_workout(sample_user.id, "Plan", "strength", 4)

        await service.delete_workout(sample_user.id, workout.id)

        assert (await service.list_workouts(sample_user.id))[1] == 0
        with pytest.raises(NotFoundError):
            await service.get_workout(sample_user.id, workout.id)

    async def test_current_workout_skips_completed(self, db_session: AsyncSession, sample_user):
        service = WorkoutService(db_session)
        open_plan = await service.create_workout(sample_user.id, "Open", "strength", 4)
        done = await service.create_workout(sample_user.id, "Done", "strength", 4)
        await service.update_workout(sample_user.id, done.id, completed=True)

        current = await service.get_current_workout(sample_user.id)

        assert current.id == open_plan.id


class TestUpdateWorkout:
    """Tests for update_workout."""

    async def test_partial_update(self, db_session: AsyncSession, sample_user):
        service = WorkoutService(db_session)
        workout = await service.create_workout(sample_user.id, "Plan", "strength", 4)

        updated = await service.update_workout(sample_user.id, workout.id, duration_weeks=6)

        assert updated.duration_weeks == 6
        assert updated.name == "Plan"
        assert updated.type == WorkoutType.STRENGTH

    async def test_other_users_workout_not_found(self, db_session: AsyncSession, sample_user, other_user):
        """Workouts of other users behave as missing."""
        service = WorkoutService(db_session)
        workout = await service.create_workout(other_user.id, "Theirs", "strength", 4)

        with pytest.raises(NotFoundError):
            await service.update_workout(sample_user.id, workout.id, name="Mine now")


class TestWorkoutDays:
    """Tests for day creation and the day lifecycle."""

    async def test_create_day_appends_in_order(self, db_session: AsyncSession, sample_user):
        service = WorkoutService(db_session)
        workout = await service.create_workout(sample_user.id, "Plan", "strength", 4)

        await service.create_day(sample_user.id, workout.id, 5)
        await service.create_day(sample_user.id, workout.id, 2)

        days = await service.list_days(sample_user.id, workout.id)
        assert [d.day for d in days] == [5, 2]
        assert [d.sequence for d in days] == [1, 2]

    @pytest.mark.parametrize("day", [0, 8])
    async def test_day_out_of_range(self, db_session: AsyncSession, sample_user, day):
        service = WorkoutService(db_session)
        workout = await service.create_workout(sample_user.id, "Plan", "strength", 4)

        with pytest.raises(ValidationError):
            await service.create_day(sample_user.id, workout.id, day)

    async def test_start_then_complete(self, db_session: AsyncSession, sample_user):
        service = WorkoutService(db_session)
        workout = await service.generate_workout(sample_user, "strength", 1)
        day_id = workout.days[0].id

        started = await service.start_day(sample_user.id, day_id)
        assert started.started_at is not None

        completed = await service.complete_day(sample_user.id, day_id)
        assert completed.completed is True

    async def test_start_completed_day_conflicts(self, db_session: AsyncSession, sample_user):
        """A completed day cannot be started again."""
        service = WorkoutService(db_session)
        workout = await service.generate_workout(sample_user, "strength", 1)
        day_id = workout.days[0].id
        await service.complete_day(sample_user.id, day_id)

        with pytest.raises(StateConflictError):
            await service.start_day(sample_user.id, day_id)

    async def test_unknown_day(self, db_session: AsyncSession, sample_user):
        with pytest.raises(NotFoundError):
            await WorkoutService(db_session).start_day(sample_user.id, uuid.uuid4())


class TestDayExercises:
    """Tests for log_exercise and update_exercise."""

    async def test_log_exercise(self, db_session: AsyncSession, sample_user):
        service = WorkoutService(db_session)
        workout = await service.generate_workout(sample_user, "strength", 1)
        day_id = workout.days[0].id

        exercise = await service.log_exercise(sample_user.id, day_id, "Front Squat", sets=4, reps=6, weight=70.0)

        assert exercise.day_id == day_id
        exercises = await service.list_day_exercises(sample_user.id, day_id)
        assert [e.name for e in exercises] == ["Front Squat"]

    async def test_exercises_keep_logging_order(self, db_session: AsyncSession, sample_user):
        """Exercises logged within the same second reload in the order they were logged."""
        service = WorkoutService(db_session)
        user_id = sample_user.id
        workout = await service.generate_workout(sample_user, "strength", 1)
        day_id = workout.days[0].id
        names = ["Squat", "Bench Press", "Row", "Curl", "Pushdown"]
        for name in names:
            await service.log_exercise(user_id, day_id, name, sets=3, reps=8)

        db_session.expunge_all()
        exercises = await service.list_day_exercises(user_id, day_id)

        assert [e.name for e in exercises] == names
        assert [e.position for e in exercises] == [1, 2, 3, 4, 5]

    @pytest.mark.parametrize(
        "sets,reps,weight",
        [(0, 5, 50.0), (21, 5, 50.0), (3, 0, 50.0), (3, 101, 50.0), (3, 5, -1.0), (3, 5, 1000.5)],
    )
    async def test_bounds(self, db_session: AsyncSession, sample_user, sets, reps, weight):
        service = WorkoutService(db_session)
        workout = await service.generate_workout(sample_user, "strength", 1)

        with pytest.raises(ValidationError):
            await service.log_exercise(sample_user.id, workout.days[0].id, "Squat", sets, reps, weight)

    async def test_update_validates_merged_values(self, db_session: AsyncSession, sample_user):
        """Only given fields change and the result must stay in range."""
        service = WorkoutService(db_session)
        workout = await service.generate_workout(sample_user, "strength", 1)
        exercise = await service.log_exercise(sample_user.id, workout.days[0].id, "Squat", 3, 5, 100.0)

        updated = await service.update_exercise(sample_user.id, exercise.id, weight=102.5, completed=True)
        assert updated.weight == 102.5
        assert updated.sets == 3
        assert updated.completed is True

        with pytest.raises(ValidationError):
            await service.update_exercise(sample_user.id, exercise.id, reps=0)

    async def test_other_users_exercise_not_found(self, db_session: AsyncSession, sample_user, other_user):
        service = WorkoutService(db_session)
        workout = await service.generate_workout(other_user, "strength", 1)
        exercise = await service.log_exercise(other_user.id, workout.days[0].id, "Squat", 3, 5, 100.0)

        with pytest.raises(NotFoundError):
            await service.get_exercise(sample_user.id, exercise.id)

"""Tests for ProgramService: assignment, sessions and progression."""
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.core.exceptions import NoPriorDataError, NotFoundError, StateConflictError, ValidationError
from yoked.domains.programs.models import UserProgram, WorkoutSession
from yoked.domains.programs.service import ProgramService


async def _active_count(db: AsyncSession, user_id: uuid.UUID) -> int:
    return await db.scalar(
        select(func.count(UserProgram.id)).where(
            UserProgram.user_id == user_id,
            UserProgram.is_active.is_(True),
        )
    )


async def _complete_day_one(
    service: ProgramService,
    user,
    program: dict[str, Any],
    bench_rir: list[int],
    squat_rir: list[int],
    bench_weight: float | None = None,
    squat_weight: float | None = None,
) -> WorkoutSession:
    session = await service.start_session(user.id, program["day_one"].id)
    return await service.complete_session(
        user,
        session.id,
        logs=[
            {
                "program_workout_exercise_id": program["bench"].id,
                "actual_reps": [8] * len(bench_rir),
                "actual_rir": bench_rir,
                "weight_used": bench_weight,
            },
            {
                "program_workout_exercise_id": program["squat"].id,
                "actual_reps": [8] * len(squat_rir),
                "actual_rir": squat_rir,
                "weight_used": squat_weight,
            },
        ],
    )


class TestAssignProgram:
    """Tests for assign_program."""

    async def test_assign_creates_active_enrolment(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """Assigning a program makes it the active one."""
        service = ProgramService(db_session)

        user_program = await service.assign_program(sample_user.id, sample_program["program"].id)

        assert user_program.is_active is True
        assert user_program.program_id == sample_program["program"].id
        active = await service.get_active_program(sample_user.id)
        assert active.id == user_program.id

    async def test_reassign_leaves_exactly_one_active(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
        second_program,
    ):
        """Switching programs deactivates the previous enrolment."""
        service = ProgramService(db_session)

        first = await service.assign_program(sample_user.id, sample_program["program"].id)
        second = await service.assign_program(sample_user.id, second_program.id)

        assert await _active_count(db_session, sample_user.id) == 1
        await db_session.refresh(first)
        assert first.is_active is False
        assert (await service.get_active_program(sample_user.id)).id == second.id

    async def test_reassign_same_program_twice(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """Re-assigning the same program still leaves a single active row."""
        service = ProgramService(db_session)

        await service.assign_program(sample_user.id, sample_program["program"].id)
        await service.assign_program(sample_user.id, sample_program["program"].id)

        assert await _active_count(db_session, sample_user.id) == 1

    async def test_unknown_program_raises_not_found(self, db_session: AsyncSession, sample_user):
        """Assigning a missing program fails without touching enrolments."""
        service = ProgramService(db_session)

        with pytest.raises(NotFoundError):
            await service.assign_program(sample_user.id, uuid.uuid4())

        assert await _active_count(db_session, sample_user.id) == 0

    async def test_failed_assignment_keeps_previous_program(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """A failed switch leaves the current program active."""
        service = ProgramService(db_session)
        current = await service.assign_program(sample_user.id, sample_program["program"].id)

        with pytest.raises(NotFoundError):
            await service.assign_program(sample_user.id, uuid.uuid4())

        active = await service.get_active_program(sample_user.id)
        assert active is not None
        assert active.id == current.id

    async def test_second_active_row_rejected_by_index(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
        second_program,
    ):
        """The store refuses two active enrolments for one user."""
        db_session.add(UserProgram(
            user_id=sample_user.id, program_id=sample_program["program"].id,
            start_date=date.today(), is_active=True,
        ))
        await db_session.commit()

        db_session.add(UserProgram(
            user_id=sample_user.id, program_id=second_program.id,
            start_date=date.today(), is_active=True,
        ))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()


class TestInitialWeights:
    """Tests for calculate_initial_weights."""

    async def test_weights_for_every_exercise(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """Each program exercise gets an estimate; prescribed weights win."""
        service = ProgramService(db_session)

        weights = await service.calculate_initial_weights(sample_user, sample_program["program"].id)

        assert weights == {
            sample_program["bench"].id: 57.5,   # 57.6 * 1.0
            sample_program["squat"].id: 70.0,   # 57.6 * 1.2 = 69.12
            sample_program["curl"].id: 20.0,    # prescribed
            sample_program["fly"].id: 30.0,     # 57.6 * 0.5 default modifier
        }

    async def test_catalogue_modifier_overrides_table(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
        sample_exercises: dict[str, Any],
    ):
        """A load_modifier on the exercise row beats the built-in table."""
        sample_exercises["bench_press"].load_modifier = 0.5
        await db_session.commit()

        weights = await ProgramService(db_session).calculate_initial_weights(
            sample_user, sample_program["program"].id
        )

        assert weights[sample_program["bench"].id] == 30.0

    async def test_unknown_program(self, db_session: AsyncSession, sample_user):
        with pytest.raises(NotFoundError):
            await ProgramService(db_session).calculate_initial_weights(sample_user, uuid.uuid4())


class TestSessions:
    """Tests for start_session, complete_session and get_history."""

    async def test_start_requires_active_program(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """Without an active program a session cannot start."""
        with pytest.raises(StateConflictError):
            await ProgramService(db_session).start_session(sample_user.id, sample_program["day_one"].id)

    async def test_start_rejects_foreign_workout(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
        second_program,
    ):
        """The workout must belong to the active program."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, second_program.id)

        with pytest.raises(NotFoundError):
            await service.start_session(sample_user.id, sample_program["day_one"].id)

    async def test_complete_defaults_weight_to_suggestion(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """A log without weight_used records the suggested weight."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)

        session = await _complete_day_one(
            service, sample_user, sample_program, bench_rir=[2, 2, 2], squat_rir=[2, 2, 2], squat_weight=80.0
        )

        assert session.completed_at is not None
        weights = {log.program_workout_exercise_id: log.weight_used for log in session.logs}
        assert weights[sample_program["bench"].id] == 57.5
        assert weights[sample_program["squat"].id] == 80.0

    async def test_complete_twice_conflicts(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """A completed session cannot be completed again."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)
        session = await _complete_day_one(
            service, sample_user, sample_program, bench_rir=[2], squat_rir=[2]
        )

        with pytest.raises(StateConflictError):
            await service.complete_session(sample_user, session.id, logs=[])

    async def test_complete_rejects_mismatched_arrays(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """Reps and RIR arrays must have the same length."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)
        session = await service.start_session(sample_user.id, sample_program["day_one"].id)

        with pytest.raises(ValidationError):
            await service.complete_session(
                sample_user,
                session.id,
                logs=[{
                    "program_workout_exercise_id": sample_program["bench"].id,
                    "actual_reps": [8, 8, 8],
                    "actual_rir": [2, 2],
                }],
            )

        refreshed = await service.get_session(sample_user.id, session.id)
        assert refreshed.completed_at is None

    async def test_complete_rejects_exercise_from_other_workout(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)
        session = await service.start_session(sample_user.id, sample_program["day_one"].id)

        with pytest.raises(ValidationError):
            await service.complete_session(
                sample_user,
                session.id,
                logs=[{
                    "program_workout_exercise_id": sample_program["curl"].id,
                    "actual_reps": [12],
                    "actual_rir": [1],
                }],
            )

    async def test_session_of_other_user_not_found(
        self,
        db_session: AsyncSession,
        sample_user,
        other_user,
        sample_program: dict[str, Any],
    ):
        """Sessions are only visible to their owner."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)
        session = await service.start_session(sample_user.id, sample_program["day_one"].id)

        with pytest.raises(NotFoundError):
            await service.complete_session(other_user, session.id, logs=[])

    async def test_history_newest_first_and_limit_fallback(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """History is ordered newest first; invalid limits fall back to 10."""
        service = ProgramService(db_session)
        user_program = await service.assign_program(sample_user.id, sample_program["program"].id)

        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for i in range(12):
            db_session.add(WorkoutSession(
                user_program_id=user_program.id,
                program_workout_id=sample_program["day_one"].id,
                started_at=base + timedelta(days=i),
            ))
        await db_session.commit()

        history = await service.get_history(sample_user.id, limit=0)
        assert len(history) == 10
        assert history[0].started_at > history[-1].started_at

        assert len(await service.get_history(sample_user.id, limit=3)) == 3
        assert len(await service.get_history(sample_user.id, limit=500)) == 10

    async def test_history_requires_active_program(self, db_session: AsyncSession, sample_user):
        with pytest.raises(StateConflictError):
            await ProgramService(db_session).get_history(sample_user.id)


class TestNextWeights:
    """Tests for calculate_next_weights and suggest_weights."""

    async def test_no_prior_session(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """Without a completed session there is no data to progress from."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)

        with pytest.raises(NoPriorDataError):
            await service.calculate_next_weights(sample_user, sample_program["day_one"].id)

    async def test_unfinished_session_is_not_prior_data(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """Only completed sessions count."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)
        await service.start_session(sample_user.id, sample_program["day_one"].id)

        with pytest.raises(NoPriorDataError):
            await service.calculate_next_weights(sample_user, sample_program["day_one"].id)

    async def test_progresses_from_persisted_weight(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """Easy sets raise the lifted weight, hard sets lower it."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)
        await _complete_day_one(
            service,
            sample_user,
            sample_program,
            bench_rir=[4, 4, 4],
            squat_rir=[0, 0, 0],
            bench_weight=60.0,
            squat_weight=100.0,
        )

        weights = await service.calculate_next_weights(sample_user, sample_program["day_one"].id)

        assert weights[sample_program["bench"].id] == 65.0   # 60 * 1.10 = 66 -> 65
        assert weights[sample_program["squat"].id] == 90.0   # 100 * 0.90

    async def test_uses_most_recent_session(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """The latest completed session drives the next weights."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)

        first = await _complete_day_one(
            service, sample_user, sample_program,
            bench_rir=[2, 2, 2], squat_rir=[2, 2, 2], bench_weight=50.0, squat_weight=50.0,
        )
        first.completed_at = datetime.now(timezone.utc) - timedelta(days=3)
        await db_session.commit()

        await _complete_day_one(
            service, sample_user, sample_program,
            bench_rir=[2, 2, 2], squat_rir=[3, 3, 3], bench_weight=70.0, squat_weight=100.0,
        )

        weights = await service.calculate_next_weights(sample_user, sample_program["day_one"].id)

        assert weights[sample_program["bench"].id] == 70.0
        assert weights[sample_program["squat"].id] == 105.0

    async def test_missing_weight_falls_back_to_last_logged(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """A log without weight_used uses the user's latest logged weight."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)

        first = await _complete_day_one(
            service, sample_user, sample_program,
            bench_rir=[2], squat_rir=[2], bench_weight=80.0, squat_weight=120.0,
        )
        first.completed_at = datetime.now(timezone.utc) - timedelta(days=3)
        second = await _complete_day_one(
            service, sample_user, sample_program,
            bench_rir=[2], squat_rir=[2], bench_weight=82.5, squat_weight=120.0,
        )
        for log in second.logs:
            if log.program_workout_exercise_id == sample_program["bench"].id:
                log.weight_used = None
        await db_session.commit()

        weights = await service.calculate_next_weights(sample_user, sample_program["day_one"].id)

        assert weights[sample_program["bench"].id] == 80.0

    async def test_missing_weight_without_history_uses_estimate(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """With no logged weight at all the initial estimate is the base."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)
        session = await _complete_day_one(
            service, sample_user, sample_program, bench_rir=[4, 4, 4], squat_rir=[2, 2, 2]
        )
        for log in session.logs:
            log.weight_used = None
        await db_session.commit()

        weights = await service.calculate_next_weights(sample_user, sample_program["day_one"].id)

        assert weights[sample_program["bench"].id] == 62.5   # 57.5 * 1.10 = 63.25
        assert weights[sample_program["squat"].id] == 70.0

    async def test_suggest_weights_falls_back_to_initial(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        """Without history suggestions are the initial estimates."""
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)

        weights = await service.suggest_weights(sample_user, sample_program["day_three"].id)

        assert weights == {sample_program["curl"].id: 20.0, sample_program["fly"].id: 30.0}

    async def test_program_detail_carries_suggestions(
        self,
        db_session: AsyncSession,
        sample_user,
        sample_program: dict[str, Any],
    ):
        service = ProgramService(db_session)
        await service.assign_program(sample_user.id, sample_program["program"].id)

        detail = await service.get_user_program_detail(sample_user)

        assert detail["program"].id == sample_program["program"].id
        assert [w["program_workout"].day_of_week for w in detail["workouts"]] == [1, 3]
        day_one = detail["workouts"][0]["exercises"]
        assert [e["suggested_weight"] for e in day_one] == [57.5, 70.0]

    async def test_program_detail_requires_active_program(self, db_session: AsyncSession, sample_user):
        with pytest.raises(StateConflictError):
            await ProgramService(db_session).get_user_program_detail(sample_user)

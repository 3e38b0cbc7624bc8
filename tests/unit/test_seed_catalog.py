"""Tests for the catalogue seed and the startup hook."""
from contextlib import asynccontextmanager
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.core.exceptions import StateConflictError, ValidationError
from yoked.domains.programs.models import Exercise, Program, ProgramWorkout, UserProgram
from yoked.domains.programs.service import ProgramService
from yoked.main import seed_catalog_if_empty
from yoked.scripts.seed_catalog import EXERCISES, STARTER_PROGRAM, seed_catalog


async def _count(db_session: AsyncSession, model) -> int:
    return await db_session.scalar(select(func.count(model.id)))


class TestSeedCatalog:
    """Tests for seed_catalog."""

    async def test_empty_database_is_seeded(self, db_session: AsyncSession):
        count = await seed_catalog(db_session)

        assert count == len(EXERCISES) == 10
        assert await _count(db_session, Exercise) == 10

        programs = await ProgramService(db_session).list_programs()
        assert [p.name for p in programs] == [STARTER_PROGRAM["name"]]
        assert [w.day_of_week for w in programs[0].workouts] == [1, 3, 5]

    async def test_starter_program_uses_catalogue_exercises(self, db_session: AsyncSession):
        await seed_catalog(db_session)

        program = (await ProgramService(db_session).list_programs())[0]
        slugs = {e["slug"] for e in EXERCISES}
        for workout in program.workouts:
            assert len(workout.exercises) == 4
            for exercise in workout.exercises:
                assert exercise.exercise.slug in slugs

    async def test_second_call_is_a_no_op(self, db_session: AsyncSession):
        await seed_catalog(db_session)

        assert await seed_catalog(db_session) == 0
        assert await _count(db_session, Exercise) == 10
        assert await _count(db_session, Program) == 1

    async def test_clear_replaces_unused_catalogue(self, db_session: AsyncSession):
        await seed_catalog(db_session)
        old_program = (await ProgramService(db_session).list_programs())[0]

        count = await seed_catalog(db_session, clear_existing=True)

        assert count == 10
        assert await _count(db_session, Exercise) == 10
        assert await _count(db_session, ProgramWorkout) == 3
        programs = await ProgramService(db_session).list_programs()
        assert len(programs) == 1
        assert programs[0].id != old_program.id

    async def test_clear_refused_while_users_are_enrolled(self, db_session: AsyncSession, sample_user):
        """Enrolments and their history survive a clear request."""
        await seed_catalog(db_session)
        service = ProgramService(db_session)
        program = (await service.list_programs())[0]
        await service.assign_program(sample_user.id, program.id)

        with pytest.raises(StateConflictError):
            await seed_catalog(db_session, clear_existing=True)

        assert await _count(db_session, UserProgram) == 1
        assert await service.get_program(program.id) is not None
        detail = await service.get_user_program_detail(sample_user)
        assert detail["program"].id == program.id

    async def test_failed_program_leaves_catalogue_empty(self, db_session: AsyncSession):
        """Exercises and the starter program are stored together or not at all."""
        with patch.object(
            ProgramService, "create_program", side_effect=ValidationError("bad program")
        ):
            with pytest.raises(ValidationError):
                await seed_catalog(db_session)
        await db_session.rollback()

        assert await _count(db_session, Exercise) == 0
        assert await seed_catalog(db_session) == 10


class TestStartupSeed:
    """Tests for the SEED_CATALOG startup hook."""

    async def test_seeds_empty_database(self, db_session: AsyncSession):
        @asynccontextmanager
        async def session_factory():
            yield db_session

        with patch("yoked.config.database.AsyncSessionLocal", session_factory):
            await seed_catalog_if_empty()
            await seed_catalog_if_empty()

        assert await _count(db_session, Exercise) == 10
        assert await _count(db_session, Program) == 1

"""Test configuration and fixtures for Yoked API."""

import uuid
from collections.abc import AsyncGenerator
from datetime import timedelta
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from yoked.config.database import Base, get_db
from yoked.core.redis import use_memory_fallback
from yoked.core.security import TokenConfig, TokenService, hash_password
from yoked.main import create_app

# Test database URL - use SQLite in-memory for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_TOKEN_CONFIG = TokenConfig(
    secret_key="test-secret-key-with-enough-length-for-hs256",
    issuer="yoked-api",
    expire_delta=timedelta(days=7),
)

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for tests."""
    return "asyncio"


@pytest.fixture(autouse=True)
def memory_blacklist():
    """Keep revoked tokens in memory instead of Redis."""
    use_memory_fallback()
    yield


@pytest.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )

    # Import all models to register them
    from yoked.domains import models  # noqa: F401

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def token_service() -> TokenService:
    """Token service sharing the test app's signing config."""
    return TokenService(TEST_TOKEN_CONFIG)


@pytest.fixture(scope="function")
async def client(test_engine, db_session) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""
    app = create_app(token_config=TEST_TOKEN_CONFIG)

    # Override the database dependency
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


async def make_user(
    db_session: AsyncSession,
    *,
    name: str = "Test User",
    is_admin: bool = False,
    **overrides: Any,
):
    """Insert a user with sensible body metrics."""
    from yoked.domains.users.models import ActivityLevel, FitnessGoal, Sex, User

    user_id = uuid.uuid4()
    fields = {
        "email": f"test-{user_id}@example.com",
        "password_hash": hash_password(TEST_PASSWORD),
        "age": 30,
        "sex": Sex.MALE,
        "height": 180.0,
        "weight": 80.0,
        "activity_level": ActivityLevel.MODERATELY_ACTIVE,
        "goal": FitnessGoal.MUSCLE_GAIN,
        "weekly_budget": 0.0,
        "is_active": True,
    }
    fields.update(overrides)

    user = User(id=user_id, name=name, is_admin=is_admin, **fields)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def sample_user(db_session: AsyncSession):
    """Create a sample user: male, 30 years, 80 kg."""
    return await make_user(db_session)


@pytest.fixture
async def other_user(db_session: AsyncSession):
    """Create a second user for ownership checks."""
    return await make_user(db_session, name="Other User", sex="female", age=45, weight=60.0)


@pytest.fixture
async def admin_user(db_session: AsyncSession):
    """Create an administrator."""
    return await make_user(db_session, name="Admin User", is_admin=True)


@pytest.fixture
def auth_headers(sample_user, token_service: TokenService) -> dict[str, str]:
    """Bearer headers for the sample user."""
    issued = token_service.create_access_token(str(sample_user.id), email=sample_user.email)
    return {"Authorization": f"Bearer {issued.token}"}


@pytest.fixture
def other_auth_headers(other_user, token_service: TokenService) -> dict[str, str]:
    """Bearer headers for the second user."""
    issued = token_service.create_access_token(str(other_user.id), email=other_user.email)
    return {"Authorization": f"Bearer {issued.token}"}


@pytest.fixture
def admin_headers(admin_user, token_service: TokenService) -> dict[str, str]:
    """Bearer headers for the administrator."""
    issued = token_service.create_access_token(str(admin_user.id), email=admin_user.email)
    return {"Authorization": f"Bearer {issued.token}"}


@pytest.fixture
async def sample_exercises(db_session: AsyncSession) -> dict[str, Any]:
    """Catalogue exercises keyed by slug.

    ``cable_fly`` has no modifier and is not in the built-in table.
    """
    from yoked.domains.programs.models import Exercise

    exercises = {
        "bench_press": Exercise(name="Bench Press", slug="bench_press", primary_muscle_group="chest"),
        "squat": Exercise(name="Back Squat", slug="squat", primary_muscle_group="quadriceps"),
        "bicep_curl": Exercise(name="Bicep Curl", slug="bicep_curl", primary_muscle_group="biceps"),
        "cable_fly": Exercise(name="Cable Fly", slug="cable_fly", primary_muscle_group="chest"),
    }
    db_session.add_all(exercises.values())
    await db_session.commit()
    return exercises


@pytest.fixture
async def sample_program(db_session: AsyncSession, sample_exercises: dict[str, Any]) -> dict[str, Any]:
    """Two-day program.

    Day 1: bench press and squat (target RIR 2).
    Day 3: bicep curl with a prescribed 20 kg, and cable fly.
    """
    from yoked.domains.programs.models import Program, ProgramWorkout, ProgramWorkoutExercise

    bench = ProgramWorkoutExercise(
        exercise=sample_exercises["bench_press"], sets=3, reps=8, target_rir=2, exercise_order=1
    )
    squat = ProgramWorkoutExercise(
        exercise=sample_exercises["squat"], sets=3, reps=8, target_rir=2, exercise_order=2
    )
    curl = ProgramWorkoutExercise(
        exercise=sample_exercises["bicep_curl"], sets=3, reps=12, target_rir=1,
        prescribed_weight=20.0, exercise_order=1,
    )
    fly = ProgramWorkoutExercise(
        exercise=sample_exercises["cable_fly"], sets=3, reps=12, target_rir=1, exercise_order=2
    )
    day_one = ProgramWorkout(name="Day 1: Lower & Press", day_of_week=1, exercises=[bench, squat])
    day_three = ProgramWorkout(name="Day 3: Arms", day_of_week=3, exercises=[curl, fly])
    program = Program(
        name="Test Program",
        description="A test program",
        goal="muscle_gain",
        estimated_weeks=8,
        workouts=[day_one, day_three],
    )
    db_session.add(program)
    await db_session.commit()

    return {
        "program": program,
        "day_one": day_one,
        "day_three": day_three,
        "bench": bench,
        "squat": squat,
        "curl": curl,
        "fly": fly,
    }


@pytest.fixture
async def second_program(db_session: AsyncSession, sample_exercises: dict[str, Any]):
    """A one-day program to switch to."""
    from yoked.domains.programs.models import Program, ProgramWorkout, ProgramWorkoutExercise

    program = Program(
        name="Second Program",
        goal="strength",
        workouts=[
            ProgramWorkout(
                name="Day 1: Squat",
                day_of_week=1,
                exercises=[
                    ProgramWorkoutExercise(
                        exercise=sample_exercises["squat"], sets=5, reps=5, target_rir=2, exercise_order=1
                    )
                ],
            )
        ],
    )
    db_session.add(program)
    await db_session.commit()
    return program

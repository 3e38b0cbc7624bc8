"""Custom workout endpoints."""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.config.database import get_db
from yoked.core.exceptions import NotFoundError, StateConflictError, ValidationError
from yoked.domains.auth.dependencies import CurrentUser
from yoked.domains.workouts.schemas import (
    DayExerciseCreate,
    DayExerciseResponse,
    DayExerciseUpdate,
    WorkoutCreate,
    WorkoutDayCreate,
    WorkoutDayResponse,
    WorkoutDayUpdate,
    WorkoutGenerate,
    WorkoutListItem,
    WorkoutListResponse,
    WorkoutResponse,
    WorkoutUpdate,
)
from yoked.domains.workouts.service import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, WorkoutService

router = APIRouter()


def _not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


def _invalid(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)


# Workouts

@router.post("", response_model=WorkoutResponse, status_code=status.HTTP_201_CREATED)
async def create_workout(
    request: WorkoutCreate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkoutResponse:
    """Create an empty custom workout."""
    try:
        workout = await WorkoutService(db).create_workout(
            user_id=current_user.id,
            name=request.name,
            workout_type=request.type,
            duration_weeks=request.duration_weeks,
        )
    except ValidationError as e:
        raise _invalid(e)

    return WorkoutResponse.model_validate(workout)


@router.get("", response_model=WorkoutListResponse)
async def list_workouts(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> WorkoutListResponse:
    """List the current user's workouts.

    Out-of-range paging values fall back to page 1 and 20 items.
    """
    workouts, total = await WorkoutService(db).list_workouts(current_user.id, page=page, limit=limit)

    return WorkoutListResponse(
        items=[WorkoutListItem.model_validate(w) for w in workouts],
        total=total,
        page=max(page, 1),
        limit=limit if 1 <= limit <= MAX_PAGE_SIZE else DEFAULT_PAGE_SIZE,
    )


@router.get("/current", response_model=WorkoutResponse)
async def get_current_workout(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkoutResponse:
    """Get the newest workout the user has not completed."""
    workout = await WorkoutService(db).get_current_workout(current_user.id)
    if workout is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No workout in progress",
        )

    return WorkoutResponse.model_validate(workout)


@router.post("/generate", response_model=WorkoutResponse, status_code=status.HTTP_201_CREATED)
async def generate_workout(
    request: WorkoutGenerate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkoutResponse:
    """Generate a multi-week plan for the current user."""
    try:
        workout = await WorkoutService(db).generate_workout(
            current_user,
            workout_type=request.type,
            duration_weeks=request.duration_weeks,
        )
    except ValidationError as e:
        raise _invalid(e)

    return WorkoutResponse.model_validate(workout)


# Days

@router.put("/days/{day_id}", response_model=WorkoutDayResponse)
async def update_day(
    day_id: UUID,
    request: WorkoutDayUpdate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkoutDayResponse:
    """Update a workout day."""
    try:
        day = await WorkoutService(db).update_day(
            current_user.id,
            day_id,
            day=request.day,
            completed=request.completed,
        )
    except NotFoundError as e:
        raise _not_found(e)
    except ValidationError as e:
        raise _invalid(e)

    return WorkoutDayResponse.model_validate(day)


@router.post("/days/{day_id}/start", response_model=WorkoutDayResponse)
async def start_day(
    day_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkoutDayResponse:
    """Start a workout day."""
    try:
        day = await WorkoutService(db).start_day(current_user.id, day_id)
    except NotFoundError as e:
        raise _not_found(e)
    except StateConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return WorkoutDayResponse.model_validate(day)


@router.post("/days/{day_id}/complete", response_model=WorkoutDayResponse)
async def complete_day(
    day_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkoutDayResponse:
    """Mark a workout day as completed."""
    try:
        day = await WorkoutService(db).complete_day(current_user.id, day_id)
    except NotFoundError as e:
        raise _not_found(e)

    return WorkoutDayResponse.model_validate(day)


@router.get("/days/{day_id}/exercises", response_model=list[DayExerciseResponse])
async def list_day_exercises(
    day_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[DayExerciseResponse]:
    """List exercises logged on a day."""
    try:
        exercises = await WorkoutService(db).list_day_exercises(current_user.id, day_id)
    except NotFoundError as e:
        raise _not_found(e)

    return [DayExerciseResponse.model_validate(e) for e in exercises]


@router.post(
    "/days/{day_id}/exercises",
    response_model=DayExerciseResponse,
    status_code=status.HTTP_201_CREATED,
)
async def log_exercise(
    day_id: UUID,
    request: DayExerciseCreate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DayExerciseResponse:
    """Log an exercise on a day."""
    try:
        exercise = await WorkoutService(db).log_exercise(
            current_user.id,
            day_id,
            name=request.name,
            sets=request.sets,
            reps=request.reps,
            weight=request.weight,
            completed=request.completed,
        )
    except NotFoundError as e:
        raise _not_found(e)
    except ValidationError as e:
        raise _invalid(e)

    return DayExerciseResponse.model_validate(exercise)


# Exercises

@router.get("/exercises/{exercise_id}", response_model=DayExerciseResponse)
async def get_exercise(
    exercise_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DayExerciseResponse:
    """Get a logged exercise."""
    try:
        exercise = await WorkoutService(db).get_exercise(current_user.id, exercise_id)
    except NotFoundError as e:
        raise _not_found(e)

    return DayExerciseResponse.model_validate(exercise)


@router.put("/exercises/{exercise_id}", response_model=DayExerciseResponse)
async def update_exercise(
    exercise_id: UUID,
    request: DayExerciseUpdate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DayExerciseResponse:
    """Update a logged exercise."""
    try:
        exercise = await WorkoutService(db).update_exercise(
            current_user.id,
            exercise_id,
            **request.model_dump(exclude_unset=True),
        )
    except NotFoundError as e:
        raise _not_found(e)
    except ValidationError as e:
        raise _invalid(e)

    return DayExerciseResponse.model_validate(exercise)


# Single workout

@router.get("/{workout_id}", response_model=WorkoutResponse)
async def get_workout(
    workout_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkoutResponse:
    """Get a workout with its days."""
    try:
        workout = await WorkoutService(db).get_workout(current_user.id, workout_id)
    except NotFoundError as e:
        raise _not_found(e)

    return WorkoutResponse.model_validate(workout)


@router.put("/{workout_id}", response_model=WorkoutResponse)
async def update_workout(
    workout_id: UUID,
    request: WorkoutUpdate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkoutResponse:
    """Update a workout."""
    try:
        workout = await WorkoutService(db).update_workout(
            current_user.id,
            workout_id,
            name=request.name,
            workout_type=request.type,
            duration_weeks=request.duration_weeks,
            completed=request.completed,
        )
    except NotFoundError as e:
        raise _not_found(e)
    except ValidationError as e:
        raise _invalid(e)

    return WorkoutResponse.model_validate(workout)


@router.delete("/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workout(
    workout_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a workout."""
    try:
        await WorkoutService(db).delete_workout(current_user.id, workout_id)
    except NotFoundError as e:
        raise _not_found(e)


@router.get("/{workout_id}/days", response_model=list[WorkoutDayResponse])
async def list_days(
    workout_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[WorkoutDayResponse]:
    """List the days of a workout in plan order."""
    try:
        days = await WorkoutService(db).list_days(current_user.id, workout_id)
    except NotFoundError as e:
        raise _not_found(e)

    return [WorkoutDayResponse.model_validate(d) for d in days]


@router.post(
    "/{workout_id}/days",
    response_model=WorkoutDayResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_day(
    workout_id: UUID,
    request: WorkoutDayCreate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkoutDayResponse:
    """Add a day to a workout."""
    try:
        day = await WorkoutService(db).create_day(current_user.id, workout_id, request.day)
    except NotFoundError as e:
        raise _not_found(e)
    except ValidationError as e:
        raise _invalid(e)

    return WorkoutDayResponse.model_validate(day)

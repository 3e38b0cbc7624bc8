"""Exercise catalogue endpoints."""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.config.database import get_db
from yoked.core.exceptions import StateConflictError
from yoked.domains.auth.dependencies import AdminUser
from yoked.domains.programs.schemas import ExerciseCreate, ExerciseResponse
from yoked.domains.programs.service import ProgramService

exercises_router = APIRouter()


@exercises_router.get("", response_model=list[ExerciseResponse])
async def list_exercises(
    db: Annotated[AsyncSession, Depends(get_db)],
    muscle_group: Annotated[str | None, Query(max_length=100)] = None,
) -> list[ExerciseResponse]:
    """List catalogue exercises."""
    exercises = await ProgramService(db).list_exercises(muscle_group=muscle_group)
    return [ExerciseResponse.model_validate(e) for e in exercises]


@exercises_router.post("", response_model=ExerciseResponse, status_code=status.HTTP_201_CREATED)
async def create_exercise(
    request: ExerciseCreate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ExerciseResponse:
    """Add an exercise to the catalogue (administrators only)."""
    try:
        exercise = await ProgramService(db).create_exercise(**request.model_dump())
    except StateConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return ExerciseResponse.model_validate(exercise)


@exercises_router.get("/{exercise_id}", response_model=ExerciseResponse)
async def get_exercise(
    exercise_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ExerciseResponse:
    """Get a catalogue exercise."""
    exercise = await ProgramService(db).get_exercise(exercise_id)
    if exercise is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Exercise not found",
        )

    return ExerciseResponse.model_validate(exercise)

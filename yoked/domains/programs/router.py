"""Program catalogue and enrolment endpoints."""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.config.database import get_db
from yoked.core.exceptions import NoPriorDataError, NotFoundError, StateConflictError, ValidationError
from yoked.domains.auth.dependencies import AdminUser, CurrentUser
from yoked.domains.programs.schemas import (
    AssignProgramRequest,
    ProgramCreate,
    ProgramDetailResponse,
    ProgramResponse,
    UserProgramDetailResponse,
    UserProgramResponse,
    WeightsResponse,
)
from yoked.domains.programs.service import ProgramService

router = APIRouter()


@router.get("", response_model=list[ProgramResponse])
async def list_programs(
    db: Annotated[AsyncSession, Depends(get_db)],
    goal: Annotated[str | None, Query(max_length=100)] = None,
) -> list[ProgramResponse]:
    """List programs, optionally filtered by goal."""
    programs = await ProgramService(db).list_programs(goal=goal)
    return [ProgramResponse.model_validate(p) for p in programs]


@router.post("", response_model=ProgramDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_program(
    request: ProgramCreate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProgramDetailResponse:
    """Create a program template (administrators only)."""
    try:
        program = await ProgramService(db).create_program(
            name=request.name,
            description=request.description,
            goal=request.goal,
            estimated_weeks=request.estimated_weeks,
            workouts=[w.model_dump() for w in request.workouts],
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)

    return ProgramDetailResponse.model_validate(program)


@router.get("/me", response_model=UserProgramDetailResponse)
async def get_my_program(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserProgramDetailResponse:
    """Get the active program with the weight to use for each exercise."""
    try:
        detail = await ProgramService(db).get_user_program_detail(current_user)
    except StateConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return UserProgramDetailResponse.model_validate(detail)


@router.post("/assign", response_model=UserProgramResponse, status_code=status.HTTP_201_CREATED)
async def assign_program(
    request: AssignProgramRequest,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserProgramResponse:
    """Enrol the current user in a program, replacing the active one."""
    try:
        user_program = await ProgramService(db).assign_program(current_user.id, request.program_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except StateConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return UserProgramResponse.model_validate(user_program)


@router.get("/workouts/{program_workout_id}/next-weights", response_model=WeightsResponse)
async def get_next_weights(
    program_workout_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WeightsResponse:
    """Weights for the next session, adjusted by last session's RIR."""
    try:
        weights = await ProgramService(db).calculate_next_weights(current_user, program_workout_id)
    except NoPriorDataError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No prior data: {e.message}",
        )

    return WeightsResponse(weights=weights)


@router.get("/{program_id}", response_model=ProgramDetailResponse)
async def get_program(
    program_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProgramDetailResponse:
    """Get program details with workouts and exercises."""
    program = await ProgramService(db).get_program(program_id)
    if program is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Program not found",
        )

    return ProgramDetailResponse.model_validate(program)


@router.get("/{program_id}/initial-weights", response_model=WeightsResponse)
async def get_initial_weights(
    program_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WeightsResponse:
    """Starting weights for every exercise, estimated from the user's body metrics."""
    try:
        weights = await ProgramService(db).calculate_initial_weights(current_user, program_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    return WeightsResponse(weights=weights)

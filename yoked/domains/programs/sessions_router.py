"""Program workout session endpoints."""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.config.database import get_db
from yoked.core.exceptions import NotFoundError, StateConflictError, ValidationError
from yoked.domains.auth.dependencies import CurrentUser
from yoked.domains.programs.schemas import SessionComplete, SessionResponse, SessionStart
from yoked.domains.programs.service import DEFAULT_HISTORY_LIMIT, ProgramService

sessions_router = APIRouter()


@sessions_router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    request: SessionStart,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionResponse:
    """Start a session for a workout of the active program."""
    try:
        session = await ProgramService(db).start_session(current_user.id, request.program_workout_id)
    except StateConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    return SessionResponse.model_validate(session)


@sessions_router.get("/history", response_model=list[SessionResponse])
async def get_history(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[SessionResponse]:
    """Sessions of the active program, newest first.

    A limit outside 1-100 falls back to the default.
    """
    try:
        sessions = await ProgramService(db).get_history(current_user.id, limit=limit)
    except StateConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return [SessionResponse.model_validate(s) for s in sessions]


@sessions_router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionResponse:
    """Get one of the current user's sessions."""
    try:
        session = await ProgramService(db).get_session(current_user.id, session_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    return SessionResponse.model_validate(session)


@sessions_router.post("/{session_id}/complete", response_model=SessionResponse)
async def complete_session(
    session_id: UUID,
    request: SessionComplete,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionResponse:
    """Log performed sets and complete the session.

    Omitted ``weight_used`` values default to the suggested weight.
    """
    try:
        session = await ProgramService(db).complete_session(
            current_user,
            session_id,
            logs=[e.model_dump() for e in request.exercises],
            notes=request.notes,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except StateConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)

    return SessionResponse.model_validate(session)

"""Authentication router with database integration."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.config.database import get_db
from yoked.core.exceptions import NotFoundError, StateConflictError
from yoked.domains.auth.dependencies import CurrentToken, CurrentUser, TokenServiceDep
from yoked.domains.auth.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from yoked.domains.auth.service import AuthService

router = APIRouter()


def _token_response(issued) -> TokenResponse:
    return TokenResponse(access_token=issued.token, expires_at=issued.expires_at)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    token_service: TokenServiceDep,
) -> AuthResponse:
    """Register a new user.

    When ``program_id`` is given the user is enrolled in that program in
    the same transaction.
    """
    auth_service = AuthService(db, token_service)

    try:
        user = await auth_service.create_user(
            email=request.email,
            password=request.password,
            name=request.name,
            age=request.age,
            sex=request.sex,
            height=request.height,
            weight=request.weight,
            activity_level=request.activity_level,
            goal=request.goal,
            weekly_budget=request.weekly_budget,
            program_id=request.program_id,
        )
    except StateConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=_token_response(auth_service.generate_token(user)),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    token_service: TokenServiceDep,
) -> AuthResponse:
    """Authenticate user and return a token."""
    auth_service = AuthService(db, token_service)

    user = await auth_service.authenticate_user(
        email=request.email,
        password=request.password,
    )

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=_token_response(auth_service.generate_token(user)),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    current_user: CurrentUser,
    token_data: CurrentToken,
    db: Annotated[AsyncSession, Depends(get_db)],
    token_service: TokenServiceDep,
) -> TokenResponse:
    """Exchange a valid token for a fresh one; the old token is revoked."""
    issued = await AuthService(db, token_service).refresh_token(current_user, token_data)
    return _token_response(issued)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token_data: CurrentToken,
    db: Annotated[AsyncSession, Depends(get_db)],
    token_service: TokenServiceDep,
) -> None:
    """Logout by revoking the presented token."""
    await AuthService(db, token_service).logout(token_data)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: CurrentUser,
) -> UserResponse:
    """Get current authenticated user information."""
    return UserResponse.model_validate(current_user)

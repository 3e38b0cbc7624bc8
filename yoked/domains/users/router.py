"""User router with profile, preferences and stats endpoints."""
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.config.database import get_db
from yoked.core.exceptions import AuthenticationError, ValidationError
from yoked.domains.auth.dependencies import CurrentUser
from yoked.domains.users.schemas import (
    PasswordChangeRequest,
    UserPreferencesResponse,
    UserPreferencesUpdate,
    UserProfileResponse,
    UserStatsResponse,
)
from yoked.domains.users.service import UserService

router = APIRouter()


@router.get("/me", response_model=UserProfileResponse)
async def get_profile(
    current_user: CurrentUser,
) -> UserProfileResponse:
    """Get current user's profile."""
    return UserProfileResponse.model_validate(current_user)


@router.put("/me", response_model=UserProfileResponse)
async def update_profile(
    updates: Annotated[dict[str, Any], Body()],
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserProfileResponse:
    """Update current user's profile.

    Fields with an invalid type or an out-of-range value are ignored;
    the remaining fields are applied.
    """
    user = await UserService(db).update_profile(current_user, updates)
    return UserProfileResponse.model_validate(user)


@router.get("/me/preferences", response_model=UserPreferencesResponse)
async def get_preferences(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserPreferencesResponse:
    """Get current user's preferences."""
    prefs = await UserService(db).get_preferences(current_user)
    return UserPreferencesResponse.model_validate(prefs)


@router.put("/me/preferences", response_model=UserPreferencesResponse)
async def update_preferences(
    request: UserPreferencesUpdate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserPreferencesResponse:
    """Replace current user's preference lists."""
    try:
        prefs = await UserService(db).update_preferences(
            current_user,
            preferences=request.preferences,
            allergies=request.allergies,
            dislikes=request.dislikes,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.message,
        )

    return UserPreferencesResponse.model_validate(prefs)


@router.put("/me/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    request: PasswordChangeRequest,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Change current user's password."""
    try:
        await UserService(db).change_password(
            current_user,
            current_password=request.current_password,
            new_password=request.new_password,
        )
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.message,
        )


@router.get("/me/stats", response_model=UserStatsResponse)
async def get_stats(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserStatsResponse:
    """Get training statistics for the current user."""
    stats = await UserService(db).get_stats(current_user)
    return UserStatsResponse(**stats)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete the current user's account.

    The row is kept with ``deleted_at`` set; the account can no longer log in.
    """
    await UserService(db).delete_account(current_user)

"""Authentication dependencies for FastAPI routes."""
import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.config.database import get_db
from yoked.core.observability import set_user_context
from yoked.core.redis import TokenBlacklist
from yoked.core.security import TokenData, TokenService
from yoked.domains.users.models import User
from yoked.domains.users.service import UserService

security = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    """Return the TokenService built at startup."""
    return request.app.state.token_service


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


async def get_token_data(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token_service: TokenServiceDep,
) -> TokenData:
    """Validate the bearer token and return its claims.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or revoked
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = token_service.decode_token(credentials.credentials)
    if token_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if await TokenBlacklist.is_blacklisted(token_data.token_id):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return token_data


CurrentToken = Annotated[TokenData, Depends(get_token_data)]


async def get_current_user(
    token_data: CurrentToken,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user.

    Raises:
        HTTPException: 401 if the user no longer exists, 403 if deactivated
    """
    try:
        user_id = uuid.UUID(token_data.user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject",
        )

    user = await UserService(db).get_user_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    set_user_context(str(user.id), user.email)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def get_current_admin(current_user: CurrentUser) -> User:
    """Require an administrator."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator privileges required",
        )
    return current_user


AdminUser = Annotated[User, Depends(get_current_admin)]

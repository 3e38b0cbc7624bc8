"""Authentication service with database operations."""
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.core.exceptions import StateConflictError
from yoked.core.redis import TokenBlacklist
from yoked.core.security import IssuedToken, TokenData, TokenService, hash_password, verify_password
from yoked.domains.programs.service import ProgramService
from yoked.domains.users.models import User, UserPreferences

logger = logging.getLogger(__name__)


class AuthService:
    """Service for handling authentication operations."""

    def __init__(self, db: AsyncSession, token_service: TokenService):
        self.db = db
        self.token_service = token_service

    async def get_user_by_email(self, email: str) -> User | None:
        """Get a user by email address.

        Args:
            email: The user's email

        Returns:
            The User object if found, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def create_user(
        self,
        email: str,
        password: str,
        name: str,
        age: int,
        sex: str,
        height: float,
        weight: float,
        activity_level: str,
        goal: str,
        weekly_budget: float = 0.0,
        program_id: uuid.UUID | None = None,
    ) -> User:
        """Create a new user, optionally enrolled in a program.

        The user, its empty preferences and the enrolment are committed
        together; if any step fails nothing is stored.

        Args:
            email: User's email
            password: Plain text password
            name: User's display name
            age: Age in years
            sex: male, female or other
            height: Height in cm
            weight: Body weight in kg
            activity_level: Self-reported activity level
            goal: Training goal
            weekly_budget: Weekly budget (optional)
            program_id: Program to enrol in (optional)

        Returns:
            The created User object

        Raises:
            StateConflictError: If the email is already registered
            NotFoundError: If the program does not exist
        """
        if await self.get_user_by_email(email):
            raise StateConflictError("Email is already registered")

        user = User(
            email=email.lower(),
            password_hash=hash_password(password),
            name=name,
            age=age,
            sex=sex,
            height=height,
            weight=weight,
            activity_level=activity_level,
            goal=goal,
            weekly_budget=weekly_budget,
            is_active=True,
        )

        try:
            self.db.add(user)
            await self.db.flush()  # Get the user ID

            self.db.add(UserPreferences(user_id=user.id, preferences=[], allergies=[], dislikes=[]))

            if program_id is not None:
                await ProgramService(self.db).assign_program(user.id, program_id, commit=False)

            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise StateConflictError("Email is already registered")
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(user)
        logger.info(f"User registered: {user.id}")
        return user

    async def authenticate_user(
        self,
        email: str,
        password: str,
    ) -> User | None:
        """Authenticate a user by email and password.

        Args:
            email: User's email
            password: Plain text password

        Returns:
            The User object if authentication succeeds, None otherwise
        """
        user = await self.get_user_by_email(email)
        if not user or user.is_deleted:
            return None

        if not verify_password(password, user.password_hash):
            return None

        return user

    def generate_token(self, user: User) -> IssuedToken:
        """Issue an access token for a user."""
        return self.token_service.create_access_token(str(user.id), email=user.email)

    async def refresh_token(self, user: User, token_data: TokenData) -> IssuedToken:
        """Re-issue a token and revoke the one presented."""
        await self.revoke(token_data)
        return self.generate_token(user)

    async def revoke(self, token_data: TokenData) -> None:
        """Blacklist a token until its natural expiry."""
        remaining = token_data.expires_at - datetime.now(timezone.utc)
        await TokenBlacklist.add_to_blacklist(token_data.token_id, int(remaining.total_seconds()) + 1)

    async def logout(self, token_data: TokenData) -> None:
        """Logout by revoking the presented token."""
        await self.revoke(token_data)
        logger.info(f"User logged out: {token_data.user_id}")

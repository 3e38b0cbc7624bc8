"""User service with database operations."""
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.core.exceptions import AuthenticationError, ValidationError
from yoked.core.security import hash_password, verify_password
from yoked.domains.programs.models import UserProgram, WorkoutSession
from yoked.domains.users.models import (
    AGE_RANGE,
    HEIGHT_RANGE,
    WEIGHT_RANGE,
    ActivityLevel,
    FitnessGoal,
    User,
    UserPreferences,
)

logger = structlog.get_logger(__name__)

MAX_PREFERENCES = 50
MAX_ALLERGIES = 20
MAX_DISLIKES = 30
MIN_PASSWORD_LENGTH = 8


def _is_number(value: Any) -> bool:
    # bool is an int subclass; never accept it as a number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _in_range(value: float, bounds: tuple[float, float]) -> bool:
    return bounds[0] <= value <= bounds[1]


class UserService:
    """Service for handling user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: uuid.UUID) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's UUID

        Returns:
            The User object if found and not deleted, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> User | None:
        """Get a user by email.

        Args:
            email: The user's email

        Returns:
            The User object if found and not deleted, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.email == email.lower(), User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def update_profile(self, user: User, updates: dict[str, Any]) -> User:
        """Apply a partial profile update.

        Each field is checked on its own. A value with the wrong type or
        outside its range is dropped while the other fields of the same
        update are still applied. Unknown keys are ignored.

        Args:
            user: The User object to update
            updates: Field name to raw value mapping

        Returns:
            The updated User object
        """
        ignored: list[str] = []

        for key, value in updates.items():
            if key == "weight":
                if _is_number(value) and _in_range(value, WEIGHT_RANGE):
                    user.weight = float(value)
                    continue
            elif key == "height":
                if _is_number(value) and _in_range(value, HEIGHT_RANGE):
                    user.height = float(value)
                    continue
            elif key == "age":
                if isinstance(value, int) and not isinstance(value, bool) and _in_range(value, AGE_RANGE):
                    user.age = value
                    continue
            elif key == "goal":
                if isinstance(value, str) and value in FitnessGoal._value2member_map_:
                    user.goal = FitnessGoal(value)
                    continue
            elif key == "activity_level":
                if isinstance(value, str) and value in ActivityLevel._value2member_map_:
                    user.activity_level = ActivityLevel(value)
                    continue
            elif key == "weekly_budget":
                if _is_number(value) and value >= 0:
                    user.weekly_budget = float(value)
                    continue
            elif key == "name":
                if isinstance(value, str) and value.strip():
                    user.name = value.strip()[:100]
                    continue
            ignored.append(key)

        if ignored:
            logger.info("profile_fields_ignored", user_id=str(user.id), fields=sorted(ignored))

        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def change_password(
        self,
        user: User,
        current_password: str,
        new_password: str,
    ) -> None:
        """Change the user's password.

        Args:
            user: The User object
            current_password: Password currently on file
            new_password: Replacement password

        Raises:
            AuthenticationError: If the current password does not match
            ValidationError: If the new password is too short
        """
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="new_password",
            )

        user.password_hash = hash_password(new_password)
        await self.db.commit()

    async def get_preferences(self, user: User) -> UserPreferences:
        """Get the user's preferences, creating an empty row on first access."""
        result = await self.db.execute(
            select(UserPreferences).where(UserPreferences.user_id == user.id)
        )
        prefs = result.scalar_one_or_none()

        if prefs is None:
            prefs = UserPreferences(user_id=user.id, preferences=[], allergies=[], dislikes=[])
            self.db.add(prefs)
            await self.db.commit()
            await self.db.refresh(prefs)

        return prefs

    async def update_preferences(
        self,
        user: User,
        preferences: list[str] | None = None,
        allergies: list[str] | None = None,
        dislikes: list[str] | None = None,
    ) -> UserPreferences:
        """Replace preference lists.

        Args:
            user: The User object
            preferences: New preferences list (optional)
            allergies: New allergies list (optional)
            dislikes: New dislikes list (optional)

        Returns:
            The updated UserPreferences object

        Raises:
            ValidationError: If a list exceeds its maximum size
        """
        if preferences is not None and len(preferences) > MAX_PREFERENCES:
            raise ValidationError(f"too many preferences (max {MAX_PREFERENCES})", field="preferences")
        if allergies is not None and len(allergies) > MAX_ALLERGIES:
            raise ValidationError(f"too many allergies (max {MAX_ALLERGIES})", field="allergies")
        if dislikes is not None and len(dislikes) > MAX_DISLIKES:
            raise ValidationError(f"too many dislikes (max {MAX_DISLIKES})", field="dislikes")

        prefs = await self.get_preferences(user)

        if preferences is not None:
            prefs.preferences = list(preferences)
        if allergies is not None:
            prefs.allergies = list(allergies)
        if dislikes is not None:
            prefs.dislikes = list(dislikes)

        await self.db.commit()
        await self.db.refresh(prefs)
        return prefs

    async def get_stats(self, user: User) -> dict[str, Any]:
        """Compute training statistics from the user's completed sessions.

        Returns:
            Dict with completed_sessions, workouts_completed, total_weight_lifted,
            current_streak, longest_streak and last_workout_date
        """
        result = await self.db.execute(
            select(WorkoutSession)
            .join(UserProgram, WorkoutSession.user_program_id == UserProgram.id)
            .where(
                UserProgram.user_id == user.id,
                WorkoutSession.completed_at.is_not(None),
            )
            .order_by(WorkoutSession.completed_at)
        )
        sessions = list(result.scalars().all())

        total_weight = 0.0
        for session in sessions:
            for log in session.logs:
                if log.weight_used:
                    total_weight += sum(log.actual_reps) * log.weight_used

        days = sorted({s.completed_at.date() for s in sessions})
        current_streak, longest_streak = _streaks(days, datetime.now(timezone.utc).date())

        return {
            "completed_sessions": len(sessions),
            "workouts_completed": len({s.program_workout_id for s in sessions}),
            "total_weight_lifted": round(total_weight, 2),
            "current_streak": current_streak,
            "longest_streak": longest_streak,
            "last_workout_date": days[-1] if days else None,
        }

    async def delete_account(self, user: User) -> None:
        """Soft-delete the user and deactivate the account."""
        user.deleted_at = datetime.now(timezone.utc)
        user.is_active = False
        await self.db.commit()
        logger.info("account_deleted", user_id=str(user.id))


def _streaks(days: list[date], today: date) -> tuple[int, int]:
    """Return (current, longest) runs of consecutive training days.

    The current streak counts only if the last training day is today or
    yesterday.
    """
    if not days:
        return 0, 0

    longest = run = 1
    for prev, cur in zip(days, days[1:]):
        run = run + 1 if cur - prev == timedelta(days=1) else 1
        longest = max(longest, run)

    current = 0
    if today - days[-1] <= timedelta(days=1):
        current = 1
        for prev, cur in zip(reversed(days[:-1]), reversed(days)):
            if cur - prev != timedelta(days=1):
                break
            current += 1

    return current, longest

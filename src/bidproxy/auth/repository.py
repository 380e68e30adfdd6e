"""
User repository for database operations.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bidproxy.auth.models import User, UserRole
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self._session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def create(self, user: User) -> User:
        """Persist a new user."""
        self._session.add(user)
        await self._session.flush()
        await self._session.refresh(user)
        logger.info("Created user", extra={"user_id": user.id, "role": user.role})
        return user

    async def update(self, user: User, **changes: Any) -> User:
        """Apply attribute changes to an existing user."""
        for field, value in changes.items():
            setattr(user, field, value)
        await self._session.flush()
        await self._session.refresh(user)
        return user

    async def get_or_create_from_claims(
        self,
        user_id: str,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> User:
        """Return the user for an authenticated subject, creating it on first sight.

        New accounts start as active, unverified customers. When a concurrent
        request inserts the same subject first, the insert is rolled back to a
        savepoint and the winner's row is returned.
        """
        user = await self.get_by_id(user_id)
        if user is not None:
            return user

        try:
            async with self._session.begin_nested():
                return await self.create(
                    User(
                        id=user_id,
                        email=email,
                        first_name=first_name,
                        last_name=last_name,
                        profile_image_url=profile_image_url,
                        role=UserRole.CUSTOMER.value,
                        is_active=True,
                        is_verified=False,
                    )
                )
        except IntegrityError:
            user = await self.get_by_id(user_id)
            if user is None:
                raise
            logger.info("User created concurrently", extra={"user_id": user_id})
            return user

    async def list_by_role(self, role: UserRole) -> list[User]:
        result = await self._session.execute(
            select(User).where(User.role == role.value).order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def set_active(self, user: User, is_active: bool) -> User:
        """Flip the active flag (soft delete / restore)."""
        return await self.update(user, is_active=is_active)

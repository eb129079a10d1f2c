"""User Directory — lookups over the minimal identity table.

Invariants:
    - Emails are compared and stored lower-cased
    - Duplicate email → DuplicateEmailError (409), enforced by the unique index
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DuplicateEmailError, ResourceNotFoundError
from app.models.user import User

logger = logging.getLogger(__name__)


class UserDirectory:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: UUID) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise ResourceNotFoundError("User", str(user_id))
        return user

    async def list_users(self) -> list[User]:
        """Directory listing, sorted by name then email."""
        result = await self.db.execute(select(User).order_by(User.name, User.email))
        return list(result.scalars().all())

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower()),
        )
        return result.scalar_one_or_none()

    async def create_user(self, name: str, email: str) -> User:
        user = User(name=name, email=email.strip().lower())
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateEmailError(user.email)
        logger.info(f"User created: {user.id}", extra={"user_id": user.id})
        return user

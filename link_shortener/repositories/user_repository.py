"""User Repository for the link shortener service."""

from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from link_shortener.models.user import User
from link_shortener.repositories.base import BaseRepository, DuplicateEntityError, RepositoryError


class UserRepository(BaseRepository[User]):
    """Repository for User model database operations."""

    def __init__(self):
        super().__init__(User)

    async def create_user(self, db: AsyncSession, data: Dict[str, Any]) -> User:
        """
        Insert a new user.

        Raises:
            DuplicateEntityError: If the email or username is already registered
            RepositoryError: On other database errors
        """
        user = self.model_type(**data)
        try:
            db.add(user)
            await db.flush()
            await db.refresh(user)
            return user
        except IntegrityError as e:
            await db.rollback()
            message = str(e.orig)
            field = "email" if "email" in message else "username"
            raise DuplicateEntityError(self.model_type, field, data.get(field)) from e
        except SQLAlchemyError as e:
            await db.rollback()
            raise RepositoryError(f"Database error creating user: {e}") from e

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(self.model_type).where(self.model_type.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error retrieving user by email: {e}") from e

    async def email_exists(self, db: AsyncSession, email: str) -> bool:
        return await self.exists(db, email=email)

    async def username_exists(self, db: AsyncSession, username: str) -> bool:
        return await self.exists(db, username=username)

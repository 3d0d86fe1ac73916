"""Account registration, login and token verification."""

import logging
import uuid
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from link_shortener.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from link_shortener.db.session import db_transaction
from link_shortener.models.user import User
from link_shortener.repositories.base import DuplicateEntityError
from link_shortener.repositories.user_repository import UserRepository
from link_shortener.services.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    UserAlreadyExistsError,
)

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    return create_access_token(user.id, user.username, user.email)


class AuthService:
    """Service for user accounts and access tokens."""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    @db_transaction(db_param_name="db")
    async def register(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str
    ) -> Tuple[User, str]:
        """
        Create an account and issue its first token.

        Raises:
            UserAlreadyExistsError: If the email or username is taken
        """
        if await self.user_repository.email_exists(db, email):
            raise UserAlreadyExistsError("User with this email already exists")
        if await self.user_repository.username_exists(db, username):
            raise UserAlreadyExistsError("User with this username already exists")

        try:
            user = await self.user_repository.create_user(db, {
                "username": username,
                "email": email,
                "password_hash": hash_password(password),
            })
        except DuplicateEntityError as e:
            raise UserAlreadyExistsError(f"User with this {e.field_name} already exists")

        logger.info(f"Registered user {user.id}")
        return user, issue_token(user)

    async def login(self, db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
        """
        Check credentials and issue a token.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong
        """
        user = await self.user_repository.get_by_email(db, email)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials")
        return user, issue_token(user)

    async def get_user_for_token(self, db: AsyncSession, token: str) -> User:
        """
        Resolve the user a token was issued to.

        Raises:
            InvalidTokenError: If the token is invalid or the user no longer exists
        """
        claims = decode_access_token(token)
        try:
            user_id = uuid.UUID(claims["sub"])
        except ValueError as e:
            raise InvalidTokenError("Invalid or expired token") from e

        user = await self.user_repository.get_by_id(db, user_id)
        if user is None:
            raise InvalidTokenError("Invalid or expired token")
        return user

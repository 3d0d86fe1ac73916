"""API dependencies for FastAPI.

This module provides dependency injection functions for FastAPI endpoints
to access database sessions, service instances and the current user.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from link_shortener.core.config import settings
from link_shortener.db.session import get_db
from link_shortener.models.user import User
from link_shortener.repositories.link_repository import LinkRepository
from link_shortener.repositories.user_repository import UserRepository
from link_shortener.services.auth import AuthService
from link_shortener.services.clicks import get_click_tracker
from link_shortener.services.exceptions import InvalidTokenError
from link_shortener.services.links import LinkService

__all__ = [
    "get_link_repository",
    "get_user_repository",
    "get_link_service",
    "get_auth_service",
    "get_click_tracker",
    "get_current_user",
    "get_short_url_base",
]


async def get_link_repository() -> LinkRepository:
    """Get an instance of the link repository."""
    return LinkRepository()


async def get_user_repository() -> UserRepository:
    """Get an instance of the user repository."""
    return UserRepository()


async def get_link_service(
    link_repo: LinkRepository = Depends(get_link_repository),
) -> LinkService:
    """Get an instance of the link service."""
    return LinkService(link_repository=link_repo)


async def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
) -> AuthService:
    """Get an instance of the auth service."""
    return AuthService(user_repository=user_repo)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Resolve the ``Authorization: Bearer <token>`` header to a user."""
    if not authorization:
        raise _unauthorized("Authorization header required")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Invalid authorization header format")

    try:
        return await auth_service.get_user_for_token(db, token.strip())
    except InvalidTokenError:
        raise _unauthorized("Invalid or expired token")


def get_short_url_base() -> str:
    """Get the base that short codes are appended to."""
    return f"{settings.BASE_URL.rstrip('/')}{settings.REDIRECT_PREFIX}"

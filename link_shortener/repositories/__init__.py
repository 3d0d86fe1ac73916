"""Repository layer for database access."""

from link_shortener.repositories.base import (
    BaseRepository,
    DuplicateEntityError,
    EntityNotFoundError,
    RepositoryError,
)
from link_shortener.repositories.link_repository import LinkRepository
from link_shortener.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "LinkRepository",
    "UserRepository",
]

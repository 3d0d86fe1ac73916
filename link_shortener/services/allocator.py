"""Short code allocation.

Codes are either chosen by the caller (an alias) or drawn at random from
the URL-safe base64 alphabet, and are checked against the store before
the link is written.
"""

import base64
import logging
import secrets
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from link_shortener.core.config import settings
from link_shortener.core.validators import validate_alias
from link_shortener.repositories.link_repository import LinkRepository
from link_shortener.services.exceptions import AliasConflictError, ShortCodeExhaustedError

logger = logging.getLogger(__name__)


class ShortCodeAllocator:
    """
    Hand out globally unique short codes.

    The existence check and the later insert are separate steps with no
    lock between them; the unique index on ``links.short_code`` catches
    the rare concurrent collision.

    Args:
        link_repository: Repository used for existence checks
        code_length: Length of generated codes
        max_attempts: Candidates tried before giving up on generation
        token_source: Source of random bytes, ``secrets.token_bytes`` by default
    """

    def __init__(
        self,
        link_repository: LinkRepository,
        code_length: int = settings.SHORT_CODE_LENGTH,
        max_attempts: int = settings.SHORT_CODE_MAX_ATTEMPTS,
        token_source: Callable[[int], bytes] = secrets.token_bytes,
    ):
        if code_length < 1:
            raise ValueError("code_length must be at least 1")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.link_repository = link_repository
        self.code_length = code_length
        self.max_attempts = max_attempts
        self.token_source = token_source

    def generate_code(self) -> str:
        """Draw one random candidate from ``[A-Za-z0-9_-]``."""
        raw = self.token_source(self.code_length)
        return base64.urlsafe_b64encode(raw).decode("ascii")[:self.code_length]

    async def allocate(
        self,
        db: AsyncSession,
        requested_alias: Optional[str] = None,
        current_code: Optional[str] = None,
    ) -> str:
        """
        Return a short code that is free to use.

        Args:
            db: Database session
            requested_alias: Caller-chosen code, validated and used as is
            current_code: The link's own code when updating, never a conflict

        Returns:
            str: The alias or a fresh generated code

        Raises:
            InvalidAliasError: If the alias breaks the format rules
            AliasConflictError: If the alias belongs to another link
            ShortCodeExhaustedError: If every generated candidate was taken
        """
        if requested_alias:
            # Rejected before any lookup
            validate_alias(requested_alias)

            if requested_alias == current_code:
                return requested_alias
            if await self.link_repository.short_code_exists(db, requested_alias):
                raise AliasConflictError(f"Alias '{requested_alias}' is already in use")
            return requested_alias

        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generate_code()
            if not await self.link_repository.short_code_exists(db, candidate):
                return candidate
            logger.debug(f"Generated short code collided on attempt {attempt}")

        logger.error(f"No free short code after {self.max_attempts} attempts")
        raise ShortCodeExhaustedError(
            f"Failed to generate a unique short code after {self.max_attempts} attempts. "
            "Try again later or use a custom alias."
        )

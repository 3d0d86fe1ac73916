"""Link management service.

This module contains the LinkService class which implements the business logic
for creating, reading, updating and deleting a user's links and for resolving
short codes on redirect.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from link_shortener.core.telemetry import get_meter
from link_shortener.core.validators import validate_url
from link_shortener.db.session import db_transaction
from link_shortener.models.base import ensure_utc, utcnow
from link_shortener.models.link import Link
from link_shortener.repositories.base import DuplicateEntityError
from link_shortener.repositories.link_repository import LinkRepository
from link_shortener.services.allocator import ShortCodeAllocator
from link_shortener.services.exceptions import (
    AliasConflictError,
    LinkAccessDeniedError,
    LinkNotFoundError,
    ShortCodeExhaustedError,
)

logger = logging.getLogger(__name__)

meter = get_meter("link_shortener.links")

links_created_counter = meter.create_counter(
    name="link_shortener.links.created",
    description="Number of links created",
    unit="1",
)

UPDATABLE_FIELDS = ("original_url", "title", "active", "expires_at")


class LinkService:
    """
    Service for link business logic.

    Args:
        link_repository: Repository for link data access
        allocator: Short code allocator, built on the same repository by default
    """

    def __init__(
        self,
        link_repository: LinkRepository,
        allocator: Optional[ShortCodeAllocator] = None
    ):
        self.link_repository = link_repository
        self.allocator = allocator or ShortCodeAllocator(link_repository)

    @db_transaction(db_param_name="db")
    async def create_link(
        self,
        db: AsyncSession,
        owner_id: uuid.UUID,
        original_url: str,
        custom_alias: Optional[str] = None,
        title: Optional[str] = None,
        expires_at: Optional[datetime] = None
    ) -> Link:
        """
        Create a link for ``owner_id``.

        Raises:
            InvalidURLError: If the URL is not a valid http(s) URL
            InvalidAliasError: If the alias breaks the format rules
            AliasConflictError: If the alias is already in use
            ShortCodeExhaustedError: If no free generated code was found
        """
        original_url = validate_url(original_url)
        data = {
            "owner_id": owner_id,
            "original_url": original_url,
            "title": title,
            "expires_at": ensure_utc(expires_at) if expires_at else None,
        }

        # A generated code can still lose the race to a concurrent insert
        for _ in range(self.allocator.max_attempts):
            short_code = await self.allocator.allocate(db, requested_alias=custom_alias)
            try:
                link = await self.link_repository.create_link(db, {**data, "short_code": short_code})
            except DuplicateEntityError:
                if custom_alias:
                    raise AliasConflictError(f"Alias '{custom_alias}' is already in use")
                logger.warning(f"Short code {short_code} was taken concurrently, retrying")
                continue

            links_created_counter.add(1, {"custom_alias": bool(custom_alias)})
            logger.info(f"Created link {link.id} with short code {link.short_code}")
            return link

        raise ShortCodeExhaustedError(
            f"Failed to store a unique short code after {self.allocator.max_attempts} attempts"
        )

    async def get_link(self, db: AsyncSession, owner_id: uuid.UUID, link_id: uuid.UUID) -> Link:
        """
        Get one of the owner's links.

        Raises:
            LinkNotFoundError: If no link has this id
            LinkAccessDeniedError: If the link belongs to someone else
        """
        link = await self.link_repository.get_by_id(db, link_id)
        if link is None:
            raise LinkNotFoundError(f"Link {link_id} not found")
        if link.owner_id != owner_id:
            raise LinkAccessDeniedError("Access denied")
        return link

    async def list_links(
        self,
        db: AsyncSession,
        owner_id: uuid.UUID,
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[Link], int]:
        """Return one page of the owner's links, newest first, and the owner's total."""
        links = await self.link_repository.list_by_owner(db, owner_id, limit=limit, offset=offset)
        total = await self.link_repository.count_by_owner(db, owner_id)
        return links, total

    @db_transaction(db_param_name="db")
    async def update_link(
        self,
        db: AsyncSession,
        owner_id: uuid.UUID,
        link_id: uuid.UUID,
        changes: Dict[str, Any]
    ) -> Link:
        """
        Apply the fields present in ``changes`` to one of the owner's links.

        ``custom_alias`` renames the short code through the allocator;
        setting it to the link's current code is a no-op. An explicit
        ``None`` clears ``title`` or ``expires_at``.

        Raises:
            LinkNotFoundError: If no link has this id
            LinkAccessDeniedError: If the link belongs to someone else
            InvalidURLError: If a new URL is not valid
            InvalidAliasError: If a new alias breaks the format rules
            AliasConflictError: If a new alias is already in use
        """
        link = await self.get_link(db, owner_id, link_id)
        current_code = link.short_code

        updates: Dict[str, Any] = {
            field: changes[field] for field in UPDATABLE_FIELDS if field in changes
        }
        if updates.get("original_url") is not None:
            updates["original_url"] = validate_url(updates["original_url"])
        elif "original_url" in updates:
            del updates["original_url"]
        if "active" in updates and updates["active"] is None:
            del updates["active"]
        if updates.get("expires_at") is not None:
            updates["expires_at"] = ensure_utc(updates["expires_at"])

        custom_alias = changes.get("custom_alias")
        if custom_alias:
            short_code = await self.allocator.allocate(
                db,
                requested_alias=custom_alias,
                current_code=current_code
            )
            if short_code != current_code:
                updates["short_code"] = short_code

        try:
            link = await self.link_repository.update_link(db, link, updates)
        except DuplicateEntityError:
            raise AliasConflictError(f"Alias '{custom_alias}' is already in use")

        logger.info(f"Updated link {link_id}")
        return link

    @db_transaction(db_param_name="db")
    async def delete_link(self, db: AsyncSession, owner_id: uuid.UUID, link_id: uuid.UUID) -> None:
        """
        Delete one of the owner's links.

        Raises:
            LinkNotFoundError: If no link has this id
            LinkAccessDeniedError: If the link belongs to someone else
        """
        await self.get_link(db, owner_id, link_id)
        await self.link_repository.delete(db, link_id)
        logger.info(f"Deleted link {link_id}")

    async def resolve_redirect(self, db: AsyncSession, short_code: str) -> Link:
        """
        Find the link a short code redirects to.

        Raises:
            LinkNotFoundError: If the code is unknown, inactive or expired
        """
        now = utcnow()
        link = await self.link_repository.get_active_by_short_code(db, short_code, now=now)
        if link is None or not link.is_resolvable(now):
            raise LinkNotFoundError("Link not found or expired")
        return link

    async def get_stats(self, db: AsyncSession, owner_id: uuid.UUID) -> Dict[str, int]:
        return await self.link_repository.get_owner_stats(db, owner_id)

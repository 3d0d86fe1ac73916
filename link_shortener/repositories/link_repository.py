"""Link Repository for the link shortener service.

This module provides the LinkRepository class for database operations related to Link models.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, case, desc, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from link_shortener.models.base import utcnow
from link_shortener.models.link import Link
from link_shortener.repositories.base import BaseRepository, DuplicateEntityError, RepositoryError


class LinkRepository(BaseRepository[Link]):
    """
    Repository for Link model database operations.

    The unique index on ``short_code`` is the final authority on code
    uniqueness: inserts and updates that violate it raise
    ``DuplicateEntityError`` so callers can retry or report a conflict.
    """

    def __init__(self):
        super().__init__(Link)

    async def create_link(self, db: AsyncSession, data: Dict[str, Any]) -> Link:
        """
        Insert a new link.

        Args:
            db: Database session
            data: Link field values

        Returns:
            The created Link entity

        Raises:
            DuplicateEntityError: If the short code is already taken
            RepositoryError: On other database errors
        """
        link = self.model_type(**data)
        try:
            db.add(link)
            await db.flush()
            await db.refresh(link)
            return link
        except IntegrityError as e:
            await db.rollback()
            self._raise_integrity_error(e, data.get("short_code"))
        except SQLAlchemyError as e:
            await db.rollback()
            raise RepositoryError(f"Database error creating link: {e}") from e

    async def update_link(self, db: AsyncSession, link: Link, changes: Dict[str, Any]) -> Link:
        """
        Apply field changes to an existing link.

        Raises:
            DuplicateEntityError: If a changed short code is already taken
            RepositoryError: On other database errors
        """
        for field, value in changes.items():
            setattr(link, field, value)
        link.updated_at = utcnow()

        try:
            await db.flush()
            await db.refresh(link)
            return link
        except IntegrityError as e:
            short_code = changes.get("short_code")
            await db.rollback()
            self._raise_integrity_error(e, short_code)
        except SQLAlchemyError as e:
            await db.rollback()
            raise RepositoryError(f"Database error updating link: {e}") from e

    def _raise_integrity_error(self, error: IntegrityError, short_code: Optional[str]) -> None:
        # Only the driver message names the violated column; str(error) also carries the SQL
        if "short_code" in str(error.orig):
            raise DuplicateEntityError(self.model_type, "short_code", short_code) from error
        raise RepositoryError(f"Database integrity error: {error.orig}") from error

    async def short_code_exists(self, db: AsyncSession, short_code: str) -> bool:
        """Check if any link, whatever its state, already uses the short code."""
        return await self.exists(db, short_code=short_code)

    async def get_active_by_short_code(
        self,
        db: AsyncSession,
        short_code: str,
        now: Optional[datetime] = None
    ) -> Optional[Link]:
        """
        Find a link that may be redirected to: active and not expired.

        Args:
            db: Database session
            short_code: The short code to look up
            now: Reference time for the expiry check

        Returns:
            The Link if found and resolvable, None otherwise

        Raises:
            RepositoryError: On database errors
        """
        now = now or utcnow()
        try:
            query = select(self.model_type).where(
                and_(
                    self.model_type.short_code == short_code,
                    self.model_type.active.is_(True),
                    or_(
                        self.model_type.expires_at.is_(None),
                        self.model_type.expires_at > now
                    )
                )
            )
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error retrieving active link by short code: {e}") from e

    async def increment_click_count(self, db: AsyncSession, link_id: uuid.UUID) -> bool:
        """
        Add one click to a link with a single UPDATE statement.

        Returns:
            True if the link still exists, False otherwise

        Raises:
            RepositoryError: On database errors
        """
        try:
            stmt = (
                update(self.model_type)
                .where(self.model_type.id == link_id)
                .values(click_count=self.model_type.click_count + 1)
                .execution_options(synchronize_session=False)
            )
            result = await db.execute(stmt)
            return result.rowcount > 0
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error incrementing click count: {e}") from e

    async def list_by_owner(
        self,
        db: AsyncSession,
        owner_id: uuid.UUID,
        limit: int = 10,
        offset: int = 0
    ) -> List[Link]:
        """List an owner's links, newest first."""
        try:
            query = (
                select(self.model_type)
                .where(self.model_type.owner_id == owner_id)
                .order_by(desc(self.model_type.created_at), desc(self.model_type.id))
                .offset(offset)
                .limit(limit)
            )
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error listing links: {e}") from e

    async def count_by_owner(self, db: AsyncSession, owner_id: uuid.UUID) -> int:
        return await self.count(db, owner_id=owner_id)

    async def get_owner_stats(
        self,
        db: AsyncSession,
        owner_id: uuid.UUID,
        now: Optional[datetime] = None
    ) -> Dict[str, int]:
        """
        Aggregate link counters for one owner.

        Returns:
            Dict with total_links, total_clicks, active_links and expired_links
        """
        now = now or utcnow()
        expired = and_(
            self.model_type.expires_at.is_not(None),
            self.model_type.expires_at <= now
        )
        try:
            query = select(
                func.count(self.model_type.id),
                func.coalesce(func.sum(self.model_type.click_count), 0),
                func.coalesce(func.sum(case((self.model_type.active.is_(True), 1), else_=0)), 0),
                func.coalesce(func.sum(case((expired, 1), else_=0)), 0),
            ).where(self.model_type.owner_id == owner_id)

            total_links, total_clicks, active_links, expired_links = (await db.execute(query)).one()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error computing link stats: {e}") from e

        return {
            "total_links": int(total_links),
            "total_clicks": int(total_clicks),
            "active_links": int(active_links),
            "expired_links": int(expired_links),
        }

"""Short link data models.

This module defines the Link model mapping a globally unique short code
to the original URL it redirects to.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index
from sqlmodel import Field, SQLModel

from link_shortener.models.base import ensure_utc, utcnow


class LinkBase(SQLModel):
    """Base model for link data."""

    original_url: str = Field(
        max_length=2048,
        description="The normalized URL to redirect to"
    )
    short_code: str = Field(
        max_length=20,
        unique=True,
        index=True,
        description="Globally unique code used in the redirect path"
    )
    title: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Optional free text label"
    )
    expires_at: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        description="When this link stops resolving (null means never)"
    )


class Link(LinkBase, table=True):
    """
    Short link owned by a user.

    ``click_count`` only grows, through the asynchronous increment made
    after each successful redirect. Inactive or expired links never
    resolve for redirects.
    """

    __tablename__ = "links"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: uuid.UUID = Field(
        foreign_key="users.id",
        ondelete="CASCADE",
        index=True
    )
    click_count: int = Field(default=0, ge=0)
    active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    __table_args__ = (
        Index("ix_links_owner_created_at", "owner_id", "created_at"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the link has expired.

        Returns:
            bool: True if the expiry time has passed, False otherwise
        """
        if self.expires_at is None:
            return False
        return ensure_utc(self.expires_at) <= ensure_utc(now or utcnow())

    def is_resolvable(self, now: Optional[datetime] = None) -> bool:
        """Whether the link may be used for a redirect."""
        return self.active and not self.is_expired(now)

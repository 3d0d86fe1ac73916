"""User account model."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from link_shortener.models.base import utcnow


class UserBase(SQLModel):
    """Base model for user data."""

    username: str = Field(
        max_length=50,
        unique=True,
        index=True,
        description="Unique display name"
    )
    email: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="Unique login email"
    )


class User(UserBase, table=True):
    """Registered account owning short links."""

    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    password_hash: str = Field(max_length=255)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

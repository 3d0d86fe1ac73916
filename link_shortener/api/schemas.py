"""API request and response schemas.

This module contains Pydantic models for API request validation
and response serialization.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from link_shortener.models.link import Link


class RegisterRequest(BaseModel):
    """Request schema for creating an account."""
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    """Request schema for logging in."""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Response schema for account information."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    created_at: datetime


class AuthResponse(BaseModel):
    """Response schema for register and login."""
    user: UserResponse
    token: str


class LinkCreateRequest(BaseModel):
    """Request schema for creating a link.

    The URL and alias are checked by the service so that format errors
    are reported as 400 rather than 422.
    """
    original_url: str
    custom_alias: Optional[str] = None
    title: Optional[str] = Field(None, max_length=255)
    expires_at: Optional[datetime] = None


class LinkUpdateRequest(BaseModel):
    """Request schema for updating a link; only the fields sent are changed."""
    original_url: Optional[str] = None
    custom_alias: Optional[str] = None
    title: Optional[str] = Field(None, max_length=255)
    active: Optional[bool] = None
    expires_at: Optional[datetime] = None


class LinkResponse(BaseModel):
    """Response schema for link information."""
    id: uuid.UUID
    original_url: str
    short_code: str
    short_url: str  # Full URL including base domain and redirect prefix
    title: Optional[str] = None
    click_count: int
    active: bool
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_link(cls, link: Link, short_url_base: str) -> "LinkResponse":
        return cls(
            id=link.id,
            original_url=link.original_url,
            short_code=link.short_code,
            short_url=f"{short_url_base}/{link.short_code}",
            title=link.title,
            click_count=link.click_count,
            active=link.active,
            expires_at=link.expires_at,
            created_at=link.created_at,
            updated_at=link.updated_at,
        )


class LinkListResponse(BaseModel):
    """Response schema for one page of links."""
    links: List[LinkResponse]
    total: int
    limit: int
    offset: int


class LinkStatsResponse(BaseModel):
    """Response schema for an owner's link counters."""
    total_links: int
    total_clicks: int
    active_links: int
    expired_links: int


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Response schema for errors."""
    detail: str

"""
Data models for the link shortener service.

This module imports and exports all SQLModel models used in the application.
"""

from sqlmodel import SQLModel

# Parent table before child
from link_shortener.models.user import User, UserBase
from link_shortener.models.link import Link, LinkBase
from link_shortener.models.base import ensure_utc, utcnow

__all__ = [
    "SQLModel",
    "User",
    "UserBase",
    "Link",
    "LinkBase",
    "ensure_utc",
    "utcnow",
]

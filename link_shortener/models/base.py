"""Shared helpers for the SQLModel data models."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as an aware UTC datetime, the form stored in the database."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Convert a datetime to aware UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

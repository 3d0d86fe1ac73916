"""Test utilities for link shortener tests."""

import random
import string
import uuid
from datetime import datetime
from typing import Dict, Optional, Tuple

from httpx import AsyncClient

from link_shortener.core.security import hash_password
from link_shortener.models import Link, User


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    return f"https://{random_string(8).lower()}.com/{random_string(12)}"


async def create_test_user(db, username: Optional[str] = None, password: str = "secret123") -> User:
    """Create and commit a test user."""
    username = username or f"user_{random_string(6)}"
    user = User(
        username=username,
        email=f"{username.lower()}@example.com",
        password_hash=hash_password(password)
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_test_link(
    db,
    owner_id: uuid.UUID,
    short_code: Optional[str] = None,
    original_url: Optional[str] = None,
    active: bool = True,
    expires_at: Optional[datetime] = None,
    created_at: Optional[datetime] = None,
    click_count: int = 0
) -> Link:
    """Create and commit a test link."""
    data = {
        "owner_id": owner_id,
        "short_code": short_code or random_string(8),
        "original_url": original_url or random_url(),
        "active": active,
        "expires_at": expires_at,
        "click_count": click_count,
    }
    if created_at is not None:
        data["created_at"] = created_at
    link = Link(**data)
    db.add(link)
    await db.commit()
    await db.refresh(link)
    return link


async def register_user(client: AsyncClient, username: Optional[str] = None) -> Tuple[str, Dict]:
    """Register a user through the API and return its token and user payload."""
    username = username or f"user_{random_string(6)}"
    response = await client.post("/api/auth/register", json={
        "username": username,
        "email": f"{username.lower()}@example.com",
        "password": "secret123"
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return body["token"], body["user"]


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}

"""Tests for the link and user models."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from link_shortener.models import Link, User, ensure_utc, utcnow


def make_link(**kwargs) -> Link:
    data = {
        "owner_id": uuid.uuid4(),
        "short_code": "abc",
        "original_url": "https://example.com",
    }
    data.update(kwargs)
    return Link(**data)


def test_utcnow_is_aware():
    assert utcnow().tzinfo is timezone.utc


@pytest.mark.parametrize("value, expected", [
    (datetime(2030, 1, 1, 12, 0), datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)),
    (
        datetime(2030, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2))),
        datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    ),
])
def test_ensure_utc(value, expected):
    result = ensure_utc(value)

    assert result == expected
    assert result.tzinfo is timezone.utc


@pytest.mark.parametrize("model, column", [
    (Link, "expires_at"),
    (Link, "created_at"),
    (Link, "updated_at"),
    (User, "created_at"),
    (User, "updated_at"),
])
def test_timestamp_columns_store_time_zone(model, column):
    assert model.__table__.c[column].type.timezone is True


def test_link_without_expiry_never_expires():
    assert not make_link().is_expired()


def test_link_expires_at_its_expiry_time():
    now = utcnow()
    link = make_link(expires_at=now)

    assert link.is_expired(now)
    assert not link.is_expired(now - timedelta(seconds=1))


def test_naive_expiry_is_compared_as_utc():
    now = utcnow()
    link = make_link(expires_at=(now + timedelta(minutes=1)).replace(tzinfo=None))

    assert not link.is_expired(now)
    assert link.is_expired(now + timedelta(minutes=1))


def test_is_resolvable():
    now = utcnow()

    assert make_link().is_resolvable(now)
    assert not make_link(active=False).is_resolvable(now)
    assert not make_link(expires_at=now - timedelta(days=1)).is_resolvable(now)

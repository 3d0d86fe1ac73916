"""Tests for fire-and-forget click counting."""

import uuid

import pytest

from link_shortener.repositories import LinkRepository, RepositoryError
from link_shortener.services.clicks import ClickTracker
from tests.utils import create_test_link, create_test_user


class FailingLinkRepository(LinkRepository):
    async def increment_click_count(self, db, link_id):
        raise RepositoryError("database unavailable")


@pytest.mark.service
@pytest.mark.asyncio
async def test_tracked_clicks_are_counted(test_db, session_factory):
    owner = await create_test_user(test_db)
    link = await create_test_link(test_db, owner.id)
    tracker = ClickTracker(session_factory=session_factory)

    for _ in range(3):
        tracker.track(link.id)
    await tracker.drain()

    await test_db.refresh(link)
    assert link.click_count == 3
    assert tracker.pending == 0


@pytest.mark.service
@pytest.mark.asyncio
async def test_failed_increment_is_swallowed(session_factory):
    tracker = ClickTracker(session_factory=session_factory, link_repository=FailingLinkRepository())

    task = tracker.track(uuid.uuid4())
    await tracker.drain()

    assert task.done()
    assert task.exception() is None


@pytest.mark.service
@pytest.mark.asyncio
async def test_click_for_missing_link_is_dropped(session_factory):
    tracker = ClickTracker(session_factory=session_factory)

    task = tracker.track(uuid.uuid4())
    await tracker.drain()

    assert task.exception() is None


@pytest.mark.service
@pytest.mark.asyncio
async def test_drain_without_pending_clicks(session_factory):
    await ClickTracker(session_factory=session_factory).drain()

"""Tests for the link repository."""

import uuid
from datetime import timedelta

import pytest
import pytest_asyncio

from link_shortener.models import utcnow
from link_shortener.repositories import DuplicateEntityError, LinkRepository
from tests.utils import create_test_link, create_test_user, random_url


@pytest.mark.repository
class TestLinkRepository:
    """Test suite for link repository."""

    @pytest.fixture
    def link_repository(self):
        return LinkRepository()

    @pytest_asyncio.fixture
    async def owner(self, test_db):
        return await create_test_user(test_db)

    @pytest.mark.asyncio
    async def test_create_link(self, test_db, link_repository, owner):
        url = random_url()

        link = await link_repository.create_link(test_db, {
            "owner_id": owner.id,
            "original_url": url,
            "short_code": "created",
        })

        assert link.id is not None
        assert link.click_count == 0
        assert link.active is True

        found = await link_repository.get_by_id(test_db, link.id)
        assert found is not None
        assert found.original_url == url

    @pytest.mark.asyncio
    async def test_duplicate_short_code_raises(self, test_db, link_repository, owner):
        await create_test_link(test_db, owner.id, short_code="dupe")

        with pytest.raises(DuplicateEntityError) as exc_info:
            await link_repository.create_link(test_db, {
                "owner_id": owner.id,
                "original_url": random_url(),
                "short_code": "dupe",
            })

        assert exc_info.value.field_name == "short_code"
        assert exc_info.value.value == "dupe"

    @pytest.mark.asyncio
    async def test_update_to_taken_code_raises(self, test_db, link_repository, owner):
        await create_test_link(test_db, owner.id, short_code="first")
        second = await create_test_link(test_db, owner.id, short_code="second")

        with pytest.raises(DuplicateEntityError):
            await link_repository.update_link(test_db, second, {"short_code": "first"})

    @pytest.mark.asyncio
    async def test_update_link_touches_updated_at(self, test_db, link_repository, owner):
        link = await create_test_link(test_db, owner.id)
        before = link.updated_at

        updated = await link_repository.update_link(test_db, link, {"title": "Renamed"})

        assert updated.title == "Renamed"
        assert updated.updated_at >= before

    @pytest.mark.asyncio
    async def test_short_code_exists(self, test_db, link_repository, owner):
        await create_test_link(test_db, owner.id, short_code="exists", active=False)

        assert await link_repository.short_code_exists(test_db, "exists")
        assert not await link_repository.short_code_exists(test_db, "missing")

    @pytest.mark.asyncio
    async def test_active_lookup_skips_inactive_and_expired(self, test_db, link_repository, owner):
        now = utcnow()
        await create_test_link(test_db, owner.id, short_code="live")
        await create_test_link(test_db, owner.id, short_code="future", expires_at=now + timedelta(days=1))
        await create_test_link(test_db, owner.id, short_code="off", active=False)
        await create_test_link(test_db, owner.id, short_code="gone", expires_at=now - timedelta(seconds=1))

        assert await link_repository.get_active_by_short_code(test_db, "live") is not None
        assert await link_repository.get_active_by_short_code(test_db, "future") is not None
        assert await link_repository.get_active_by_short_code(test_db, "off") is None
        assert await link_repository.get_active_by_short_code(test_db, "gone") is None

    @pytest.mark.asyncio
    async def test_increment_click_count(self, test_db, link_repository, owner):
        link = await create_test_link(test_db, owner.id)

        assert await link_repository.increment_click_count(test_db, link.id)
        assert await link_repository.increment_click_count(test_db, link.id)
        await test_db.commit()
        await test_db.refresh(link)

        assert link.click_count == 2
        assert not await link_repository.increment_click_count(test_db, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_by_owner_newest_first(self, test_db, link_repository, owner):
        other = await create_test_user(test_db)
        now = utcnow()
        for offset, code in enumerate(["oldest", "middle", "newest"]):
            await create_test_link(test_db, owner.id, short_code=code, created_at=now + timedelta(seconds=offset))
        await create_test_link(test_db, other.id, short_code="foreign")

        page = await link_repository.list_by_owner(test_db, owner.id, limit=2, offset=0)
        rest = await link_repository.list_by_owner(test_db, owner.id, limit=2, offset=2)

        assert [link.short_code for link in page] == ["newest", "middle"]
        assert [link.short_code for link in rest] == ["oldest"]
        assert await link_repository.count_by_owner(test_db, owner.id) == 3

    @pytest.mark.asyncio
    async def test_owner_stats(self, test_db, link_repository, owner):
        now = utcnow()
        await create_test_link(test_db, owner.id, click_count=5)
        await create_test_link(test_db, owner.id, click_count=2, active=False)
        await create_test_link(test_db, owner.id, expires_at=now - timedelta(hours=1))

        stats = await link_repository.get_owner_stats(test_db, owner.id)

        assert stats == {
            "total_links": 3,
            "total_clicks": 7,
            "active_links": 2,
            "expired_links": 1,
        }

    @pytest.mark.asyncio
    async def test_owner_stats_without_links(self, test_db, link_repository, owner):
        stats = await link_repository.get_owner_stats(test_db, owner.id)

        assert stats == {"total_links": 0, "total_clicks": 0, "active_links": 0, "expired_links": 0}

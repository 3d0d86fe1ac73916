"""Tests for the link service."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from link_shortener.models import Link, ensure_utc, utcnow
from link_shortener.repositories import DuplicateEntityError, LinkRepository, RepositoryError
from link_shortener.services.allocator import ShortCodeAllocator
from link_shortener.services.exceptions import (
    AliasConflictError,
    InvalidAliasError,
    InvalidURLError,
    LinkAccessDeniedError,
    LinkNotFoundError,
    ShortCodeExhaustedError,
)
from link_shortener.services.links import LinkService
from tests.utils import create_test_link, create_test_user


class RacingLinkRepository:
    """Every code looks free, but the first ``collisions`` inserts lose a race."""

    def __init__(self, collisions=0, error=None):
        self.collisions = collisions
        self.error = error
        self.inserted = []

    async def short_code_exists(self, db, short_code):
        return False

    async def create_link(self, db, data):
        self.inserted.append(data["short_code"])
        if self.error is not None:
            raise self.error
        if self.collisions:
            self.collisions -= 1
            raise DuplicateEntityError(Link, "short_code", data["short_code"])
        return Link(**data)


@pytest.fixture
def mock_db():
    return AsyncMock(spec=AsyncSession)


def racing_service(repository, max_attempts=3):
    return LinkService(repository, allocator=ShortCodeAllocator(repository, max_attempts=max_attempts))


@pytest.mark.service
class TestLinkCreationRaces:
    """Write-phase collisions surfaced by the unique index."""

    @pytest.mark.asyncio
    async def test_generated_code_is_retried_after_write_collision(self, mock_db):
        repository = RacingLinkRepository(collisions=1)
        service = racing_service(repository)

        link = await service.create_link(mock_db, owner_id=uuid.uuid4(), original_url="example.com")

        assert len(repository.inserted) == 2
        assert link.short_code == repository.inserted[-1]
        assert link.original_url == "https://example.com"
        mock_db.commit.assert_awaited()

    @pytest.mark.asyncio
    async def test_alias_write_collision_is_a_conflict(self, mock_db):
        repository = RacingLinkRepository(collisions=1)
        service = racing_service(repository)

        with pytest.raises(AliasConflictError):
            await service.create_link(
                mock_db,
                owner_id=uuid.uuid4(),
                original_url="example.com",
                custom_alias="raced"
            )

        assert repository.inserted == ["raced"]
        mock_db.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_persistent_write_collisions_exhaust(self, mock_db):
        repository = RacingLinkRepository(collisions=10)
        service = racing_service(repository, max_attempts=3)

        with pytest.raises(ShortCodeExhaustedError):
            await service.create_link(mock_db, owner_id=uuid.uuid4(), original_url="example.com")

        assert len(repository.inserted) == 3

    @pytest.mark.asyncio
    async def test_repository_errors_propagate_unchanged(self, mock_db):
        error = RepositoryError("connection lost")
        service = racing_service(RacingLinkRepository(error=error))

        with pytest.raises(RepositoryError) as exc_info:
            await service.create_link(mock_db, owner_id=uuid.uuid4(), original_url="example.com")

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_resolve_redirect_rechecks_the_loaded_link(self, mock_db):
        repository = AsyncMock(spec=LinkRepository)
        repository.get_active_by_short_code.return_value = Link(
            owner_id=uuid.uuid4(),
            short_code="edge",
            original_url="https://example.com",
            expires_at=datetime(2000, 1, 1)
        )
        service = LinkService(repository)

        with pytest.raises(LinkNotFoundError):
            await service.resolve_redirect(mock_db, "edge")

        repository.get_active_by_short_code.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_url_is_rejected_before_allocation(self, mock_db):
        repository = RacingLinkRepository()
        service = racing_service(repository)

        with pytest.raises(InvalidURLError):
            await service.create_link(mock_db, owner_id=uuid.uuid4(), original_url="https://bad url")

        assert repository.inserted == []


@pytest.mark.service
class TestLinkService:
    """Link service against a SQLite database."""

    @pytest.fixture
    def link_service(self):
        return LinkService(LinkRepository())

    @pytest_asyncio.fixture
    async def owner(self, test_db):
        return await create_test_user(test_db)

    @pytest.mark.asyncio
    async def test_create_with_alias_and_aware_expiry(self, test_db, link_service, owner):
        expires_at = datetime(2099, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        link = await link_service.create_link(
            test_db,
            owner_id=owner.id,
            original_url=" http://example.com/page ",
            custom_alias="my-page",
            title="Page",
            expires_at=expires_at
        )

        assert link.short_code == "my-page"
        assert link.original_url == "http://example.com/page"
        assert ensure_utc(link.expires_at) == datetime(2099, 1, 1, 10, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_create_with_invalid_alias(self, test_db, link_service, owner):
        with pytest.raises(InvalidAliasError):
            await link_service.create_link(
                test_db,
                owner_id=owner.id,
                original_url="example.com",
                custom_alias="x"
            )

    @pytest.mark.asyncio
    async def test_get_link_checks_owner(self, test_db, link_service, owner):
        other = await create_test_user(test_db)
        link = await create_test_link(test_db, owner.id)

        assert (await link_service.get_link(test_db, owner.id, link.id)).id == link.id
        with pytest.raises(LinkAccessDeniedError):
            await link_service.get_link(test_db, other.id, link.id)
        with pytest.raises(LinkNotFoundError):
            await link_service.get_link(test_db, owner.id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_update_renames_and_clears_fields(self, test_db, link_service, owner):
        link = await create_test_link(test_db, owner.id, short_code="before", expires_at=utcnow() + timedelta(days=1))

        updated = await link_service.update_link(
            test_db,
            owner_id=owner.id,
            link_id=link.id,
            changes={"custom_alias": "after", "expires_at": None, "title": None, "original_url": "other.org"}
        )

        assert updated.short_code == "after"
        assert updated.expires_at is None
        assert updated.title is None
        assert updated.original_url == "https://other.org"

    @pytest.mark.asyncio
    async def test_update_keeping_own_alias_is_noop(self, test_db, link_service, owner):
        link = await create_test_link(test_db, owner.id, short_code="stay")

        updated = await link_service.update_link(
            test_db,
            owner_id=owner.id,
            link_id=link.id,
            changes={"custom_alias": "stay", "active": False}
        )

        assert updated.short_code == "stay"
        assert updated.active is False

    @pytest.mark.asyncio
    async def test_update_to_taken_alias_conflicts(self, test_db, link_service, owner):
        await create_test_link(test_db, owner.id, short_code="taken")
        link = await create_test_link(test_db, owner.id, short_code="mine")

        with pytest.raises(AliasConflictError):
            await link_service.update_link(
                test_db,
                owner_id=owner.id,
                link_id=link.id,
                changes={"custom_alias": "taken"}
            )

    @pytest.mark.asyncio
    async def test_resolve_redirect(self, test_db, link_service, owner):
        await create_test_link(test_db, owner.id, short_code="go", original_url="https://example.com")
        await create_test_link(test_db, owner.id, short_code="stale", expires_at=utcnow() - timedelta(minutes=1))

        assert (await link_service.resolve_redirect(test_db, "go")).original_url == "https://example.com"
        with pytest.raises(LinkNotFoundError):
            await link_service.resolve_redirect(test_db, "stale")
        with pytest.raises(LinkNotFoundError):
            await link_service.resolve_redirect(test_db, "unknown")

    @pytest.mark.asyncio
    async def test_delete_link(self, test_db, link_service, owner):
        link = await create_test_link(test_db, owner.id)

        await link_service.delete_link(test_db, owner_id=owner.id, link_id=link.id)

        with pytest.raises(LinkNotFoundError):
            await link_service.get_link(test_db, owner.id, link.id)
